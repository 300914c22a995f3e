"""
Entry point for running l10n-gpt as a module.

Usage:
    python -m l10n_gpt --help
    python -m l10n_gpt translate en.lproj/Localizable.strings de.lproj/Localizable.strings -l de
    python -m l10n_gpt keys show
"""
from .cli import app


if __name__ == "__main__":
    app()
