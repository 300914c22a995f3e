"""
l10n-gpt: translate localization files with a large language model.

Reads a source and a target localization resource, finds the entries the
target still lacks, asks a chat-completion service to translate them
(one string at a time or in JSON batches) and writes the results back,
keeping comments and translation states.

Supported formats: Apple .strings, flat/plural JSON, String Catalogs (.xcstrings).

License: MIT
"""

__version__ = "0.1.0"

from l10n_gpt.config import BatchMode, TranslateConfig
from l10n_gpt.models import (
    SimpleUnit,
    TaskResult,
    TaskStatus,
    TranslationState,
    TranslationTask,
    VariantUnit,
)
from l10n_gpt.pipeline import RunResult, TranslationOrchestrator
from l10n_gpt.store import load_resource

__all__ = [
    "BatchMode",
    "RunResult",
    "SimpleUnit",
    "TaskResult",
    "TaskStatus",
    "TranslateConfig",
    "TranslationOrchestrator",
    "TranslationState",
    "TranslationTask",
    "VariantUnit",
    "load_resource",
]
