"""
Localization stores.

- .strings: flat key/value with comments
- .json: flat key/value or plural forms
- .xcstrings: String Catalog with languages, states and plural variations
"""

from l10n_gpt.store.base import LocalizationResource, UnitValue, load_resource

__all__ = [
    "LocalizationResource",
    "UnitValue",
    "load_resource",
]
