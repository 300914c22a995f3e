"""
String Catalog (.xcstrings) store.

A catalog keeps every language of an app in one JSON file, with a
translation state per key and language:

    {
      "sourceLanguage": "en",
      "strings": {
        "Hello": {
          "comment": "Greeting",
          "localizations": {
            "de": {"stringUnit": {"state": "translated", "value": "Hallo"}}
          }
        },
        "%lld items": {
          "localizations": {
            "en": {"variations": {"plural": {
              "one": {"stringUnit": {"state": "translated", "value": "%lld item"}},
              "other": {"stringUnit": {"state": "translated", "value": "%lld items"}}
            }}}
          }
        }
      },
      "version": "1.0"
    }

A StringCatalogResource is a view of the catalog in one language. In the
source language an entry without a localization reads as its own key,
which is how Xcode stores untouched source strings.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Optional

from l10n_gpt.errors import StoreError
from l10n_gpt.models import (
    LocalizationKey,
    LocalizationUnit,
    SimpleUnit,
    TranslationState,
    VariantUnit,
)
from l10n_gpt.store.base import LocalizationResource, UnitValue

logger = logging.getLogger(__name__)


class StringCatalogResource(LocalizationResource):
    """One language view of an .xcstrings catalog."""

    supports_states = True
    supports_variants = True

    def __init__(self, path: Path, language: Optional[str] = None):
        super().__init__(path, language)
        if not self.path.exists():
            raise StoreError(f"String Catalog not found: {self.path}")
        try:
            self._catalog: dict[str, Any] = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            raise StoreError(f"Cannot read {self.path}: {e}") from e
        if not isinstance(self._catalog.get("strings", {}), dict):
            raise StoreError(f"{self.path}: 'strings' must be an object")
        self._catalog.setdefault("strings", {})

    @property
    def source_language(self) -> str:
        return self._catalog.get("sourceLanguage", "en")

    @property
    def view_language(self) -> str:
        if not self.language or self.language == "auto":
            return self.source_language
        return self.language

    def read(self) -> dict[LocalizationKey, LocalizationUnit]:
        language = self.view_language
        units: dict[LocalizationKey, LocalizationUnit] = {}

        for key, entry in self._catalog["strings"].items():
            if entry.get("shouldTranslate") is False:
                continue
            comment = entry.get("comment")
            localization = entry.get("localizations", {}).get(language)

            if localization is None:
                if language == self.source_language:
                    units[key] = SimpleUnit(key, comment)
                continue

            if "stringUnit" in localization:
                units[key] = SimpleUnit(localization["stringUnit"].get("value", ""), comment)
            elif "plural" in localization.get("variations", {}):
                plural = localization["variations"]["plural"]
                units[key] = VariantUnit(
                    forms={
                        tag: SimpleUnit(form.get("stringUnit", {}).get("value", ""), comment)
                        for tag, form in plural.items()
                    },
                    comment=comment,
                )
            else:
                logger.debug(f"Skipping {key!r}: unsupported variation in {language}")

        return units

    def update(
        self,
        key: LocalizationKey,
        value: UnitValue,
        comment: Optional[str] = None,
        state: Optional[TranslationState] = None,
        language: Optional[str] = None,
    ) -> None:
        language = language or self.view_language
        state_value = (state or TranslationState.TRANSLATED).value

        entry = self._catalog["strings"].setdefault(key, {})
        if comment and not entry.get("comment"):
            entry["comment"] = comment
        localizations = entry.setdefault("localizations", {})

        if isinstance(value, str):
            localizations[language] = {
                "stringUnit": {"state": state_value, "value": value},
            }
        else:
            existing = localizations.get(language, {})
            plural = dict(existing.get("variations", {}).get("plural", {}))
            for tag, text in value.items():
                plural[tag] = {"stringUnit": {"state": state_value, "value": text}}
            localizations[language] = {"variations": {"plural": plural}}

    def write(self) -> None:
        try:
            self.path.write_text(
                json.dumps(
                    self._catalog,
                    indent=2,
                    ensure_ascii=False,
                    sort_keys=True,
                    separators=(",", " : "),
                ) + "\n",
                encoding="utf-8",
            )
        except OSError as e:
            raise StoreError(f"Cannot write {self.path}: {e}") from e
