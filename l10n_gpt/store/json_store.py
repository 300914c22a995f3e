"""
JSON localization store.

    {
      "greeting": "Hello",
      "items": {"one": "%d item", "other": "%d items"}
    }

String values are Simple units, objects of plural-form tag -> string are
Variant units. JSON has no room for comments or states.
"""

from __future__ import annotations

import json
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


class JsonResource(LocalizationResource):
    """Flat JSON object of strings and plural-form objects."""

    supports_variants = True

    def __init__(self, path: Path, language: Optional[str] = None):
        super().__init__(path, language)
        self._data: dict[str, Any] = {}
        if self.path.exists():
            try:
                data = json.loads(self.path.read_text(encoding="utf-8-sig") or "{}")
            except (OSError, ValueError) as e:
                raise StoreError(f"Cannot read {self.path}: {e}") from e
            if not isinstance(data, dict):
                raise StoreError(f"{self.path}: top-level JSON value must be an object")
            self._data = data

    def read(self) -> dict[LocalizationKey, LocalizationUnit]:
        units: dict[LocalizationKey, LocalizationUnit] = {}
        for key, value in self._data.items():
            if isinstance(value, str):
                units[key] = SimpleUnit(value)
            elif isinstance(value, dict) and all(isinstance(v, str) for v in value.values()):
                units[key] = VariantUnit.from_texts(value)
            else:
                raise StoreError(
                    f"{self.path}: value of {key!r} must be a string or an object of strings"
                )
        return units

    def update(
        self,
        key: LocalizationKey,
        value: UnitValue,
        comment: Optional[str] = None,
        state: Optional[TranslationState] = None,
        language: Optional[str] = None,
    ) -> None:
        if isinstance(value, str):
            self._data[key] = value
        else:
            existing = self._data.get(key)
            forms = dict(existing) if isinstance(existing, dict) else {}
            forms.update(value)
            self._data[key] = forms

    def write(self) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(
                json.dumps(self._data, indent=2, ensure_ascii=False) + "\n",
                encoding="utf-8",
            )
        except OSError as e:
            raise StoreError(f"Cannot write {self.path}: {e}") from e
