"""
Localization store interface.

The orchestrator only talks to a LocalizationResource:

- read(): mapping key -> unit (Simple or Variant)
- update(key, value, comment, state, language): stage one entry
- write(): persist all staged changes in one go

Concrete stores live next to this module and are picked by file
extension in load_resource().
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Mapping, Optional, Union

from l10n_gpt.errors import StoreError
from l10n_gpt.models import LocalizationKey, LocalizationUnit, TranslationState


UnitValue = Union[str, Mapping[str, str]]


class LocalizationResource(ABC):
    """Abstract localization resource bound to one file and one language."""

    #: Whether update() records translation states and languages
    supports_states: bool = False
    #: Whether Variant (plural) units can be stored
    supports_variants: bool = False

    def __init__(self, path: Path, language: Optional[str] = None):
        self.path = Path(path)
        self.language = language

    @abstractmethod
    def read(self) -> dict[LocalizationKey, LocalizationUnit]:
        """Return the resource content in file order."""

    @abstractmethod
    def update(
        self,
        key: LocalizationKey,
        value: UnitValue,
        comment: Optional[str] = None,
        state: Optional[TranslationState] = None,
        language: Optional[str] = None,
    ) -> None:
        """Set one entry. Nothing touches the file until write()."""

    @abstractmethod
    def write(self) -> None:
        """Persist the resource."""

    def __len__(self) -> int:
        return len(self.read())

    def __repr__(self) -> str:
        lang = f", language={self.language!r}" if self.language else ""
        return f"{type(self).__name__}({str(self.path)!r}{lang})"


def load_resource(path: Union[str, Path], language: Optional[str] = None) -> LocalizationResource:
    """Open a localization file, picking the store from its extension.

    Args:
        path: File to open. Flat formats may not exist yet (target files).
        language: Language view for multi-language formats (.xcstrings).

    Raises:
        StoreError: unknown extension or unreadable file
    """
    path = Path(path)
    suffix = path.suffix.lower()

    if suffix == ".strings":
        from l10n_gpt.store.strings import StringsResource
        return StringsResource(path, language)
    elif suffix == ".json":
        from l10n_gpt.store.json_store import JsonResource
        return JsonResource(path, language)
    elif suffix == ".xcstrings":
        from l10n_gpt.store.xcstrings import StringCatalogResource
        return StringCatalogResource(path, language)
    else:
        raise StoreError(
            f"Unsupported localization file: {path}. "
            "Supported extensions: .strings, .json, .xcstrings"
        )
