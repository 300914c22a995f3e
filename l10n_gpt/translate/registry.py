"""
Key association registry for batch requests.

Real localization keys can hold anything (spaces, dots, format
specifiers, non-ASCII text). Inside a batch prompt each key is replaced
by a sanitized token: upper-cased, with every run of characters other
than ASCII letters and digits collapsed into one underscore.

    "settings.title"   -> "SETTINGS_TITLE"
    "%lld items left"  -> "_LLD_ITEMS_LEFT"

The registry maps tokens back to keys for exactly one batch. Two keys of
one batch can sanitize to the same token; the later key then replaces
the earlier one. The collision is recorded and logged.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Optional

from l10n_gpt.models import LocalizationKey

logger = logging.getLogger(__name__)

_NON_ALNUM = re.compile(r"[^A-Z0-9]+")


def sanitize_key(key: str) -> str:
    """Derive the batch token for a localization key."""
    return _NON_ALNUM.sub("_", key.upper())


@dataclass
class KeyAssociationRegistry:
    """Token -> key mapping, valid for the lifetime of one batch."""
    mappings: dict[str, LocalizationKey] = field(default_factory=dict)
    collisions: list[tuple[str, LocalizationKey, LocalizationKey]] = field(default_factory=list)

    def register(self, key: LocalizationKey) -> str:
        """Record a key and return its token."""
        token = sanitize_key(key)
        previous = self.mappings.get(token)
        if previous is not None and previous != key:
            self.collisions.append((token, previous, key))
            logger.warning(
                f"Keys {previous!r} and {key!r} both sanitize to {token!r}; "
                f"{key!r} replaces {previous!r} in this batch"
            )
        self.mappings[token] = key
        return token

    def resolve(self, token: Optional[str]) -> Optional[LocalizationKey]:
        """Map a token from a model answer back to its key.

        The token is sanitized again first, so an answer that changed its
        case or punctuation still resolves. Empty tokens never resolve.
        """
        if not token:
            return None
        return self.mappings.get(sanitize_key(str(token)))

    @property
    def tokens(self) -> list[str]:
        return list(self.mappings)

    def __contains__(self, token: str) -> bool:
        return token in self.mappings

    def __len__(self) -> int:
        return len(self.mappings)

    def clear(self) -> None:
        """Forget all mappings; later lookups resolve nothing."""
        self.mappings.clear()
        self.collisions.clear()
