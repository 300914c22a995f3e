"""
Error taxonomy for l10n-gpt.

Only TransientTransportTimeout is ever retried. The other translation
errors are terminal for the task or batch that raised them; the
orchestrator records them and moves on. ConfigError and StoreError
are raised to the caller.
"""

from __future__ import annotations


class L10nGptError(Exception):
    """Base class for all l10n-gpt errors."""


class ConfigError(L10nGptError, ValueError):
    """Invalid configuration value."""


class StoreError(L10nGptError):
    """A localization file could not be read, parsed, or written."""


class TransientTransportTimeout(L10nGptError):
    """The remote call timed out before a response arrived."""


class RemoteServiceError(L10nGptError):
    """The service answered with an error payload."""


class EmptyResponseError(L10nGptError):
    """The service answered without any content."""


class MalformedBatchResponse(L10nGptError):
    """A batch answer did not contain a parseable JSON array."""

    def __init__(self, message: str, snippet: str = ""):
        super().__init__(message)
        self.snippet = snippet
