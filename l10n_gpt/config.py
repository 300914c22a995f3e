"""
Run configuration for l10n-gpt.

TranslateConfig holds every option a translation run recognises. The CLI
fills it from command-line flags and GPT_* environment variables; library
users construct it directly.

Batching mode follows from the config:
- max_input_tokens set: token-budget batches (wins over batch_size)
- batch_size >= 1: fixed-size batches of structured requests
- otherwise: one string per request

Example:
    >>> config = TranslateConfig(target_language="de", batch_size=20)
    >>> config.validate()
    >>> config.batch_mode
    <BatchMode.FIXED: 'fixed'>
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from l10n_gpt.errors import ConfigError


APP_NAME = "l10n-gpt"

DEFAULT_MODEL = "gpt-4o-mini"
DEFAULT_TEMPERATURE = 0.5
DEFAULT_REQUEST_TIMEOUT = 30.0
DEFAULT_MAX_RETRIES = 10
DEFAULT_RETRY_DELAY = 1.0


class BatchMode(Enum):
    SINGLE = "single"
    FIXED = "fixed"
    TOKEN_BUDGET = "token_budget"


@dataclass
class TranslateConfig:
    """Configuration for a translation run."""
    # Languages
    source_language: str = "auto"
    target_language: str = "en"

    # Remote service
    model: str = DEFAULT_MODEL
    temperature: float = DEFAULT_TEMPERATURE
    request_timeout: float = DEFAULT_REQUEST_TIMEOUT
    api_key: Optional[str] = None
    base_url: Optional[str] = None

    # Selection and prompting
    skip_translated: bool = True
    common_context: Optional[str] = None

    # Batching
    batch_size: Optional[int] = None
    max_input_tokens: Optional[int] = None

    # Pacing and retries
    pacing_interval: Optional[float] = None  # defaults to request_timeout
    max_retries: int = DEFAULT_MAX_RETRIES
    retry_delay: float = DEFAULT_RETRY_DELAY

    # Write-back
    mark_for_review: bool = False

    @property
    def batch_mode(self) -> BatchMode:
        if self.max_input_tokens:
            return BatchMode.TOKEN_BUDGET
        if self.batch_size:
            return BatchMode.FIXED
        return BatchMode.SINGLE

    @property
    def effective_pacing_interval(self) -> float:
        if self.pacing_interval is not None:
            return self.pacing_interval
        return self.request_timeout

    def validate(self) -> None:
        """Raise ConfigError if any option is out of range."""
        if not 0.0 <= self.temperature <= 2.0:
            raise ConfigError(
                f"temperature must be between 0 and 2, got {self.temperature}"
            )
        if self.request_timeout <= 0:
            raise ConfigError(
                f"request_timeout must be positive, got {self.request_timeout}"
            )
        if self.pacing_interval is not None and self.pacing_interval < 0:
            raise ConfigError(
                f"pacing_interval cannot be negative, got {self.pacing_interval}"
            )
        if self.batch_size is not None and self.batch_size < 0:
            raise ConfigError(f"batch_size cannot be negative, got {self.batch_size}")
        if self.max_input_tokens is not None and self.max_input_tokens < 1:
            raise ConfigError(
                f"max_input_tokens must be at least 1, got {self.max_input_tokens}"
            )
        if self.max_retries < 0:
            raise ConfigError(f"max_retries cannot be negative, got {self.max_retries}")
        if self.retry_delay < 0:
            raise ConfigError(f"retry_delay cannot be negative, got {self.retry_delay}")
        if not self.model:
            raise ConfigError("model identifier is required")
        if not self.target_language:
            raise ConfigError("target_language is required")

    def to_dict(self) -> dict:
        """Serialize config for logging/debugging (the API key is never included)."""
        return {
            "source_language": self.source_language,
            "target_language": self.target_language,
            "model": self.model,
            "temperature": self.temperature,
            "request_timeout": self.request_timeout,
            "skip_translated": self.skip_translated,
            "batch_mode": self.batch_mode.value,
            "batch_size": self.batch_size,
            "max_input_tokens": self.max_input_tokens,
            "max_retries": self.max_retries,
            "mark_for_review": self.mark_for_review,
        }
