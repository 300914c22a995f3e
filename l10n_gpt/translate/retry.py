"""
Bounded retry for transport timeouts.

Only TransientTransportTimeout is retried. Error payloads and parse
failures are answers, not transport failures, and never come through
here. A call that times out on every attempt is tried max_retries + 1
times in total and then reported as exhausted.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Generic, Optional, TypeVar

from l10n_gpt.config import DEFAULT_MAX_RETRIES, DEFAULT_RETRY_DELAY
from l10n_gpt.errors import TransientTransportTimeout


T = TypeVar("T")


class RetryStatus(Enum):
    SUCCEEDED = "succeeded"
    EXHAUSTED = "exhausted"


@dataclass
class RetryOutcome(Generic[T]):
    """Result of a retried call."""
    status: RetryStatus
    attempts: int
    value: Optional[T] = None
    error: Optional[TransientTransportTimeout] = None

    @property
    def succeeded(self) -> bool:
        return self.status is RetryStatus.SUCCEEDED


class RetryPolicy:
    """Retry a call on transport timeouts, with a fixed delay between tries."""

    def __init__(
        self,
        max_retries: int = DEFAULT_MAX_RETRIES,
        delay: float = DEFAULT_RETRY_DELAY,
        sleep: Callable[[float], None] = time.sleep,
        logger: Optional[logging.Logger] = None,
    ):
        if max_retries < 0:
            raise ValueError(f"max_retries cannot be negative, got {max_retries}")
        self.max_retries = max_retries
        self.delay = delay
        self.sleep = sleep
        self.logger = logger or logging.getLogger(__name__)

    def run(self, operation: Callable[[], T], label: str = "request") -> RetryOutcome[T]:
        """Call ``operation`` until it returns or the retry bound is reached."""
        last_error: Optional[TransientTransportTimeout] = None

        for attempt in range(1, self.max_retries + 2):
            if attempt > 1:
                self.logger.warning(
                    f"Retrying {label} ({attempt - 1}/{self.max_retries}) after timeout"
                )
                self.sleep(self.delay)
            try:
                return RetryOutcome(RetryStatus.SUCCEEDED, attempts=attempt, value=operation())
            except TransientTransportTimeout as e:
                last_error = e

        return RetryOutcome(
            RetryStatus.EXHAUSTED,
            attempts=self.max_retries + 1,
            error=last_error,
        )
