"""
Pacing between requests.

After every request except the last one the orchestrator waits for the
configured interval to stay under the service's rate limits. The wait is
done in steps so a progress display can follow along; both the sleep
function and the progress callback are injected.
"""

from __future__ import annotations

import time
from typing import Callable, Optional

# (elapsed seconds, total seconds)
PacingCallback = Callable[[float, float], None]


class PacingScheduler:
    """Timed wait between requests with proportional progress."""

    def __init__(
        self,
        interval: float,
        sleep: Callable[[float], None] = time.sleep,
        progress_callback: Optional[PacingCallback] = None,
        step: float = 1.0,
    ):
        if interval < 0:
            raise ValueError(f"pacing interval cannot be negative, got {interval}")
        if step <= 0:
            raise ValueError(f"pacing step must be positive, got {step}")
        self.interval = interval
        self.sleep = sleep
        self.progress_callback = progress_callback or (lambda elapsed, total: None)
        self.step = step

    def wait(self, seconds: Optional[float] = None) -> float:
        """Suspend for ``seconds`` (default: the interval). Returns the time waited."""
        total = self.interval if seconds is None else seconds
        elapsed = 0.0
        while elapsed < total:
            self.progress_callback(elapsed, total)
            chunk = min(self.step, total - elapsed)
            self.sleep(chunk)
            elapsed += chunk
        if total > 0:
            self.progress_callback(total, total)
        return elapsed

    @staticmethod
    def fraction(elapsed: float, total: float) -> float:
        """Progress as a value between 0 and 1."""
        if total <= 0:
            return 1.0
        return max(0.0, min(1.0, elapsed / total))
