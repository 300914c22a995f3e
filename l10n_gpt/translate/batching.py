"""
Partition pending tasks into batches.

Modes:
- SINGLE: one task per batch
- FIXED: up to batch_size consecutive tasks per batch
- TOKEN_BUDGET: consecutive tasks while the estimated prompt size stays
  within max_input_tokens; a task that is too large on its own gets a
  batch to itself

Every task lands in exactly one batch and order is preserved.
"""

from __future__ import annotations

import math
from typing import Callable, Optional, Sequence

from l10n_gpt.config import BatchMode
from l10n_gpt.models import Batch, TranslationTask


TokenEstimator = Callable[[str], int]
BatchCost = Callable[[Sequence[TranslationTask]], int]


def estimate_tokens(text: str) -> int:
    """Rough token count: one token per four characters, rounded up."""
    return math.ceil(len(text) / 4)


def fixed_size_batches(tasks: Sequence[TranslationTask], size: int) -> list[Batch]:
    if size < 1:
        raise ValueError(f"batch size must be at least 1, got {size}")
    return [
        Batch(tasks=list(tasks[i:i + size]), index=n)
        for n, i in enumerate(range(0, len(tasks), size))
    ]


def token_budget_batches(
    tasks: Sequence[TranslationTask],
    budget: int,
    cost: BatchCost,
) -> list[Batch]:
    """Greedy packing under a token budget.

    ``cost`` must not shrink when a task is added to a batch.
    """
    if budget < 1:
        raise ValueError(f"token budget must be at least 1, got {budget}")

    groups: list[list[TranslationTask]] = []
    current: list[TranslationTask] = []
    for task in tasks:
        if current and cost(current + [task]) > budget:
            groups.append(current)
            current = []
        current.append(task)
    if current:
        groups.append(current)

    return [Batch(tasks=group, index=n) for n, group in enumerate(groups)]


def make_batches(
    tasks: Sequence[TranslationTask],
    mode: BatchMode,
    batch_size: Optional[int] = None,
    max_input_tokens: Optional[int] = None,
    cost: Optional[BatchCost] = None,
) -> list[Batch]:
    """Split tasks into batches according to the batching mode."""
    if mode is BatchMode.SINGLE:
        return fixed_size_batches(tasks, 1)
    if mode is BatchMode.FIXED:
        if batch_size is None:
            raise ValueError("fixed-size batching needs batch_size")
        return fixed_size_batches(tasks, batch_size)
    if mode is BatchMode.TOKEN_BUDGET:
        if max_input_tokens is None or cost is None:
            raise ValueError("token-budget batching needs max_input_tokens and a cost function")
        return token_budget_batches(tasks, max_input_tokens, cost)
    raise ValueError(f"Unknown batch mode: {mode}")
