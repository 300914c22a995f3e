"""
Translation core: selection, batching, prompting, parsing, retries and pacing.
"""

from l10n_gpt.translate.batching import estimate_tokens, make_batches
from l10n_gpt.translate.client import (
    CompletionClient,
    CompletionRequest,
    OpenAICompletionClient,
)
from l10n_gpt.translate.pacing import PacingScheduler
from l10n_gpt.translate.parsing import (
    BatchTranslation,
    find_json_array,
    parse_batch_response,
    parse_single_response,
)
from l10n_gpt.translate.prompting import PromptBuilder
from l10n_gpt.translate.registry import KeyAssociationRegistry, sanitize_key
from l10n_gpt.translate.retry import RetryOutcome, RetryPolicy, RetryStatus
from l10n_gpt.translate.selection import needs_translation, select_tasks

__all__ = [
    "BatchTranslation",
    "CompletionClient",
    "CompletionRequest",
    "KeyAssociationRegistry",
    "OpenAICompletionClient",
    "PacingScheduler",
    "PromptBuilder",
    "RetryOutcome",
    "RetryPolicy",
    "RetryStatus",
    "estimate_tokens",
    "find_json_array",
    "make_batches",
    "needs_translation",
    "parse_batch_response",
    "parse_single_response",
    "sanitize_key",
    "select_tasks",
]
