"""
Batch translation orchestrator for l10n-gpt.

This module drives a complete run:
1. Read source and target resources
2. Select the entries that still need translating
3. Partition them into batches
4. For each batch: build the prompt, call the service (with retries),
   parse the answer and merge successes into an in-memory overlay
5. Wait between requests to respect rate limits
6. Write the overlay back to the target and persist it once

Failures are isolated per task or batch: they are logged, recorded in
the RunResult and the run carries on.

Limitation: the target is written only once, at the very end. If the
process dies before that, every translation of the run is lost.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Callable, Mapping, Optional

from l10n_gpt.config import BatchMode, TranslateConfig
from l10n_gpt.errors import (
    EmptyResponseError,
    MalformedBatchResponse,
    RemoteServiceError,
)
from l10n_gpt.models import (
    Batch,
    LocalizationKey,
    LocalizationUnit,
    SimpleUnit,
    TaskResult,
    TaskStatus,
    TranslationState,
    TranslationTask,
    VariantUnit,
    unit_value,
)
from l10n_gpt.store.base import LocalizationResource
from l10n_gpt.translate.batching import TokenEstimator, estimate_tokens, make_batches
from l10n_gpt.translate.client import CompletionClient, CompletionRequest
from l10n_gpt.translate.pacing import PacingCallback, PacingScheduler
from l10n_gpt.translate.parsing import (
    SNIPPET_LENGTH,
    parse_batch_response,
    parse_single_response,
    response_content,
)
from l10n_gpt.translate.prompting import PromptBuilder
from l10n_gpt.translate.registry import KeyAssociationRegistry, sanitize_key
from l10n_gpt.translate.retry import RetryOutcome, RetryPolicy
from l10n_gpt.translate.selection import select_tasks

# Type alias for progress callbacks
ProgressCallback = Callable[[str, float], None]


@dataclass
class RunResult:
    """Result of a translation run.

    Holds one TaskResult per selected task plus the overlay of
    successful translations that is (or will be) written to the target.
    """
    config: TranslateConfig
    results: list[TaskResult] = field(default_factory=list)
    overlay: dict[LocalizationKey, LocalizationUnit] = field(default_factory=dict)
    batches: int = 0
    requests: int = 0
    written: int = 0
    errors: list[str] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return len(self.errors) == 0

    def by_status(self, status: TaskStatus) -> list[TaskResult]:
        return [r for r in self.results if r.status is status]

    @property
    def stats(self) -> dict:
        stats = {
            "total_tasks": len(self.results),
            "batches": self.batches,
            "requests": self.requests,
        }
        for status in TaskStatus:
            if status.is_terminal:
                stats[status.value] = len(self.by_status(status))
        stats["written"] = self.written
        return stats


class TranslationOrchestrator:
    """Drive selection, batching, remote calls and write-back.

    Usage:
        config = TranslateConfig(target_language="de", batch_size=20)
        orchestrator = TranslationOrchestrator(config, OpenAICompletionClient())
        result = orchestrator.run(
            load_resource("en.strings"),
            load_resource("de.strings"),
        )
        print(result.stats)
    """

    def __init__(
        self,
        config: TranslateConfig,
        client: CompletionClient,
        logger: Optional[logging.Logger] = None,
        sleep: Callable[[float], None] = time.sleep,
        progress_callback: Optional[ProgressCallback] = None,
        pacing_callback: Optional[PacingCallback] = None,
        estimator: TokenEstimator = estimate_tokens,
    ):
        config.validate()
        self.config = config
        self.client = client
        self.logger = logger or logging.getLogger(__name__)
        self.progress_callback = progress_callback or (lambda msg, pct: None)
        self.estimator = estimator

        self.prompt_builder = PromptBuilder(config)
        self.retry_policy = RetryPolicy(
            max_retries=config.max_retries,
            delay=config.retry_delay,
            sleep=sleep,
            logger=self.logger,
        )
        self.pacer = PacingScheduler(
            config.effective_pacing_interval,
            sleep=sleep,
            progress_callback=pacing_callback,
        )
        self._requests = 0

    # ------------------------------------------------------------------
    # Planning
    # ------------------------------------------------------------------

    def _prompt_cost(self, tasks: list[TranslationTask]) -> int:
        prompt = self.prompt_builder.build_batch_prompt(tasks)
        return self.estimator(prompt or "")

    def plan(
        self,
        source: Mapping[LocalizationKey, LocalizationUnit],
        target: Mapping[LocalizationKey, LocalizationUnit],
    ) -> list[Batch]:
        """Select pending tasks and split them into batches."""
        tasks = select_tasks(source, target, self.config.skip_translated)
        return make_batches(
            tasks,
            self.config.batch_mode,
            batch_size=self.config.batch_size,
            max_input_tokens=self.config.max_input_tokens,
            cost=self._prompt_cost,
        )

    # ------------------------------------------------------------------
    # Remote calls
    # ------------------------------------------------------------------

    def _request(self, prompt: str, label: str) -> RetryOutcome[dict]:
        request = CompletionRequest.from_prompt(
            prompt,
            model=self.config.model,
            temperature=self.config.temperature,
        )
        self._requests += 1
        return self.retry_policy.run(lambda: self.client.complete(request), label=label)

    def _exhausted_message(self, outcome: RetryOutcome) -> str:
        return f"gave up after {outcome.attempts} attempts: {outcome.error}"

    def translate_single(self, task: TranslationTask) -> TaskResult:
        """Translate one Simple unit with a plain-text prompt."""
        unit = task.unit
        if not isinstance(unit, SimpleUnit):
            raise TypeError(f"translate_single needs a simple string, got {task.key!r}")
        if not unit.value:
            self.logger.debug(f"Skipping {task.key}: empty source string")
            return TaskResult(task.key, TaskStatus.SKIPPED, message="empty source string")

        outcome = self._request(self.prompt_builder.build_single_prompt(task), task.key)
        if not outcome.succeeded:
            message = self._exhausted_message(outcome)
            self.logger.error(f"Error translating {task.key}: {message}")
            return TaskResult(task.key, TaskStatus.REMOTE_ERROR, message=message)

        try:
            text = parse_single_response(outcome.value)
        except RemoteServiceError as e:
            self.logger.error(f"Error translating {task.key}: {e}")
            return TaskResult(task.key, TaskStatus.REMOTE_ERROR, message=str(e))
        except EmptyResponseError:
            self.logger.warning(f"Unable to translate {task.key} - {unit.value}")
            return TaskResult(task.key, TaskStatus.EMPTY_RESPONSE)

        self.logger.info(f"Translating {task.key} - {unit.value} -> {text}")
        return TaskResult(task.key, TaskStatus.TRANSLATED, unit=SimpleUnit(text, unit.comment))

    def translate_structured(self, batch: Batch) -> list[TaskResult]:
        """Translate a batch with one JSON request."""
        label = f"batch {batch.index + 1}"
        registry = KeyAssociationRegistry()
        try:
            for task in batch:
                registry.register(task.key)

            results: dict[LocalizationKey, TaskResult] = {}
            included = []
            for task in batch:
                if task.unit.is_empty:
                    results[task.key] = TaskResult(
                        task.key, TaskStatus.SKIPPED, message="empty source string"
                    )
                else:
                    included.append(task)

            prompt = self.prompt_builder.build_batch_prompt(batch.tasks)
            if prompt is None:
                self.logger.info(f"Skipping {label}: nothing to translate")
                return [results[task.key] for task in batch]

            def fail_all(status: TaskStatus, message: Optional[str] = None):
                for task in included:
                    results[task.key] = TaskResult(task.key, status, message=message)
                return [results[task.key] for task in batch]

            outcome = self._request(prompt, label)
            if not outcome.succeeded:
                message = self._exhausted_message(outcome)
                self.logger.error(f"Error translating {label}: {message}")
                return fail_all(TaskStatus.REMOTE_ERROR, message)

            try:
                content = response_content(outcome.value)
            except RemoteServiceError as e:
                self.logger.error(f"Error translating {label}: {e}")
                return fail_all(TaskStatus.REMOTE_ERROR, str(e))
            except EmptyResponseError:
                self.logger.warning(f"Unable to translate {label}: empty response")
                return fail_all(TaskStatus.EMPTY_RESPONSE)

            try:
                parsed = parse_batch_response(
                    content,
                    registry,
                    {task.key: task.unit for task in batch},
                )
            except MalformedBatchResponse as e:
                self.logger.error(f"Unable to parse {label} ({e}): {e.snippet}")
                return fail_all(TaskStatus.UNPARSEABLE, e.snippet)

            unresolved = []
            for task in included:
                if sanitize_key(task.key) not in parsed.consumed:
                    unresolved.append(task.key)
                    results[task.key] = TaskResult(task.key, TaskStatus.UNRESOLVED)
                elif task.key in parsed.translations:
                    translated = parsed.translations[task.key]
                    self.logger.info(
                        f"Translating {task.key} - {_describe(task.unit)} -> {_describe(translated)}"
                    )
                    results[task.key] = TaskResult(
                        task.key, TaskStatus.TRANSLATED, unit=translated
                    )
                elif task.key in parsed.empty:
                    self.logger.warning(f"Unable to translate {task.key} - {_describe(task.unit)}")
                    results[task.key] = TaskResult(task.key, TaskStatus.EMPTY_RESPONSE)
                else:
                    # Answered, but the answer was dropped or went to a colliding key
                    results[task.key] = TaskResult(
                        task.key, TaskStatus.UNRESOLVED, message="answer not usable"
                    )

            if unresolved:
                self.logger.info(f"Not in the answer for {label}: {', '.join(unresolved)}")

            return [results[task.key] for task in batch]
        finally:
            registry.clear()

    def translate_batch(self, batch: Batch) -> list[TaskResult]:
        """Translate one batch in the mode the config selects."""
        if self.config.batch_mode is BatchMode.SINGLE and isinstance(batch.tasks[0].unit, SimpleUnit):
            return [self.translate_single(task) for task in batch]
        # Plural sets cannot be answered as one plain string, so Variant
        # units always use the structured prompt
        return self.translate_structured(batch)

    # ------------------------------------------------------------------
    # Run
    # ------------------------------------------------------------------

    def translate(
        self,
        source: Mapping[LocalizationKey, LocalizationUnit],
        target: Mapping[LocalizationKey, LocalizationUnit],
    ) -> RunResult:
        """Translate everything pending without touching any store."""
        result = RunResult(config=self.config)
        self.logger.debug(f"Run configuration: {self.config.to_dict()}")

        self.progress_callback("Selecting strings...", 0.0)
        batches = self.plan(source, target)
        result.batches = len(batches)
        total_tasks = sum(len(batch) for batch in batches)
        self.logger.info(f"Translating {total_tasks} strings in {len(batches)} batches...")

        requests_at_start = self._requests
        for i, batch in enumerate(batches):
            self.progress_callback(f"Translating batch {i + 1}/{len(batches)}...", i / len(batches))

            requests_before = self._requests
            for task_result in self.translate_batch(batch):
                result.results.append(task_result)
                if task_result.translated:
                    result.overlay[task_result.key] = task_result.unit
                elif task_result.status in (TaskStatus.REMOTE_ERROR, TaskStatus.UNPARSEABLE):
                    result.errors.append(
                        f"{task_result.key}: {task_result.status.value}"
                        + (f" ({task_result.message[:SNIPPET_LENGTH]})" if task_result.message else "")
                    )

            is_last = i == len(batches) - 1
            if not is_last and self._requests > requests_before:
                self.progress_callback("Waiting before the next request...", (i + 1) / len(batches))
                self.pacer.wait()

        result.requests = self._requests - requests_at_start
        self.progress_callback("Complete!", 1.0)
        return result

    def write_back(
        self,
        target: LocalizationResource,
        overlay: Mapping[LocalizationKey, LocalizationUnit],
    ) -> int:
        """Apply the overlay to the target and persist it with one write.

        Returns:
            Number of entries updated
        """
        state = language = None
        if target.supports_states:
            state = (
                TranslationState.NEEDS_REVIEW
                if self.config.mark_for_review
                else TranslationState.TRANSLATED
            )
            language = self.config.target_language
        elif self.config.mark_for_review:
            self.logger.warning(f"{target.path.name} has no translation states, nothing marked for review")
        self.logger.info(f"Writing {len(overlay)} strings to {target.path}...")

        written = 0
        for key, unit in overlay.items():
            if isinstance(unit, VariantUnit) and not target.supports_variants:
                self.logger.error(
                    f"{target.path.name} cannot hold plural forms, {key} not written"
                )
                continue
            target.update(
                key,
                unit_value(unit),
                unit.comment,
                state=state,
                language=language,
            )
            written += 1

        target.write()
        return written

    def run(
        self,
        source: LocalizationResource,
        target: LocalizationResource,
    ) -> RunResult:
        """Translate source into target and persist the target.

        The target is written exactly once, after all batches finished.
        """
        result = self.translate(source.read(), target.read())
        result.written = self.write_back(target, result.overlay)
        return result


def _describe(unit: LocalizationUnit) -> str:
    if isinstance(unit, SimpleUnit):
        return unit.value
    if isinstance(unit, VariantUnit):
        return ", ".join(f"{tag}: {form.value}" for tag, form in unit.forms.items())
    raise TypeError(f"Unsupported localization unit: {type(unit).__name__}")
