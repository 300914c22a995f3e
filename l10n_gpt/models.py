"""
Core data models for l10n-gpt.

A localization resource maps keys to units. A unit is one of two closed
variants:

- SimpleUnit: a single string with an optional comment
- VariantUnit: pluralized forms (one/few/many/other...) with an optional comment

Every consumer dispatches on the two variants explicitly and raises
TypeError for anything else, so adding a third kind fails loudly.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Mapping, Optional, Union


LocalizationKey = str


class TranslationState(Enum):
    """Per-key translation state tracked by multi-language stores."""
    TRANSLATED = "translated"
    NEEDS_REVIEW = "needs_review"


@dataclass(frozen=True)
class SimpleUnit:
    """A single translatable string."""
    value: str
    comment: Optional[str] = None

    @property
    def is_empty(self) -> bool:
        return not self.value


@dataclass(frozen=True)
class VariantUnit:
    """A pluralized string: plural-form tag -> SimpleUnit."""
    forms: Mapping[str, SimpleUnit] = field(default_factory=dict)
    comment: Optional[str] = None

    @property
    def is_empty(self) -> bool:
        return not any(form.value for form in self.forms.values())

    def non_empty_forms(self) -> dict[str, str]:
        """Forms that carry text, in declaration order."""
        return {tag: form.value for tag, form in self.forms.items() if form.value}

    @classmethod
    def from_texts(
        cls,
        texts: Mapping[str, str],
        comment: Optional[str] = None,
    ) -> "VariantUnit":
        return cls(
            forms={tag: SimpleUnit(text, comment) for tag, text in texts.items()},
            comment=comment,
        )


LocalizationUnit = Union[SimpleUnit, VariantUnit]


def unit_value(unit: LocalizationUnit) -> Union[str, dict[str, str]]:
    """Plain value of a unit as handed to a store update."""
    if isinstance(unit, SimpleUnit):
        return unit.value
    if isinstance(unit, VariantUnit):
        return {tag: form.value for tag, form in unit.forms.items()}
    raise TypeError(f"Unsupported localization unit: {type(unit).__name__}")


@dataclass(frozen=True)
class TranslationTask:
    """A (key, unit) pair selected for translation.

    ``index`` is the position in source order and is used to keep
    batches and results ordered.
    """
    key: LocalizationKey
    unit: LocalizationUnit
    index: int = 0

    @property
    def comment(self) -> Optional[str]:
        return self.unit.comment


@dataclass
class Batch:
    """An ordered, non-empty run of tasks sent in one request."""
    tasks: list[TranslationTask]
    index: int = 0

    def __post_init__(self):
        if not self.tasks:
            raise ValueError("A batch needs at least one task")

    def __len__(self) -> int:
        return len(self.tasks)

    def __iter__(self):
        return iter(self.tasks)

    @property
    def keys(self) -> list[LocalizationKey]:
        return [task.key for task in self.tasks]


class TaskStatus(Enum):
    """Lifecycle of a task: PENDING -> IN_FLIGHT -> one terminal status."""
    PENDING = "pending"
    IN_FLIGHT = "in_flight"
    TRANSLATED = "translated"
    EMPTY_RESPONSE = "empty_response"
    REMOTE_ERROR = "remote_error"
    UNRESOLVED = "unresolved"
    UNPARSEABLE = "unparseable"
    SKIPPED = "skipped"

    @property
    def is_terminal(self) -> bool:
        return self not in (TaskStatus.PENDING, TaskStatus.IN_FLIGHT)


@dataclass
class TaskResult:
    """Outcome of one task.

    Attributes:
        key: The localization key
        status: Terminal status of the task
        unit: The translated unit (only for TRANSLATED)
        message: Error message or raw response snippet, when relevant
    """
    key: LocalizationKey
    status: TaskStatus
    unit: Optional[LocalizationUnit] = None
    message: Optional[str] = None

    @property
    def translated(self) -> bool:
        return self.status is TaskStatus.TRANSLATED
