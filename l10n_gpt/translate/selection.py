"""
Completeness filter: decide which source entries need translating.

With skip_translated off every source entry is a task. With it on:
- Simple entry: task if the target lacks the key, or the target value is
  empty while the source value is not
- Variant entry: task if any non-empty source form is missing or empty in
  the target

Tasks come out in source order, and the same inputs always produce the
same tasks.
"""

from __future__ import annotations

from typing import Mapping, Optional

from l10n_gpt.models import (
    LocalizationKey,
    LocalizationUnit,
    SimpleUnit,
    TranslationTask,
    VariantUnit,
)


def needs_translation(
    source: LocalizationUnit,
    target: Optional[LocalizationUnit],
) -> bool:
    """Whether a source unit still lacks a complete translation."""
    if target is None:
        return True

    if isinstance(source, SimpleUnit):
        if not isinstance(target, SimpleUnit):
            # Target holds plural forms for a plain source string
            return bool(source.value)
        return not target.value and bool(source.value)

    if isinstance(source, VariantUnit):
        if not isinstance(target, VariantUnit):
            return not source.is_empty
        for tag, form in source.forms.items():
            if not form.value:
                continue
            translated = target.forms.get(tag)
            if translated is None or not translated.value:
                return True
        return False

    raise TypeError(f"Unsupported localization unit: {type(source).__name__}")


def select_tasks(
    source: Mapping[LocalizationKey, LocalizationUnit],
    target: Mapping[LocalizationKey, LocalizationUnit],
    skip_translated: bool = True,
) -> list[TranslationTask]:
    """Build the pending task list.

    Args:
        source: Source resource content
        target: Target resource content (possibly empty)
        skip_translated: Leave out entries the target already translates

    Returns:
        Tasks in source iteration order
    """
    tasks = []
    for key, unit in source.items():
        if skip_translated and not needs_translation(unit, target.get(key)):
            continue
        tasks.append(TranslationTask(key=key, unit=unit, index=len(tasks)))
    return tasks
