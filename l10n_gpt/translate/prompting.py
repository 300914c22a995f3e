"""
Prompt construction for single strings and batches.

Single prompt: plain instructions, then the common context, the string's
own comment, the language pair and the literal source text. The model
answers with the translation only.

Batch prompt: instructions to answer with one JSON array, the common
context and language pair, then a fenced JSON array of entries:

    {"key": "SETTINGS_TITLE", "context": "...", "string_to_translate": "Settings"}
    {"key": "_LLD_ITEMS", "strings_to_translate": {"one": "%lld item", "other": "%lld items"}}

Entries with nothing to translate are left out. If no entry is left the
builder returns None and no request is made for the batch.
"""

from __future__ import annotations

import json
from typing import Any, Optional, Sequence

from l10n_gpt.config import TranslateConfig
from l10n_gpt.models import SimpleUnit, TranslationTask, VariantUnit
from l10n_gpt.translate.registry import sanitize_key


PROMPT_FENCE = '"""'

LANGUAGE_NAMES = {
    "ar": "Arabic",
    "ca": "Catalan",
    "cs": "Czech",
    "da": "Danish",
    "de": "German",
    "el": "Greek",
    "en": "English",
    "en-GB": "British English",
    "es": "Spanish",
    "fi": "Finnish",
    "fr": "French",
    "he": "Hebrew",
    "hi": "Hindi",
    "hu": "Hungarian",
    "id": "Indonesian",
    "it": "Italian",
    "ja": "Japanese",
    "ko": "Korean",
    "nb": "Norwegian Bokmål",
    "nl": "Dutch",
    "pl": "Polish",
    "pt": "Portuguese",
    "pt-BR": "Brazilian Portuguese",
    "ro": "Romanian",
    "ru": "Russian",
    "sk": "Slovak",
    "sv": "Swedish",
    "th": "Thai",
    "tr": "Turkish",
    "uk": "Ukrainian",
    "vi": "Vietnamese",
    "zh-Hans": "Simplified Chinese",
    "zh-Hant": "Traditional Chinese",
}


def language_name(tag: Optional[str]) -> str:
    """Human-readable name for a language tag, e.g. 'de' -> 'German (de)'."""
    if not tag or tag == "auto":
        return "the language of the source text (detect it)"
    name = LANGUAGE_NAMES.get(tag) or LANGUAGE_NAMES.get(tag.split("-")[0])
    return f"{name} ({tag})" if name else tag


class PromptBuilder:
    """Render prompts from tasks and the run configuration."""

    def __init__(self, config: TranslateConfig):
        self.config = config

    def _common_context(self) -> list[str]:
        if not self.config.common_context:
            return []
        return ["Common context:", self.config.common_context.strip(), ""]

    def _language_lines(self) -> list[str]:
        return [
            f"Source language: {language_name(self.config.source_language)}",
            f"Target language: {language_name(self.config.target_language)}",
            "",
        ]

    def build_single_prompt(self, task: TranslationTask) -> str:
        """Prompt for exactly one Simple unit."""
        if not isinstance(task.unit, SimpleUnit):
            raise TypeError(f"Single prompts only take simple strings, got {task.key!r}")

        parts = [
            "Translate exactly one string from an app's localization file.",
            "Answer with the translation only: no quotes, no notes, no explanations.",
            "Keep format specifiers and placeholders such as %@, %d, %1$s or {name} unchanged.",
            "",
        ]
        parts.extend(self._common_context())
        if task.unit.comment:
            parts.extend(["Context for this string:", task.unit.comment.strip(), ""])
        parts.extend(self._language_lines())
        parts.append("String to translate:")
        parts.append(task.unit.value)
        return "\n".join(parts)

    def batch_entries(self, tasks: Sequence[TranslationTask]) -> list[dict[str, Any]]:
        """Serializable entries for a batch, skipping units with no text."""
        entries = []
        for task in tasks:
            unit = task.unit
            entry: dict[str, Any] = {"key": sanitize_key(task.key)}
            if unit.comment:
                entry["context"] = unit.comment

            if isinstance(unit, SimpleUnit):
                if not unit.value:
                    continue
                entry["string_to_translate"] = unit.value
            elif isinstance(unit, VariantUnit):
                forms = unit.non_empty_forms()
                if not forms:
                    continue
                entry["strings_to_translate"] = forms
            else:
                raise TypeError(f"Unsupported localization unit: {type(unit).__name__}")

            entries.append(entry)
        return entries

    def build_batch_prompt(self, tasks: Sequence[TranslationTask]) -> Optional[str]:
        """Prompt for a structured batch, or None if nothing needs translating."""
        entries = self.batch_entries(tasks)
        if not entries:
            return None

        parts = [
            "Translate the strings of an app's localization file.",
            "Respond with a single JSON array and nothing else.",
            "Return one element per input element. Keep each \"key\" exactly as given "
            "and omit \"context\".",
            "For \"string_to_translate\" put the translated string as its value. For "
            "\"strings_to_translate\" keep the plural-form names and translate each value.",
            "Keep format specifiers and placeholders such as %@, %d, %1$s or {name} unchanged.",
            "",
        ]
        parts.extend(self._common_context())
        parts.extend(self._language_lines())
        parts.append(PROMPT_FENCE)
        parts.append(json.dumps(entries, ensure_ascii=False, indent=2))
        parts.append(PROMPT_FENCE)
        return "\n".join(parts)
