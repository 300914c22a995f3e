"""
Tests for single and batch prompt construction.
"""

import json

import pytest

from l10n_gpt.config import TranslateConfig
from l10n_gpt.models import SimpleUnit, TranslationTask, VariantUnit
from l10n_gpt.translate.prompting import PROMPT_FENCE, PromptBuilder, language_name


def fenced_payload(prompt):
    start = prompt.index(PROMPT_FENCE) + len(PROMPT_FENCE)
    end = prompt.rindex(PROMPT_FENCE)
    return json.loads(prompt[start:end])


class TestLanguageName:
    """Test language display names."""

    def test_known_and_unknown(self):
        """Known tags get a name, unknown tags stay as they are."""
        assert language_name("de") == "German (de)"
        assert language_name("de-AT") == "German (de-AT)"
        assert language_name("xx") == "xx"

    def test_auto(self):
        """'auto' asks the model to detect the language."""
        assert "detect" in language_name("auto")


class TestSinglePrompt:
    """Test the plain-text prompt."""

    def test_contents(self):
        """Prompt holds contexts, languages and the text, in that order."""
        builder = PromptBuilder(TranslateConfig(
            source_language="en", target_language="fr", common_context="A todo app",
        ))
        task = TranslationTask("done", SimpleUnit("Done", comment="Button title"))
        prompt = builder.build_single_prompt(task)

        assert prompt.index("A todo app") < prompt.index("Button title")
        assert "Target language: French (fr)" in prompt
        assert prompt.endswith("String to translate:\nDone")

    def test_rejects_variants(self):
        """Plural units cannot use the single prompt."""
        builder = PromptBuilder(TranslateConfig())
        task = TranslationTask("n", VariantUnit.from_texts({"one": "a"}))
        with pytest.raises(TypeError):
            builder.build_single_prompt(task)


class TestBatchPrompt:
    """Test the structured JSON prompt."""

    def test_simple_entries(self):
        """Entries use sanitized keys and carry comments as context."""
        builder = PromptBuilder(TranslateConfig(target_language="es"))
        prompt = builder.build_batch_prompt([
            TranslationTask("a.title", SimpleUnit("Hello", comment="greeting")),
            TranslationTask("b", SimpleUnit("Bye")),
        ])
        assert "JSON array" in prompt
        assert fenced_payload(prompt) == [
            {"key": "A_TITLE", "context": "greeting", "string_to_translate": "Hello"},
            {"key": "B", "string_to_translate": "Bye"},
        ]

    def test_variant_entry(self):
        """Plural units are sent as strings_to_translate."""
        builder = PromptBuilder(TranslateConfig())
        unit = VariantUnit.from_texts({"one": "1 item", "other": "N items"})
        prompt = builder.build_batch_prompt([TranslationTask("items", unit)])
        assert fenced_payload(prompt) == [
            {"key": "ITEMS", "strings_to_translate": {"one": "1 item", "other": "N items"}},
        ]

    def test_empty_units_left_out(self):
        """Units without text are not sent."""
        builder = PromptBuilder(TranslateConfig())
        prompt = builder.build_batch_prompt([
            TranslationTask("a", SimpleUnit("")),
            TranslationTask("b", SimpleUnit("B")),
        ])
        assert [e["key"] for e in fenced_payload(prompt)] == ["B"]

    def test_nothing_to_translate(self):
        """A batch with only empty units builds no prompt."""
        builder = PromptBuilder(TranslateConfig())
        assert builder.build_batch_prompt([
            TranslationTask("a", SimpleUnit("")),
            TranslationTask("b", VariantUnit.from_texts({"one": ""})),
        ]) is None

    def test_non_ascii_kept(self):
        """Non-ASCII text is not escaped in the prompt."""
        builder = PromptBuilder(TranslateConfig())
        prompt = builder.build_batch_prompt([TranslationTask("a", SimpleUnit("Grüße"))])
        assert "Grüße" in prompt
