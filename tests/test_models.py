"""
Tests for the core data models and configuration.
"""

import pytest

from l10n_gpt.config import BatchMode, TranslateConfig
from l10n_gpt.errors import ConfigError
from l10n_gpt.models import (
    Batch,
    SimpleUnit,
    TaskResult,
    TaskStatus,
    TranslationTask,
    VariantUnit,
    unit_value,
)


class TestUnits:
    """Test SimpleUnit and VariantUnit."""

    def test_simple_unit_empty(self):
        """Empty value makes an empty unit."""
        assert SimpleUnit("").is_empty
        assert not SimpleUnit("Hello").is_empty

    def test_variant_from_texts(self):
        """from_texts copies the comment to every form."""
        unit = VariantUnit.from_texts({"one": "1 item", "other": "N items"}, comment="cart")
        assert unit.forms["one"] == SimpleUnit("1 item", "cart")
        assert unit.comment == "cart"

    def test_variant_non_empty_forms(self):
        """Only forms with text are reported."""
        unit = VariantUnit.from_texts({"zero": "", "one": "1 item", "other": "N items"})
        assert unit.non_empty_forms() == {"one": "1 item", "other": "N items"}
        assert not unit.is_empty
        assert VariantUnit.from_texts({"one": ""}).is_empty

    def test_unit_value(self):
        """unit_value returns plain strings and form dicts."""
        assert unit_value(SimpleUnit("Hi")) == "Hi"
        assert unit_value(VariantUnit.from_texts({"one": "a"})) == {"one": "a"}

    def test_unit_value_rejects_other_types(self):
        """A third kind of unit fails loudly."""
        with pytest.raises(TypeError):
            unit_value("Hi")


class TestBatchAndResults:
    """Test Batch and TaskResult."""

    def test_empty_batch_rejected(self):
        """A batch always holds at least one task."""
        with pytest.raises(ValueError):
            Batch(tasks=[])

    def test_batch_keys(self):
        """Batch keys follow task order."""
        batch = Batch([TranslationTask("b", SimpleUnit("B")), TranslationTask("a", SimpleUnit("A"))])
        assert batch.keys == ["b", "a"]
        assert len(batch) == 2

    def test_terminal_statuses(self):
        """Pending and in-flight are the only non-terminal statuses."""
        assert not TaskStatus.PENDING.is_terminal
        assert not TaskStatus.IN_FLIGHT.is_terminal
        assert TaskStatus.UNRESOLVED.is_terminal
        assert TaskResult("a", TaskStatus.TRANSLATED).translated


class TestTranslateConfig:
    """Test TranslateConfig defaults, mode selection and validation."""

    def test_defaults(self):
        """Defaults match the documented ones."""
        config = TranslateConfig()
        assert config.source_language == "auto"
        assert config.target_language == "en"
        assert config.temperature == 0.5
        assert config.request_timeout == 30.0
        assert config.skip_translated
        assert config.batch_mode is BatchMode.SINGLE

    def test_batch_mode_selection(self):
        """Token budget wins over batch size."""
        assert TranslateConfig(batch_size=5).batch_mode is BatchMode.FIXED
        assert TranslateConfig(batch_size=0).batch_mode is BatchMode.SINGLE
        config = TranslateConfig(batch_size=5, max_input_tokens=100)
        assert config.batch_mode is BatchMode.TOKEN_BUDGET

    def test_pacing_defaults_to_timeout(self):
        """Without a pacing interval the request timeout is used."""
        assert TranslateConfig(request_timeout=12).effective_pacing_interval == 12
        assert TranslateConfig(pacing_interval=0).effective_pacing_interval == 0

    @pytest.mark.parametrize("kwargs", [
        {"temperature": 3.0},
        {"request_timeout": 0},
        {"batch_size": -1},
        {"max_input_tokens": 0},
        {"max_retries": -1},
        {"model": ""},
    ])
    def test_invalid_values(self, kwargs):
        """Out-of-range options raise ConfigError."""
        with pytest.raises(ConfigError):
            TranslateConfig(**kwargs).validate()

    def test_to_dict_hides_api_key(self):
        """The API key never appears in the serialized config."""
        data = TranslateConfig(api_key="sk-secret").to_dict()
        assert "sk-secret" not in str(data)
        assert data["batch_mode"] == "single"
