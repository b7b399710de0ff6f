"""
Unit tests for model_catalog.py
"""

import json

import pytest

from best_of_n.domain.value_objects import TemperatureRange
from best_of_n.harness_config import SamplingConfig
from best_of_n.model_catalog import (
    ConfigurationError,
    ModelDescriptor,
    format_models,
    format_presets,
    load_catalog,
    resolve_run_configuration,
)


@pytest.fixture
def catalog(tmp_path):
    """The shipped catalog, isolated from any config.json in the working directory"""
    return load_catalog(override_dir=tmp_path)


class TestModelDescriptor:
    def test_api_model_is_eligible(self):
        descriptor = ModelDescriptor(name="m", provider="openai", model_id="m", display_name="M")
        assert descriptor.eligible

    def test_browser_model_is_not_eligible(self):
        descriptor = ModelDescriptor(
            name="m", provider="openai", model_id="m", display_name="M", type="browser"
        )
        assert descriptor.browser_only
        assert not descriptor.eligible

    def test_deep_research_model_is_not_eligible(self):
        descriptor = ModelDescriptor(
            name="m", provider="openai-deep", model_id="m", display_name="M", deep_research=True
        )
        assert not descriptor.eligible

    def test_async_provider_is_not_eligible(self):
        descriptor = ModelDescriptor(name="m", provider="gemini-deep", model_id="m", display_name="M")
        assert not descriptor.eligible


class TestLoadCatalog:
    def test_shipped_catalog(self, catalog):
        assert catalog.default_preset == "quick"
        assert catalog.default_max_tokens == 8000
        assert "gpt-5.2" in catalog.models
        assert "ultra-creative" in catalog.presets

    def test_eligible_models_exclude_deep_research_and_browser(self, catalog):
        eligible = catalog.eligible_models()
        assert "openai-deep-research" not in eligible
        assert "gemini-deep-research" not in eligible
        assert "chatgpt-browser" not in eligible
        assert "claude-4.5-sonnet" in eligible

    def test_preset_models_filter_ineligible(self, catalog):
        models = catalog.preset_models("comprehensive")
        assert models == ["gpt-5.2", "gemini-3-pro", "claude-opus-4.6", "grok-4"]

    def test_ultra_creative_has_temperature_range(self, catalog):
        preset = catalog.get_preset("ultra-creative")
        assert preset.temperature_range == TemperatureRange(0.7, 1.3)
        assert preset.brainstorm is True
        assert preset.num_samples == 6

    def test_unknown_preset_raises(self, catalog):
        with pytest.raises(ConfigurationError, match="Unknown preset"):
            catalog.get_preset("nope")

    def test_max_tokens_override(self, catalog):
        assert catalog.max_tokens_for("claude-opus-4.6") == 16000
        assert catalog.max_tokens_for("gpt-5.2") == 8000

    def test_display_name_falls_back_to_id(self, catalog):
        assert catalog.display_name("gpt-5.2") == "GPT-5.2"
        assert catalog.display_name("unknown-model") == "unknown-model"

    def test_user_override_merges_per_section(self, tmp_path):
        override = {
            "models": {
                "local-qwen": {
                    "provider": "lmstudio",
                    "model_id": "qwen2.5-7b",
                    "display_name": "Qwen (local)",
                }
            },
            "presets": {"local": {"description": "Local only", "models": ["local-qwen"]}},
            "defaults": {"preset": "local"},
        }
        (tmp_path / "config.json").write_text(json.dumps(override), encoding="utf-8")

        catalog = load_catalog(override_dir=tmp_path)
        assert "local-qwen" in catalog.models
        assert "gpt-5.2" in catalog.models  # shipped models kept
        assert catalog.default_preset == "local"
        assert catalog.default_max_tokens == 8000
        assert len(catalog.sources) == 2

    def test_override_dir_from_env(self, tmp_path, monkeypatch):
        (tmp_path / "config.json").write_text(
            json.dumps({"defaults": {"max_tokens": 1234}}), encoding="utf-8"
        )
        monkeypatch.setenv("BON_CONFIG_DIR", str(tmp_path))
        assert load_catalog().default_max_tokens == 1234

    def test_invalid_json_raises(self, tmp_path):
        (tmp_path / "config.json").write_text("{not json", encoding="utf-8")
        with pytest.raises(ConfigurationError, match="Invalid JSON"):
            load_catalog(override_dir=tmp_path)

    def test_model_missing_provider_raises(self, tmp_path):
        path = tmp_path / "models.json"
        path.write_text(json.dumps({"models": {"x": {"model_id": "x"}}}), encoding="utf-8")
        with pytest.raises(ConfigurationError, match="provider"):
            load_catalog(catalog_path=path, override_dir=tmp_path / "none")

    def test_bad_temperature_range_raises(self, tmp_path):
        path = tmp_path / "models.json"
        path.write_text(
            json.dumps({"presets": {"p": {"models": [], "temperature_range": [1.0]}}}),
            encoding="utf-8",
        )
        with pytest.raises(ConfigurationError, match="temperature_range"):
            load_catalog(catalog_path=path, override_dir=tmp_path / "none")

    def test_missing_catalog_raises(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_catalog(catalog_path=tmp_path / "missing.json", override_dir=tmp_path)


class TestResolveRunConfiguration:
    def test_default_preset(self, catalog):
        config = resolve_run_configuration(catalog, "What is entropy?")
        assert config.models == ("gemini-3-flash", "gpt-5.2", "claude-4.5-sonnet")
        assert config.preset == "quick"
        assert config.num_samples == 4
        assert config.temperature == 0.8
        assert config.timeout_seconds == 120  # from the preset
        assert config.brainstorm is False
        assert config.synthesise is True

    def test_explicit_values_beat_preset(self, catalog):
        config = resolve_run_configuration(
            catalog, "p", preset="brainstorm", num_samples=2, temperature=0.3, timeout_seconds=30
        )
        assert config.num_samples == 2
        assert config.temperature == 0.3
        assert config.timeout_seconds == 30
        assert config.brainstorm is True

    def test_preset_beats_settings(self, catalog):
        sampling = SamplingConfig(num_samples=9, temperature=0.1, timeout_seconds=999)
        config = resolve_run_configuration(catalog, "p", preset="brainstorm", sampling=sampling)
        assert config.num_samples == 4
        assert config.temperature == 1.0
        assert config.timeout_seconds == 999  # preset has no timeout

    def test_settings_used_without_preset_values(self, catalog):
        sampling = SamplingConfig(num_samples=2, temperature=0.5, timeout_seconds=45)
        config = resolve_run_configuration(catalog, "p", models=["gpt-5.2"], sampling=sampling)
        assert config.num_samples == 2
        assert config.temperature == 0.5
        assert config.timeout_seconds == 45
        assert config.preset is None

    def test_temperature_range_from_preset(self, catalog):
        config = resolve_run_configuration(catalog, "p", preset="ultra-creative")
        assert config.temperature_range == TemperatureRange(0.7, 1.3)
        assert config.brainstorm is True

    def test_explicit_temperature_disables_range(self, catalog):
        config = resolve_run_configuration(catalog, "p", preset="ultra-creative", temperature=0.9)
        assert config.temperature_range is None
        assert config.temperature == 0.9

    def test_invalid_models_listed(self, catalog):
        with pytest.raises(ConfigurationError) as exc_info:
            resolve_run_configuration(
                catalog, "p", models=["gpt-5.2", "nope", "openai-deep-research"]
            )
        assert "nope" in str(exc_info.value)
        assert "openai-deep-research" in str(exc_info.value)

    def test_duplicate_models_collapsed(self, catalog):
        config = resolve_run_configuration(catalog, "p", models=["gpt-5.2", "grok-4", "gpt-5.2"])
        assert config.models == ("gpt-5.2", "grok-4")

    def test_preset_without_eligible_models(self, catalog):
        with pytest.raises(ConfigurationError, match="No eligible models"):
            resolve_run_configuration(catalog, "p", preset="browser")

    def test_empty_prompt_rejected(self, catalog):
        with pytest.raises(ConfigurationError, match="Prompt"):
            resolve_run_configuration(catalog, "   ")

    def test_zero_samples_rejected(self, catalog):
        with pytest.raises(ConfigurationError, match="at least 1"):
            resolve_run_configuration(catalog, "p", num_samples=0)

    def test_output_targets(self, catalog, tmp_path):
        config = resolve_run_configuration(
            catalog, "p", live_file=str(tmp_path / "live.md"), output_dir=str(tmp_path / "out"),
            synthesise=False,
        )
        assert config.live_file == tmp_path / "live.md"
        assert config.output_dir == tmp_path / "out"
        assert config.synthesise is False


class TestFormatting:
    def test_format_presets_skips_browser_only(self, catalog):
        text = format_presets(catalog)
        assert "quick" in text
        assert "  browser\n" not in text
        assert "Brainstorm: N=6, T=0.7→1.3 (varies), 18 API calls" in text

    def test_format_models_marks_slow(self, catalog):
        text = format_models(catalog)
        assert "claude-opus-4.6 (anthropic) (slow)" in text
        assert "openai-deep-research" not in text
