"""
Model Catalog

Loads model and preset definitions from JSON files and resolves the
configuration for a single run.

The shipped catalog (``models.json`` next to this module) can be extended by a
user ``config.json``; each top-level section (models, presets, defaults) is
merged key by key, with the user file winning.
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from pathlib import Path

from best_of_n.domain.constants import (
    ASYNC_ONLY_PROVIDERS,
    DEFAULT_MAX_TOKENS,
    DEFAULT_PRESET,
)
from best_of_n.domain.entities import RunConfiguration
from best_of_n.domain.value_objects import TemperatureRange
from best_of_n.harness_config import SamplingConfig

SHIPPED_CATALOG_PATH = Path(__file__).with_name("models.json")
USER_OVERRIDE_FILENAME = "config.json"


class ConfigurationError(ValueError):
    """Invalid catalog, preset or model selection (fatal, raised before any network call)"""
    pass


@dataclass(frozen=True)
class ModelDescriptor:
    """A model definition from the catalog"""
    name: str
    provider: str
    model_id: str
    display_name: str
    type: str = "api"  # api / browser
    reasoning: bool = False
    slow: bool = False
    requires_browser: bool = False
    deep_research: bool = False
    max_tokens: int | None = None
    timeout_seconds: int | None = None

    @property
    def browser_only(self) -> bool:
        return self.type == "browser" or self.requires_browser

    @property
    def eligible(self) -> bool:
        """Whether the model can take part in synchronous, temperature-varied sampling"""
        if self.browser_only:
            return False
        if self.deep_research or self.provider in ASYNC_ONLY_PROVIDERS:
            return False
        return True


@dataclass(frozen=True)
class Preset:
    """A named model selection with optional sampling defaults"""
    name: str
    description: str
    models: tuple[str, ...]
    timeout_seconds: int | None = None
    num_samples: int | None = None
    temperature: float | None = None
    temperature_range: TemperatureRange | None = None
    brainstorm: bool | None = None


@dataclass
class ModelCatalog:
    """All known models and presets"""
    models: dict[str, ModelDescriptor]
    presets: dict[str, Preset]
    default_preset: str = DEFAULT_PRESET
    default_max_tokens: int = DEFAULT_MAX_TOKENS
    sources: list[str] = field(default_factory=list)

    def get_model(self, name: str) -> ModelDescriptor | None:
        return self.models.get(name)

    def display_name(self, name: str) -> str:
        descriptor = self.models.get(name)
        return descriptor.display_name if descriptor else name

    def max_tokens_for(self, name: str) -> int:
        descriptor = self.models.get(name)
        if descriptor and descriptor.max_tokens:
            return descriptor.max_tokens
        return self.default_max_tokens

    def eligible_models(self) -> list[str]:
        """Models eligible for best-of-N sampling, in catalog order"""
        return [name for name, descriptor in self.models.items() if descriptor.eligible]

    def get_preset(self, name: str) -> Preset:
        preset = self.presets.get(name)
        if preset is None:
            raise ConfigurationError(
                f"Unknown preset: {name} (available: {list(self.presets.keys())})"
            )
        return preset

    def preset_models(self, name: str) -> list[str]:
        """Eligible models of a preset, in preset order"""
        preset = self.get_preset(name)
        eligible = set(self.eligible_models())
        return [m for m in preset.models if m in eligible]


def _parse_model(name: str, data: dict) -> ModelDescriptor:
    """
    Create a ModelDescriptor from dictionary data

    Args:
        name: Catalog identifier
        data: Model data dictionary

    Returns:
        ModelDescriptor
    """
    for required in ("provider", "model_id"):
        if required not in data:
            raise ConfigurationError(f"Model '{name}' is missing required field '{required}'")
    return ModelDescriptor(
        name=name,
        provider=data["provider"],
        model_id=data["model_id"],
        display_name=data.get("display_name") or name,
        type=data.get("type", "api"),
        reasoning=bool(data.get("reasoning", False)),
        slow=bool(data.get("slow", False)),
        requires_browser=bool(data.get("requires_browser", False)),
        deep_research=bool(data.get("deep_research", False)),
        max_tokens=data.get("max_tokens"),
        timeout_seconds=data.get("timeout_seconds"),
    )


def _parse_preset(name: str, data: dict) -> Preset:
    """Create a Preset from dictionary data"""
    if "models" not in data:
        raise ConfigurationError(f"Preset '{name}' is missing required field 'models'")

    temperature_range = None
    raw_range = data.get("temperature_range")
    if raw_range is not None:
        if not isinstance(raw_range, (list, tuple)) or len(raw_range) != 2:
            raise ConfigurationError(
                f"Preset '{name}': temperature_range must be a [low, high] pair"
            )
        try:
            temperature_range = TemperatureRange(float(raw_range[0]), float(raw_range[1]))
        except ValueError as e:
            raise ConfigurationError(f"Preset '{name}': {e}") from e

    return Preset(
        name=name,
        description=data.get("description", ""),
        models=tuple(data["models"]),
        timeout_seconds=data.get("timeout_seconds"),
        num_samples=data.get("num_samples"),
        temperature=data.get("temperature"),
        temperature_range=temperature_range,
        brainstorm=data.get("brainstorm"),
    )


def _read_json(path: Path) -> dict:
    with open(path, "r", encoding="utf-8") as f:
        try:
            return json.load(f)
        except json.JSONDecodeError as e:
            raise ConfigurationError(f"Invalid JSON in {path}: {e}") from e


def load_catalog(
    catalog_path: str | Path | None = None,
    override_dir: str | Path | None = None,
) -> ModelCatalog:
    """
    Load the model catalog

    Args:
        catalog_path: Base catalog JSON (default: the shipped models.json)
        override_dir: Directory searched for config.json user overrides
            (default: $BON_CONFIG_DIR, then the current directory)

    Returns:
        ModelCatalog

    Raises:
        FileNotFoundError: If the base catalog does not exist
        ConfigurationError: If the catalog is malformed
    """
    base_path = Path(catalog_path) if catalog_path else SHIPPED_CATALOG_PATH
    data = _read_json(base_path)
    sources = [str(base_path)]

    if override_dir is None:
        override_dir = os.environ.get("BON_CONFIG_DIR", ".")
    override_path = Path(override_dir) / USER_OVERRIDE_FILENAME
    if override_path.is_file() and override_path.resolve() != base_path.resolve():
        overrides = _read_json(override_path)
        for section in ("models", "presets", "defaults"):
            merged = dict(data.get(section, {}))
            merged.update(overrides.get(section, {}))
            data[section] = merged
        sources.append(str(override_path))

    defaults = data.get("defaults", {})
    models = {name: _parse_model(name, md) for name, md in data.get("models", {}).items()}
    presets = {name: _parse_preset(name, pd) for name, pd in data.get("presets", {}).items()}

    return ModelCatalog(
        models=models,
        presets=presets,
        default_preset=defaults.get("preset", DEFAULT_PRESET),
        default_max_tokens=defaults.get("max_tokens", DEFAULT_MAX_TOKENS),
        sources=sources,
    )


def resolve_run_configuration(
    catalog: ModelCatalog,
    prompt: str,
    *,
    sampling: SamplingConfig | None = None,
    models: list[str] | None = None,
    preset: str | None = None,
    num_samples: int | None = None,
    temperature: float | None = None,
    timeout_seconds: int | None = None,
    brainstorm: bool | None = None,
    synthesise: bool = True,
    live_file: str | Path | None = None,
    output_dir: str | Path | None = None,
) -> RunConfiguration:
    """
    Resolve the settings for one run

    Precedence for numeric settings: explicit argument > preset value > harness default.
    An explicit model list bypasses presets entirely; an explicit temperature
    overrides a preset temperature range.

    Raises:
        ConfigurationError: Unknown preset, unknown/ineligible models,
            no eligible models, or out-of-range values
    """
    if sampling is None:
        sampling = SamplingConfig()
    if not prompt or not prompt.strip():
        raise ConfigurationError("Prompt must not be empty")

    preset_config: Preset | None = None
    if models:
        selected = [m.strip() for m in models if m.strip()]
        eligible = set(catalog.eligible_models())
        invalid = [m for m in selected if m not in eligible]
        if invalid:
            raise ConfigurationError(f"Invalid or ineligible models: {', '.join(invalid)}")
        # Section titles in the live document are per model; keep the list unique
        selected = list(dict.fromkeys(selected))
    else:
        preset_name = preset or catalog.default_preset
        preset_config = catalog.get_preset(preset_name)
        selected = catalog.preset_models(preset_name)
        if not selected:
            raise ConfigurationError(
                f'No eligible models in preset "{preset_name}". '
                "Deep research and browser models are excluded."
            )

    def _pick(explicit, preset_value, default):
        if explicit is not None:
            return explicit
        if preset_value is not None:
            return preset_value
        return default

    resolved_samples = int(_pick(
        num_samples, preset_config.num_samples if preset_config else None, sampling.num_samples
    ))
    resolved_temperature = float(_pick(
        temperature, preset_config.temperature if preset_config else None, sampling.temperature
    ))
    resolved_timeout = int(_pick(
        timeout_seconds,
        preset_config.timeout_seconds if preset_config else None,
        sampling.timeout_seconds,
    ))
    resolved_brainstorm = bool(_pick(
        brainstorm, preset_config.brainstorm if preset_config else None, False
    ))
    temperature_range = None
    if temperature is None and preset_config is not None:
        temperature_range = preset_config.temperature_range

    if resolved_samples < 1:
        raise ConfigurationError(f"Number of samples must be at least 1 (got {resolved_samples})")
    if resolved_timeout <= 0:
        raise ConfigurationError(f"Timeout must be positive (got {resolved_timeout})")

    return RunConfiguration(
        prompt=prompt,
        models=tuple(selected),
        num_samples=resolved_samples,
        temperature=resolved_temperature,
        timeout_seconds=resolved_timeout,
        temperature_range=temperature_range,
        brainstorm=resolved_brainstorm,
        synthesise=synthesise,
        preset=preset_config.name if preset_config else None,
        live_file=Path(live_file) if live_file else None,
        output_dir=Path(output_dir) if output_dir else None,
    )


def format_presets(catalog: ModelCatalog) -> str:
    """Human-readable list of presets that have at least one eligible model"""
    lines = ["", "Available presets:", ""]
    for name, preset in catalog.presets.items():
        models = catalog.preset_models(name)
        if not models:
            continue
        lines.append(f"  {name}")
        lines.append(f"    {preset.description}")
        lines.append(f"    Models: {', '.join(models)}")
        if preset.brainstorm:
            n = preset.num_samples or SamplingConfig().num_samples
            if preset.temperature_range is not None:
                temp = f"{preset.temperature_range} (varies)"
            else:
                temp = str(preset.temperature if preset.temperature is not None else SamplingConfig().temperature)
            lines.append(f"    Brainstorm: N={n}, T={temp}, {len(models) * n} API calls")
        lines.append("")
    return "\n".join(lines)


def format_models(catalog: ModelCatalog) -> str:
    """Human-readable list of models eligible for best-of-N"""
    lines = ["", "Eligible models for best-of-N:", ""]
    for name in catalog.eligible_models():
        descriptor = catalog.models[name]
        slow = " (slow)" if descriptor.slow else ""
        lines.append(f"  {name} ({descriptor.provider}){slow}")
    lines.append("")
    return "\n".join(lines)
