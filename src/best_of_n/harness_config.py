"""
Best-of-N Harness Configuration

Manages loading from environment variables and default values.
"""

import os
from dataclasses import dataclass, field, asdict

from best_of_n.domain.constants import (
    DEFAULT_NUM_SAMPLES,
    DEFAULT_TEMPERATURE,
    DEFAULT_TIMEOUT_SECONDS,
    PRIMARY_JUDGE_MODEL,
    PRIMARY_JUDGE_PROVIDER,
    SAMPLE_STAGGER_SECONDS,
    SECONDARY_JUDGE_MODEL,
    SECONDARY_JUDGE_PROVIDER,
    SYNTHESIS_MODEL,
    SYNTHESIS_PROVIDER,
    THINKING_BUDGET_TOKENS,
)


def _env_bool(key: str, default: bool) -> bool:
    """Convert an environment variable to bool"""
    val = os.environ.get(key)
    if val is None:
        return default
    return val.lower() in ("true", "1", "yes")


def _env_int(key: str, default: int) -> int:
    """Convert an environment variable to int"""
    val = os.environ.get(key)
    if val is None:
        return default
    try:
        return int(val)
    except ValueError:
        raise ValueError(f"The value '{val}' of environment variable '{key}' cannot be converted to an integer.")


def _env_float(key: str, default: float) -> float:
    """Convert an environment variable to float"""
    val = os.environ.get(key)
    if val is None:
        return default
    try:
        return float(val)
    except ValueError:
        raise ValueError(f"The value '{val}' of environment variable '{key}' cannot be converted to a number.")


def _env_str(key: str, default: str) -> str:
    """Get an environment variable as a string"""
    return os.environ.get(key, default)


@dataclass
class SamplingConfig:
    """Sampling fan-out defaults (overridden by presets and CLI flags)"""
    num_samples: int = DEFAULT_NUM_SAMPLES
    temperature: float = DEFAULT_TEMPERATURE
    timeout_seconds: int = DEFAULT_TIMEOUT_SECONDS
    stagger_seconds: float = SAMPLE_STAGGER_SECONDS
    max_retries: int = 2  # handed to the provider SDK


@dataclass
class JudgeConfig:
    """Per-model judge configuration (primary -> secondary fallback)"""
    primary_model: str = PRIMARY_JUDGE_MODEL
    primary_provider: str = PRIMARY_JUDGE_PROVIDER
    secondary_model: str = SECONDARY_JUDGE_MODEL
    secondary_provider: str = SECONDARY_JUDGE_PROVIDER
    max_tokens: int = 2000
    brainstorm_max_tokens: int = 4000
    timeout_seconds: int = 120


@dataclass
class SynthesisConfig:
    """Cross-model synthesis configuration"""
    model: str = SYNTHESIS_MODEL
    provider: str = SYNTHESIS_PROVIDER
    max_tokens: int = 16000
    thinking_budget_tokens: int = THINKING_BUDGET_TOKENS
    timeout_seconds: int = 600


@dataclass
class OutputConfig:
    """Output locations"""
    output_root: str = "multi-model-responses"
    notify: bool = True


@dataclass
class HarnessConfig:
    """Overall best-of-N harness configuration"""
    sampling: SamplingConfig = field(default_factory=SamplingConfig)
    judge: JudgeConfig = field(default_factory=JudgeConfig)
    synthesis: SynthesisConfig = field(default_factory=SynthesisConfig)
    output: OutputConfig = field(default_factory=OutputConfig)

    def to_dict(self) -> dict:
        """Convert to dictionary format"""
        return {"harness_config": asdict(self)}

    @classmethod
    def from_dict(cls, data: dict) -> "HarnessConfig":
        """Create from dictionary (handles presence/absence of harness_config key)"""
        config_data = data.get("harness_config", data)
        return cls(
            sampling=SamplingConfig(**config_data.get("sampling", {})),
            judge=JudgeConfig(**config_data.get("judge", {})),
            synthesis=SynthesisConfig(**config_data.get("synthesis", {})),
            output=OutputConfig(**config_data.get("output", {})),
        )


def load_config() -> HarnessConfig:
    """
    Load configuration from environment variables

    Uses default values when environment variables are not set.

    Returns:
        HarnessConfig
    """
    sampling = SamplingConfig(
        num_samples=_env_int("BON_NUM_SAMPLES", DEFAULT_NUM_SAMPLES),
        temperature=_env_float("BON_TEMPERATURE", DEFAULT_TEMPERATURE),
        timeout_seconds=_env_int("BON_TIMEOUT_SECONDS", DEFAULT_TIMEOUT_SECONDS),
        stagger_seconds=_env_float("BON_STAGGER_SECONDS", SAMPLE_STAGGER_SECONDS),
        max_retries=_env_int("BON_MAX_RETRIES", 2),
    )
    judge = JudgeConfig(
        primary_model=_env_str("BON_JUDGE_MODEL", PRIMARY_JUDGE_MODEL),
        primary_provider=_env_str("BON_JUDGE_PROVIDER", PRIMARY_JUDGE_PROVIDER),
        secondary_model=_env_str("BON_FALLBACK_JUDGE_MODEL", SECONDARY_JUDGE_MODEL),
        secondary_provider=_env_str("BON_FALLBACK_JUDGE_PROVIDER", SECONDARY_JUDGE_PROVIDER),
        max_tokens=_env_int("BON_JUDGE_MAX_TOKENS", 2000),
        brainstorm_max_tokens=_env_int("BON_BRAINSTORM_MAX_TOKENS", 4000),
        timeout_seconds=_env_int("BON_JUDGE_TIMEOUT_SECONDS", 120),
    )
    synthesis = SynthesisConfig(
        model=_env_str("BON_SYNTHESIS_MODEL", SYNTHESIS_MODEL),
        provider=_env_str("BON_SYNTHESIS_PROVIDER", SYNTHESIS_PROVIDER),
        max_tokens=_env_int("BON_SYNTHESIS_MAX_TOKENS", 16000),
        thinking_budget_tokens=_env_int("BON_SYNTHESIS_THINKING_BUDGET", THINKING_BUDGET_TOKENS),
        timeout_seconds=_env_int("BON_SYNTHESIS_TIMEOUT_SECONDS", 600),
    )
    output = OutputConfig(
        output_root=_env_str("BON_OUTPUT_ROOT", "multi-model-responses"),
        notify=_env_bool("BON_NOTIFY", True),
    )
    return HarnessConfig(
        sampling=sampling,
        judge=judge,
        synthesis=synthesis,
        output=output,
    )
