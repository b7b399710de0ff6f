"""
Domain Entities

Defines the primary data structures used across one best-of-N run.
"""

from dataclasses import dataclass, field
from pathlib import Path

from best_of_n.domain.value_objects import SampleStatus, TemperatureRange


@dataclass(frozen=True)
class SampleResult:
    """One model invocation outcome at a fixed ordinal within its batch"""
    index: int
    status: SampleStatus
    latency_ms: int
    response: str | None = None
    error: str | None = None
    tokens_used: int | None = None
    temperature: float | None = None

    @property
    def succeeded(self) -> bool:
        return self.status is SampleStatus.SUCCESS and bool(self.response)

    @property
    def response_length(self) -> int:
        return len(self.response or "")


@dataclass
class ModelResult:
    """
    Aggregate result for one model

    `samples` holds only the successful samples (ordered by ordinal);
    `best_index` is a position within `samples`. In brainstorm mode
    `merged_ideas` carries the merged list instead. `judged_by` names the
    judge model whose verdict picked the best sample (None for a fallback).
    """
    model_id: str
    display_name: str
    samples: list[SampleResult]
    attempted: int
    best_index: int = 0
    comparison_markdown: str = ""
    merged_ideas: str | None = None
    errors: list[str] = field(default_factory=list)
    consistent_points: list[str] = field(default_factory=list)
    unique_points: list[str] = field(default_factory=list)
    contradictions: list[str] = field(default_factory=list)
    judged_by: str | None = None

    @property
    def failed(self) -> int:
        return self.attempted - len(self.samples)

    @property
    def is_brainstorm(self) -> bool:
        return self.merged_ideas is not None

    @property
    def best_sample(self) -> SampleResult:
        return self.samples[self.best_index]

    @property
    def representative_output(self) -> str:
        """Text handed to cross-model synthesis"""
        if self.merged_ideas:
            return self.merged_ideas
        return self.best_sample.response or ""


@dataclass(frozen=True)
class RunConfiguration:
    """Resolved inputs for one invocation (immutable for the run)"""
    prompt: str
    models: tuple[str, ...]
    num_samples: int
    temperature: float
    timeout_seconds: int
    temperature_range: TemperatureRange | None = None
    brainstorm: bool = False
    synthesise: bool = True
    preset: str | None = None
    live_file: Path | None = None
    output_dir: Path | None = None

    def __post_init__(self):
        if self.num_samples < 1:
            raise ValueError("num_samples must be at least 1")
        if self.timeout_seconds <= 0:
            raise ValueError("timeout_seconds must be positive")
        if not self.models:
            raise ValueError("models must not be empty")

    @property
    def total_calls(self) -> int:
        return len(self.models) * self.num_samples

    def temperature_for_sample(self, index: int) -> float:
        """Temperature for the sample at ordinal `index`"""
        if self.temperature_range is not None:
            return self.temperature_range.at(index, self.num_samples)
        return self.temperature

    def temperature_label(self) -> str:
        if self.temperature_range is not None:
            return f"{self.temperature_range} (varies per sample)"
        return str(self.temperature)


@dataclass
class RunReport:
    """What a finished run produced"""
    config: RunConfiguration
    model_results: list[ModelResult]
    failed_models: list[str]
    synthesis: str | None = None
    synthesis_error: str | None = None
    output_dir: Path | None = None
