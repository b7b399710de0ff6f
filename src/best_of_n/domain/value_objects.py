"""
Domain Value Objects

Defines immutable data structures representing model responses,
single-call outcomes and judge verdicts.
"""

from dataclasses import dataclass, field
from enum import Enum


class SampleStatus(str, Enum):
    """Outcome kind of a single generation request"""
    SUCCESS = "success"
    ERROR = "error"
    TIMEOUT = "timeout"


@dataclass(frozen=True)
class ModelResponse:
    """Model response"""
    output: str
    latency_ms: int
    model_name: str
    input_tokens: int = 0
    output_tokens: int = 0

    @property
    def total_tokens(self) -> int | None:
        total = self.input_tokens + self.output_tokens
        return total or None


@dataclass(frozen=True)
class SampleOutcome:
    """Tagged result of one generation request (never raised, always returned)"""
    status: SampleStatus
    latency_ms: int
    response: str | None = None
    error: str | None = None
    tokens_used: int | None = None

    @property
    def succeeded(self) -> bool:
        return self.status is SampleStatus.SUCCESS and bool(self.response)


@dataclass(frozen=True)
class TemperatureRange:
    """Inclusive temperature range for presets that vary temperature per sample"""
    low: float
    high: float

    def __post_init__(self):
        if self.low > self.high:
            raise ValueError(f"temperature range is inverted: {self.low} > {self.high}")

    def at(self, index: int, count: int) -> float:
        """Linearly interpolated temperature for sample `index` of `count`"""
        if count <= 1:
            return (self.low + self.high) / 2
        return self.low + (self.high - self.low) * (index / (count - 1))

    def __str__(self) -> str:
        return f"{self.low}→{self.high}"


@dataclass(frozen=True)
class ComparisonVerdict:
    """Parsed output of the selection judge (best_index is 0-based)"""
    best_index: int
    reasoning: str = ""
    consistent_points: list[str] = field(default_factory=list)
    unique_points: list[str] = field(default_factory=list)
    contradictions: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class BrainstormMerge:
    """Merged idea list produced from several samples"""
    merged_ideas: str
    comparison_markdown: str
