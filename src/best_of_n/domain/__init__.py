"""
Domain Layer

Defines constants, entities, and value objects that form the core of the business logic.
Has no dependencies on external libraries.
"""

from best_of_n.domain.constants import (
    ASYNC_ONLY_PROVIDERS,
    DEFAULT_MAX_TOKENS,
    DEFAULT_NUM_SAMPLES,
    DEFAULT_PRESET,
    DEFAULT_TEMPERATURE,
    DEFAULT_TIMEOUT_SECONDS,
    NOTHING_TO_SYNTHESISE,
    SYNC_PROVIDERS,
)
from best_of_n.domain.entities import (
    ModelResult,
    RunConfiguration,
    RunReport,
    SampleResult,
)
from best_of_n.domain.value_objects import (
    BrainstormMerge,
    ComparisonVerdict,
    ModelResponse,
    SampleOutcome,
    SampleStatus,
    TemperatureRange,
)

__all__ = [
    # constants
    "ASYNC_ONLY_PROVIDERS",
    "DEFAULT_MAX_TOKENS",
    "DEFAULT_NUM_SAMPLES",
    "DEFAULT_PRESET",
    "DEFAULT_TEMPERATURE",
    "DEFAULT_TIMEOUT_SECONDS",
    "NOTHING_TO_SYNTHESISE",
    "SYNC_PROVIDERS",
    # entities
    "ModelResult",
    "RunConfiguration",
    "RunReport",
    "SampleResult",
    # value objects
    "BrainstormMerge",
    "ComparisonVerdict",
    "ModelResponse",
    "SampleOutcome",
    "SampleStatus",
    "TemperatureRange",
]
