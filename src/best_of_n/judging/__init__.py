"""
Judging sub-package

Per-model sample selection / idea merging and cross-model synthesis.
"""

from best_of_n.judging.extraction import (
    JudgeError,
    extract_json,
    parse_comparison,
    split_brainstorm_response,
)
from best_of_n.judging.per_model import (
    ComparisonResult,
    SampleJudge,
    create_judge,
)
from best_of_n.judging.synthesis import CrossModelSynthesiser, create_synthesiser

__all__ = [
    # extraction
    "JudgeError",
    "extract_json",
    "parse_comparison",
    "split_brainstorm_response",
    # per-model
    "ComparisonResult",
    "SampleJudge",
    "create_judge",
    # cross-model
    "CrossModelSynthesiser",
    "create_synthesiser",
]
