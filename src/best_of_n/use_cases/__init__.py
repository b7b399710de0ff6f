"""
Use Cases Layer

Sampling fan-out and run orchestration called from the runner.
"""

from best_of_n.use_cases.orchestration import (
    format_summary,
    process_model,
    representative_outputs,
    run_query,
)
from best_of_n.use_cases.sampling import (
    query_single,
    sample_model,
)

__all__ = [
    # orchestration
    "format_summary",
    "process_model",
    "representative_outputs",
    "run_query",
    # sampling
    "query_single",
    "sample_model",
]
