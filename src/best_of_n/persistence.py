"""
Result persistence

Writes the artifact tree of a finished run:

    <output_dir>/
        responses.json          summary record (prompt, settings, per-model sample metadata)
        samples.csv             one row per successful sample
        synthesis.md            cross-model synthesis (when produced)
        per-model/<model>/
            sample-<i>.md       every successful raw sample
            best-response.md    selected sample (selection mode)
            merged-ideas.md     merged idea list (brainstorm mode)
            comparison.md       judge / extraction report
"""

from __future__ import annotations

import json
import re
from datetime import datetime
from pathlib import Path

import pandas as pd

from best_of_n.domain.entities import ModelResult, RunConfiguration

SAMPLE_COLUMNS = [
    "model",
    "display_name",
    "sample_index",
    "temperature",
    "latency_ms",
    "tokens_used",
    "response_length",
    "selected",
]

_UNSAFE_PATH_CHARS = re.compile(r"[^A-Za-z0-9._-]+")


def generate_slug(prompt: str, max_length: int = 50) -> str:
    """Lowercase alphanumeric slug of the prompt"""
    slug = re.sub(r"[^a-z0-9]+", "-", prompt.lower()).strip("-")
    return slug[:max_length]


def default_output_dir(output_root: str | Path, prompt: str, now: datetime | None = None) -> Path:
    """<output_root>/<YYYY-MM-DD-HH-MM>-bon-<slug>"""
    now = now or datetime.now()
    return Path(output_root) / f"{now.strftime('%Y-%m-%d-%H-%M')}-bon-{generate_slug(prompt)}"


def model_dir_name(model_id: str) -> str:
    """Filesystem-safe directory name for a model id (e.g. lmstudio/qwen -> lmstudio-qwen)"""
    return _UNSAFE_PATH_CHARS.sub("-", model_id).strip("-") or "model"


def build_summary(
    config: RunConfiguration,
    model_results: list[ModelResult],
    failed_models: list[str],
    timestamp: str,
) -> dict:
    """The machine-readable summary record of a run"""
    return {
        "prompt": config.prompt,
        "numSamples": config.num_samples,
        "temperature": config.temperature,
        "temperatureRange": (
            [config.temperature_range.low, config.temperature_range.high]
            if config.temperature_range is not None
            else None
        ),
        "brainstorm": config.brainstorm,
        "preset": config.preset,
        "timestamp": timestamp,
        "models": [
            {
                "model": mr.model_id,
                "displayName": mr.display_name,
                "bestIndex": mr.best_index,
                "bestSample": None if mr.is_brainstorm else mr.best_sample.index,
                "merged": mr.is_brainstorm,
                "judgedBy": mr.judged_by,
                "attempted": mr.attempted,
                "failed": mr.failed,
                "samples": [
                    {
                        "index": s.index,
                        "latencyMs": s.latency_ms,
                        "tokensUsed": s.tokens_used,
                        "responseLength": s.response_length,
                        "temperature": s.temperature,
                    }
                    for s in mr.samples
                ],
            }
            for mr in model_results
        ],
        "failedModels": list(failed_models),
    }


def samples_frame(model_results: list[ModelResult]) -> pd.DataFrame:
    """One row per successful sample across all models"""
    rows = []
    for mr in model_results:
        for position, s in enumerate(mr.samples):
            rows.append({
                "model": mr.model_id,
                "display_name": mr.display_name,
                "sample_index": s.index,
                "temperature": s.temperature,
                "latency_ms": s.latency_ms,
                "tokens_used": s.tokens_used,
                "response_length": s.response_length,
                "selected": (not mr.is_brainstorm) and position == mr.best_index,
            })
    return pd.DataFrame(rows, columns=SAMPLE_COLUMNS)


def save_results(
    output_dir: str | Path,
    config: RunConfiguration,
    model_results: list[ModelResult],
    failed_models: list[str] | None = None,
    synthesis: str | None = None,
    now: datetime | None = None,
) -> Path:
    """
    Write the artifact tree for a run

    Args:
        output_dir: Target directory (created if missing)
        config: Run configuration
        model_results: Successful models, in selection order
        failed_models: Models whose samples all failed
        synthesis: Cross-model synthesis text (synthesis.md is skipped when empty)
        now: Timestamp recorded in the summary (default: current time)

    Returns:
        Path: The output directory
    """
    output_path = Path(output_dir)
    output_path.mkdir(parents=True, exist_ok=True)
    timestamp = (now or datetime.now()).isoformat()

    summary = build_summary(config, model_results, failed_models or [], timestamp)
    (output_path / "responses.json").write_text(
        json.dumps(summary, ensure_ascii=False, indent=2), encoding="utf-8"
    )
    samples_frame(model_results).to_csv(output_path / "samples.csv", index=False)

    for mr in model_results:
        model_dir = output_path / "per-model" / model_dir_name(mr.model_id)
        model_dir.mkdir(parents=True, exist_ok=True)

        # Individual samples
        for s in mr.samples:
            (model_dir / f"sample-{s.index}.md").write_text(s.response or "", encoding="utf-8")

        # Best response or merged ideas (brainstorm mode)
        if mr.is_brainstorm:
            (model_dir / "merged-ideas.md").write_text(mr.merged_ideas or "", encoding="utf-8")
        elif mr.samples:
            (model_dir / "best-response.md").write_text(
                mr.best_sample.response or "", encoding="utf-8"
            )

        (model_dir / "comparison.md").write_text(mr.comparison_markdown, encoding="utf-8")

    if synthesis:
        (output_path / "synthesis.md").write_text(synthesis, encoding="utf-8")

    return output_path
