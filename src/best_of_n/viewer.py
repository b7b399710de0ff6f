"""
best-of-n Result Viewer

Minimal Streamlit dashboard for browsing saved runs: synthesis, per-model
selected (or merged) output, judge reports and sample latency.

Usage:
    pip install -e ".[viewer]"
    streamlit run src/best_of_n/viewer.py
    streamlit run src/best_of_n/viewer.py -- --results-dir multi-model-responses

Requires the package to be installed (e.g. via ``pip install -e .``).
"""

from __future__ import annotations

import argparse
import json
from pathlib import Path

import pandas as pd
import plotly.graph_objects as go
import streamlit as st

from best_of_n.persistence import model_dir_name

# -- Colors --
MODEL_COLORS = [
    "#1a73e8", "#e8710a", "#34a853", "#ea4335", "#9334e6",
    "#f538a0", "#00897b", "#6d4c41", "#546e7a", "#d500f9",
]


def _find_runs(results_dir: Path) -> list[Path]:
    """Run directories (those holding a responses.json), newest first."""
    return sorted(
        (p.parent for p in results_dir.glob("*/responses.json")),
        key=lambda p: p.name,
        reverse=True,
    )


def _read_text(path: Path) -> str | None:
    return path.read_text(encoding="utf-8") if path.exists() else None


def _render_latency_chart(samples_df: pd.DataFrame) -> None:
    """Per-sample latency, one trace per model, selected samples highlighted."""
    st.header("Sample Latency")

    fig = go.Figure()
    for i, (model, group) in enumerate(samples_df.groupby("display_name", sort=False)):
        color = MODEL_COLORS[i % len(MODEL_COLORS)]
        fig.add_trace(go.Scatter(
            x=group["sample_index"] + 1,
            y=group["latency_ms"] / 1000,
            mode="markers",
            name=model,
            marker=dict(
                color=color,
                size=[14 if selected else 8 for selected in group["selected"]],
                line=dict(width=[2 if selected else 0 for selected in group["selected"]], color="#202124"),
            ),
            hovertext=[f"{length} chars" for length in group["response_length"]],
        ))

    fig.update_layout(
        xaxis_title="Sample",
        yaxis_title="Latency (s)",
        legend_title="Model",
        template="plotly_white",
        height=400,
    )
    st.plotly_chart(fig, use_container_width=True)


def _render_models(run_dir: Path, summary: dict) -> None:
    """Selected / merged output and judge report per model."""
    st.header("Models")

    for model in summary["models"]:
        model_dir = run_dir / "per-model" / model_dir_name(model["model"])
        if model.get("merged"):
            title = f"{model['displayName']}: merged {len(model['samples'])} samples"
            body = _read_text(model_dir / "merged-ideas.md")
        else:
            title = (
                f"{model['displayName']}: best = sample {model['bestSample'] + 1} "
                f"of {len(model['samples'])}"
            )
            body = _read_text(model_dir / "best-response.md")

        with st.expander(title):
            st.markdown(body or "_No output saved._")
            comparison = _read_text(model_dir / "comparison.md")
            if comparison:
                st.markdown("---")
                st.markdown(comparison)

    if summary.get("failedModels"):
        st.error(f"Failed: {', '.join(summary['failedModels'])}")


def main() -> None:
    # Parse --results-dir from Streamlit args (after --)
    parser = argparse.ArgumentParser()
    parser.add_argument("--results-dir", default="multi-model-responses")
    args, _ = parser.parse_known_args()

    results_dir = Path(args.results_dir)

    st.set_page_config(page_title="best-of-n", layout="wide")
    st.title("best-of-n Results")

    if not results_dir.exists():
        st.error(f"Results directory not found: `{results_dir}`")
        st.info("Run a query first:\n```\nbest-of-n query \"your prompt\"\n```")
        return

    runs = _find_runs(results_dir)
    if not runs:
        st.warning(f"No runs found in `{results_dir}/`")
        return

    selected = st.sidebar.selectbox("Run", [r.name for r in runs], index=0)
    run_dir = results_dir / selected
    summary = json.loads((run_dir / "responses.json").read_text(encoding="utf-8"))

    # Sidebar info
    st.sidebar.markdown("---")
    st.sidebar.markdown(f"**Samples per model**: {summary['numSamples']}")
    if summary.get("temperatureRange"):
        low, high = summary["temperatureRange"]
        st.sidebar.markdown(f"**Temperature**: {low}→{high}")
    else:
        st.sidebar.markdown(f"**Temperature**: {summary['temperature']}")
    st.sidebar.markdown(f"**Mode**: {'brainstorm' if summary.get('brainstorm') else 'selection'}")

    st.markdown(f"**Prompt:** {summary['prompt']}")

    synthesis = _read_text(run_dir / "synthesis.md")
    if synthesis:
        st.header("Synthesis")
        st.markdown(synthesis)

    _render_models(run_dir, summary)

    samples_path = run_dir / "samples.csv"
    if samples_path.exists():
        samples_df = pd.read_csv(samples_path)
        if not samples_df.empty:
            _render_latency_chart(samples_df)
            st.dataframe(samples_df, use_container_width=True, hide_index=True)


if __name__ == "__main__":
    main()
