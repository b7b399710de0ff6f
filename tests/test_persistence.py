"""
persistence.py の単体テスト
"""

import json
from datetime import datetime
from pathlib import Path

import pandas as pd

from best_of_n.domain.entities import ModelResult, RunConfiguration, SampleResult
from best_of_n.domain.value_objects import SampleStatus, TemperatureRange
from best_of_n.persistence import (
    SAMPLE_COLUMNS,
    default_output_dir,
    generate_slug,
    model_dir_name,
    save_results,
)

NOW = datetime(2026, 3, 1, 9, 30)


def _sample(index, text, latency_ms=1000, temperature=0.8):
    return SampleResult(
        index=index,
        status=SampleStatus.SUCCESS,
        latency_ms=latency_ms,
        response=text,
        tokens_used=42,
        temperature=temperature,
    )


def _config(**kwargs):
    defaults = dict(
        prompt="What is the capital of France?",
        models=("gpt-5.2", "lmstudio/qwen3", "grok-4"),
        num_samples=3,
        temperature=0.8,
        timeout_seconds=180,
    )
    defaults.update(kwargs)
    return RunConfiguration(**defaults)


def _selection_result():
    return ModelResult(
        model_id="gpt-5.2",
        display_name="GPT-5.2",
        samples=[_sample(0, "Paris."), _sample(2, "Paris, on the Seine.")],
        attempted=3,
        best_index=1,
        comparison_markdown="## Comparison\n",
        errors=["Timeout after 180000ms"],
        judged_by="gemini-3-flash-preview",
    )


def _brainstorm_result():
    return ModelResult(
        model_id="lmstudio/qwen3",
        display_name="Qwen3 (local)",
        samples=[_sample(0, "1. A"), _sample(1, "1. B")],
        attempted=2,
        comparison_markdown="## Extraction notes\n",
        merged_ideas="1. A (1/2 unique)\n2. B (1/2 unique)",
    )


class TestNaming:
    def test_generate_slug(self):
        assert generate_slug("What's the BEST way to learn Rust?") == "what-s-the-best-way-to-learn-rust"

    def test_slug_truncated(self):
        assert len(generate_slug("word " * 40)) == 50

    def test_default_output_dir(self):
        path = default_output_dir("runs", "Hello world", NOW)
        assert path == Path("runs") / "2026-03-01-09-30-bon-hello-world"

    def test_model_dir_name(self):
        """パス区切りを含むモデルIDは安全なディレクトリ名になる"""
        assert model_dir_name("lmstudio/qwen3") == "lmstudio-qwen3"
        assert model_dir_name("gpt-5.2") == "gpt-5.2"
        assert model_dir_name("///") == "model"


class TestSaveResults:
    def test_artifact_tree(self, tmp_path):
        out = save_results(
            tmp_path / "run",
            _config(),
            [_selection_result(), _brainstorm_result()],
            ["grok-4"],
            synthesis="## Executive summary",
            now=NOW,
        )

        assert out == tmp_path / "run"
        gpt_dir = out / "per-model" / "gpt-5.2"
        assert (gpt_dir / "sample-0.md").read_text(encoding="utf-8") == "Paris."
        assert (gpt_dir / "sample-2.md").exists()
        assert not (gpt_dir / "sample-1.md").exists()
        assert (gpt_dir / "best-response.md").read_text(encoding="utf-8") == "Paris, on the Seine."
        assert (gpt_dir / "comparison.md").read_text(encoding="utf-8") == "## Comparison\n"

        qwen_dir = out / "per-model" / "lmstudio-qwen3"
        assert (qwen_dir / "merged-ideas.md").read_text(encoding="utf-8").startswith("1. A")
        assert not (qwen_dir / "best-response.md").exists()

        assert (out / "synthesis.md").read_text(encoding="utf-8") == "## Executive summary"

    def test_summary_record(self, tmp_path):
        config = _config(brainstorm=True, temperature_range=TemperatureRange(0.7, 1.3), preset="ultra-creative")
        save_results(tmp_path, config, [_selection_result(), _brainstorm_result()], ["grok-4"], now=NOW)

        summary = json.loads((tmp_path / "responses.json").read_text(encoding="utf-8"))

        assert summary["prompt"] == "What is the capital of France?"
        assert summary["numSamples"] == 3
        assert summary["temperatureRange"] == [0.7, 1.3]
        assert summary["brainstorm"] is True
        assert summary["preset"] == "ultra-creative"
        assert summary["timestamp"] == "2026-03-01T09:30:00"
        assert summary["failedModels"] == ["grok-4"]

        gpt, qwen = summary["models"]
        assert gpt["bestIndex"] == 1
        assert gpt["bestSample"] == 2
        assert gpt["attempted"] == 3
        assert gpt["failed"] == 1
        assert gpt["judgedBy"] == "gemini-3-flash-preview"
        assert gpt["samples"][1] == {
            "index": 2, "latencyMs": 1000, "tokensUsed": 42, "responseLength": 20, "temperature": 0.8,
        }
        assert qwen["merged"] is True
        assert qwen["bestSample"] is None
        assert qwen["judgedBy"] is None

    def test_samples_csv(self, tmp_path):
        save_results(tmp_path, _config(), [_selection_result(), _brainstorm_result()], now=NOW)

        df = pd.read_csv(tmp_path / "samples.csv")

        assert list(df.columns) == SAMPLE_COLUMNS
        assert len(df) == 4
        selected = df[df["selected"]]
        assert selected["model"].tolist() == ["gpt-5.2"]
        assert selected["sample_index"].tolist() == [2]
        # ブレインストームでは選択サンプルなし
        assert not df[df["model"] == "lmstudio/qwen3"]["selected"].any()

    def test_no_synthesis_file_without_synthesis(self, tmp_path):
        save_results(tmp_path, _config(), [_selection_result()], synthesis=None, now=NOW)
        assert not (tmp_path / "synthesis.md").exists()
        assert (tmp_path / "responses.json").exists()

    def test_empty_run_still_writes_summary(self, tmp_path):
        save_results(tmp_path, _config(), [], ["gpt-5.2"], now=NOW)

        summary = json.loads((tmp_path / "responses.json").read_text(encoding="utf-8"))
        assert summary["models"] == []
        assert summary["failedModels"] == ["gpt-5.2"]
        assert list(pd.read_csv(tmp_path / "samples.csv").columns) == SAMPLE_COLUMNS
