"""
Live document

A markdown file updated while a run is in progress: a metadata header, an
optional Synthesis section right after it, and one section per model. The
document is held in memory as ordered sections keyed by model id and the
whole file is rewritten on every change, so sections never bleed into each
other regardless of what the model output contains.
"""

from __future__ import annotations

import asyncio
import re
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path

from best_of_n.domain.entities import ModelResult, RunConfiguration

_H1_RE = re.compile(r"^# ", re.MULTILINE)


def normalise_headings(text: str) -> str:
    """Demote H1 headings so model output stays inside its section"""
    return _H1_RE.sub("## ", text)


def _seconds(latency_ms: int) -> str:
    return f"{latency_ms / 1000:.1f}s"


def render_model_section(result: ModelResult, num_samples: int) -> str:
    """Section body for a model whose judging finished"""
    section = ""
    if result.is_brainstorm:
        section += f"## Merged ideas (from {len(result.samples)} samples)\n\n"
        section += normalise_headings(result.merged_ideas or "")
        section += "\n\n"
    else:
        best = result.best_sample
        section += f"## Best response (sample {best.index + 1} of {num_samples})\n\n"
        section += normalise_headings(best.response or "")
        section += f"\n\n_Latency: {_seconds(best.latency_ms)}"
        if best.tokens_used:
            section += f" | Tokens: {best.tokens_used}"
        section += "_\n\n"
    section += result.comparison_markdown
    section += "\n"

    section += f"<details><summary>All {len(result.samples)} samples</summary>\n\n"
    for position, sample in enumerate(result.samples):
        star = " ★" if not result.is_brainstorm and position == result.best_index else ""
        section += f"### Sample {sample.index + 1}{star} ({_seconds(sample.latency_ms)})\n\n"
        section += normalise_headings(sample.response or "")
        section += "\n\n"
    section += "</details>"
    return section


def render_failure_section(num_samples: int, errors: list[str]) -> str:
    """Section body for a model whose samples all failed"""
    return f"**Error:** All {num_samples} samples failed.\n\n" + "; ".join(errors)


@dataclass
class _Section:
    title: str
    body: str


class LiveDocument:
    """Incrementally updated markdown document for one run"""

    def __init__(self, path: str | Path, header: str, sections: dict[str, _Section]) -> None:
        self.path = Path(path)
        self._header = header
        self._sections = sections
        self._synthesis: str | None = None
        self._lock = asyncio.Lock()

    @classmethod
    def create(
        cls,
        path: str | Path,
        config: RunConfiguration,
        display_names: dict[str, str],
        now: datetime | None = None,
    ) -> "LiveDocument":
        """
        Create the document with a placeholder section per model and write it

        Args:
            path: Markdown file to maintain
            config: Run configuration (prompt, models, N, temperature)
            display_names: Model id -> section title
            now: Timestamp shown in the header (default: current time)
        """
        now = now or datetime.now()
        header = "# Best-of-N query\n\n"
        header += f"**Prompt:** {config.prompt}\n\n"
        header += (
            f"**N:** {config.num_samples} samples per model | "
            f"**Temperature:** {config.temperature_label()}\n"
        )
        header += f"**Time:** {now.strftime('%Y-%m-%d %H:%M')}\n\n"
        header += "---\n\n"

        placeholder = f"_Sampling {config.num_samples} responses..._"
        sections = {
            model_id: _Section(display_names.get(model_id, model_id), placeholder)
            for model_id in config.models
        }
        document = cls(path, header, sections)
        document.path.parent.mkdir(parents=True, exist_ok=True)
        document._write()
        return document

    def render(self) -> str:
        """Serialise the whole document"""
        content = self._header
        if self._synthesis is not None:
            content += f"# Synthesis\n\n{self._synthesis.strip()}\n\n---\n\n"
        for section in self._sections.values():
            content += f"# {section.title}\n\n{section.body.strip()}\n\n---\n\n"
        return content

    def section_body(self, model_id: str) -> str | None:
        section = self._sections.get(model_id)
        return section.body if section else None

    @property
    def synthesis(self) -> str | None:
        return self._synthesis

    def _write(self) -> None:
        tmp_path = self.path.with_name(f".{self.path.name}.tmp")
        tmp_path.write_text(self.render(), encoding="utf-8")
        tmp_path.replace(self.path)

    async def update_model_section(self, model_id: str, body: str) -> None:
        """
        Replace one model's section wholesale and rewrite the file

        Raises:
            KeyError: If the model has no section
        """
        async with self._lock:
            if model_id not in self._sections:
                raise KeyError(f"No section for model: {model_id}")
            self._sections[model_id].body = body
            self._write()

    async def set_synthesis(self, synthesis: str) -> None:
        """Insert (or replace) the Synthesis section right after the header"""
        async with self._lock:
            self._synthesis = synthesis
            self._write()
