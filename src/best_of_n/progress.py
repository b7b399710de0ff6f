"""
Progress tracking

Keeps per-model sample/judge progress for one run and renders it as a single
status line on a fixed interval. The tracker is created per run and handed
to the pipeline stages; its counters only ever go up and its flags only ever
go from False to True, so updates from concurrently running coroutines need
no locking.
"""

from __future__ import annotations

import asyncio
import contextlib
import sys
import time
from dataclasses import dataclass
from typing import Callable, TextIO

from best_of_n.domain.constants import PROGRESS_RENDER_INTERVAL

RESET = "\x1b[0m"
DIM = "\x1b[2m"
GREEN = "\x1b[32m"
YELLOW = "\x1b[33m"
RED = "\x1b[31m"
CYAN = "\x1b[36m"
CLEAR_LINE = "\x1b[2K\r"


@dataclass
class ModelProgress:
    """Progress of one model"""
    model_id: str
    display_name: str
    total: int
    completed: int = 0
    failed: int = 0
    comparing: bool = False
    comparison_done: bool = False

    @property
    def done(self) -> int:
        return self.completed + self.failed

    @property
    def sampling_finished(self) -> bool:
        return self.done >= self.total


class ProgressTracker:
    """Live per-model progress for one run"""

    def __init__(
        self,
        models: dict[str, str],
        samples_per_model: int,
        *,
        stream: TextIO | None = None,
        interval: float = PROGRESS_RENDER_INTERVAL,
        color: bool | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """
        Args:
            models: Model id -> display name, in display order
            samples_per_model: Expected samples per model
            stream: Where the status line goes (default: stdout)
            interval: Seconds between renders
            color: Use ANSI colors (default: when the stream is a terminal)
            clock: Time source (seconds)
        """
        self._models = {
            model_id: ModelProgress(model_id, display_name, samples_per_model)
            for model_id, display_name in models.items()
        }
        self._stream = stream if stream is not None else sys.stdout
        self._interval = interval
        if color is None:
            color = bool(getattr(self._stream, "isatty", lambda: False)())
        self._color = color
        self._clock = clock
        self._start_time = clock()
        self._task: asyncio.Task | None = None

    # -- updates -----------------------------------------------------------

    def sample_complete(self, model_id: str, success: bool) -> None:
        progress = self._models.get(model_id)
        if progress is None:
            return
        if success:
            progress.completed += 1
        else:
            progress.failed += 1

    def set_comparing(self, model_id: str) -> None:
        progress = self._models.get(model_id)
        if progress is not None:
            progress.comparing = True

    def set_comparison_done(self, model_id: str) -> None:
        progress = self._models.get(model_id)
        if progress is not None:
            progress.comparing = False
            progress.comparison_done = True

    # -- reads -------------------------------------------------------------

    def snapshot(self, model_id: str) -> ModelProgress | None:
        return self._models.get(model_id)

    def all_complete(self) -> bool:
        return all(p.comparison_done or p.sampling_finished for p in self._models.values())

    def elapsed_time(self) -> str:
        elapsed = int(self._clock() - self._start_time)
        mins, secs = divmod(elapsed, 60)
        return f"{mins}m {secs}s" if mins > 0 else f"{secs}s"

    def _paint(self, code: str, text: str) -> str:
        return f"{code}{text}{RESET}" if self._color else text

    def render_line(self) -> str:
        """The current status line"""
        parts: list[str] = []
        for p in self._models.values():
            if p.comparison_done:
                part = f"{self._paint(GREEN, '✓')} {p.display_name}"
            elif p.comparing:
                part = f"{self._paint(CYAN, '⚡')} {p.display_name} {self._paint(DIM, 'comparing')}"
            elif p.sampling_finished:
                part = f"{self._paint(YELLOW, '◐')} {p.display_name} ({p.completed}/{p.total})"
            else:
                marker = self._paint(YELLOW if p.done > 0 else DIM, "◐")
                part = f"{marker} {p.display_name} ({p.done}/{p.total})"
            if p.failed > 0:
                part += f" {self._paint(RED, f'{p.failed}✗')}"
            parts.append(part)

        elapsed = self._paint(DIM, f"[{self.elapsed_time()}]")
        return f"{'  '.join(parts)}  {elapsed}"

    def render(self) -> None:
        self._stream.write(f"{CLEAR_LINE}{self.render_line()}")
        self._stream.flush()

    # -- lifecycle ---------------------------------------------------------

    async def _render_loop(self) -> None:
        while True:
            self.render()
            await asyncio.sleep(self._interval)

    def start(self) -> None:
        """Start periodic rendering (requires a running event loop)"""
        if self._task is None:
            self._task = asyncio.get_running_loop().create_task(self._render_loop())

    async def stop(self) -> None:
        """Stop rendering and clear the status line"""
        if self._task is not None:
            self._task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._task
            self._task = None
        self._stream.write(CLEAR_LINE)
        self._stream.flush()

    @property
    def running(self) -> bool:
        return self._task is not None
