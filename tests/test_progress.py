"""
progress.py の単体テスト
"""

import asyncio
import io

import pytest

from best_of_n.progress import CLEAR_LINE, GREEN, ProgressTracker


class FakeClock:
    def __init__(self, now=0.0):
        self.now = now

    def __call__(self):
        return self.now


def _tracker(clock=None, **kwargs):
    return ProgressTracker(
        {"gpt-5.2": "GPT-5.2", "grok-4": "Grok 4"},
        3,
        stream=io.StringIO(),
        color=False,
        clock=clock or FakeClock(),
        **kwargs,
    )


class TestCounters:
    def test_sample_counts(self):
        tracker = _tracker()
        tracker.sample_complete("gpt-5.2", True)
        tracker.sample_complete("gpt-5.2", False)

        progress = tracker.snapshot("gpt-5.2")
        assert progress.completed == 1
        assert progress.failed == 1
        assert progress.done == 2
        assert not progress.sampling_finished

    def test_unknown_model_ignored(self):
        tracker = _tracker()
        tracker.sample_complete("unknown", True)
        tracker.set_comparing("unknown")
        tracker.set_comparison_done("unknown")
        assert tracker.snapshot("unknown") is None

    def test_comparison_flags(self):
        tracker = _tracker()
        tracker.set_comparing("grok-4")
        assert tracker.snapshot("grok-4").comparing

        tracker.set_comparison_done("grok-4")
        progress = tracker.snapshot("grok-4")
        assert not progress.comparing
        assert progress.comparison_done

    def test_all_complete(self):
        tracker = _tracker()
        for _ in range(3):
            tracker.sample_complete("gpt-5.2", False)
        assert not tracker.all_complete()

        tracker.set_comparison_done("grok-4")
        assert tracker.all_complete()


class TestRenderLine:
    def test_states(self):
        clock = FakeClock()
        tracker = _tracker(clock)
        tracker.sample_complete("gpt-5.2", True)
        tracker.sample_complete("gpt-5.2", False)
        clock.now = 75

        line = tracker.render_line()

        assert "◐ GPT-5.2 (2/3) 1✗" in line
        assert "◐ Grok 4 (0/3)" in line
        assert line.endswith("[1m 15s]")

    def test_comparing_and_done(self):
        tracker = _tracker()
        tracker.set_comparing("gpt-5.2")
        tracker.set_comparison_done("grok-4")

        line = tracker.render_line()

        assert "⚡ GPT-5.2 comparing" in line
        assert "✓ Grok 4" in line

    def test_sampling_finished_shows_successes(self):
        tracker = _tracker()
        for ok in (True, True, False):
            tracker.sample_complete("gpt-5.2", ok)
        assert "◐ GPT-5.2 (2/3) 1✗" in tracker.render_line()

    def test_elapsed_seconds_only(self):
        clock = FakeClock()
        tracker = _tracker(clock)
        clock.now = 9.7
        assert tracker.elapsed_time() == "9s"

    def test_color(self):
        stream = io.StringIO()
        tracker = ProgressTracker({"gpt-5.2": "GPT-5.2"}, 1, stream=stream, color=True)
        tracker.set_comparison_done("gpt-5.2")
        assert f"{GREEN}✓" in tracker.render_line()

    def test_color_defaults_to_tty_detection(self):
        tracker = ProgressTracker({"gpt-5.2": "GPT-5.2"}, 1, stream=io.StringIO())
        assert "\x1b[" not in tracker.render_line()


class TestLifecycle:
    @pytest.mark.asyncio
    async def test_start_and_stop(self):
        stream = io.StringIO()
        tracker = ProgressTracker({"gpt-5.2": "GPT-5.2"}, 2, stream=stream, color=False, interval=0.01)

        tracker.start()
        assert tracker.running
        await asyncio.sleep(0.05)
        await tracker.stop()

        assert not tracker.running
        output = stream.getvalue()
        assert output.count("GPT-5.2 (0/2)") >= 2
        assert output.endswith(CLEAR_LINE)

    @pytest.mark.asyncio
    async def test_start_twice_keeps_one_task(self):
        tracker = _tracker(interval=0.01)
        tracker.start()
        task = tracker._task
        tracker.start()
        assert tracker._task is task
        await tracker.stop()

    @pytest.mark.asyncio
    async def test_stop_without_start(self):
        stream = io.StringIO()
        tracker = ProgressTracker({"gpt-5.2": "GPT-5.2"}, 1, stream=stream)
        await tracker.stop()
        assert stream.getvalue() == CLEAR_LINE
