"""
Tests for desktop notifications
"""

import subprocess
from unittest.mock import MagicMock, patch

from best_of_n.notify import DesktopNotifier, notify


class TestNotify:
    def test_missing_notifier(self):
        with patch("best_of_n.notify.shutil.which", return_value=None), \
             patch("best_of_n.notify.subprocess.run") as run:
            assert notify("title", "message") is False
            run.assert_not_called()

    def test_arguments(self):
        with patch("best_of_n.notify.shutil.which", return_value="/usr/local/bin/terminal-notifier"), \
             patch("best_of_n.notify.subprocess.run", return_value=MagicMock(returncode=0)) as run:
            assert notify("T", "M", subtitle="S", sound="default", open_target="/tmp/live.md", group="g")

        args = run.call_args[0][0]
        assert args == [
            "/usr/local/bin/terminal-notifier",
            "-title", "T", "-message", "M",
            "-subtitle", "S", "-sound", "default",
            "-open", "/tmp/live.md", "-group", "g",
        ]
        assert run.call_args[1]["check"] is False

    def test_optional_arguments_omitted(self):
        with patch("best_of_n.notify.shutil.which", return_value="terminal-notifier"), \
             patch("best_of_n.notify.subprocess.run", return_value=MagicMock(returncode=0)) as run:
            notify("T", "M")
        assert run.call_args[0][0] == ["terminal-notifier", "-title", "T", "-message", "M"]

    def test_failures_are_not_raised(self):
        with patch("best_of_n.notify.shutil.which", return_value="terminal-notifier"), \
             patch("best_of_n.notify.subprocess.run", side_effect=subprocess.TimeoutExpired("x", 10)):
            assert notify("T", "M") is False

    def test_nonzero_exit(self):
        with patch("best_of_n.notify.shutil.which", return_value="terminal-notifier"), \
             patch("best_of_n.notify.subprocess.run", return_value=MagicMock(returncode=1)):
            assert notify("T", "M") is False


class TestDesktopNotifier:
    def test_complete(self):
        with patch("best_of_n.notify.notify", return_value=True) as fake:
            assert DesktopNotifier().complete(3, 4, "/tmp/live.md")

        fake.assert_called_once_with(
            "Best-of-N",
            "3 models × 4 samples complete",
            subtitle="Query complete",
            sound="default",
            open_target="/tmp/live.md",
            group="best-of-n",
        )

    def test_error(self):
        with patch("best_of_n.notify.notify", return_value=True) as fake:
            DesktopNotifier().error("Cross-model synthesis failed")

        fake.assert_called_once_with(
            "Best-of-N: Error", "Cross-model synthesis failed", sound="Basso", group="best-of-n-error"
        )

    def test_disabled(self):
        with patch("best_of_n.notify.notify") as fake:
            notifier = DesktopNotifier(enabled=False)
            assert notifier.complete(1, 1, "x") is False
            assert notifier.error("boom") is False
        fake.assert_not_called()
