"""
Desktop notifications via terminal-notifier (macOS)

Fire-and-forget: a missing notifier or a failed call only returns False.
"""

from __future__ import annotations

import logging
import shutil
import subprocess

logger = logging.getLogger(__name__)

NOTIFIER_COMMAND = "terminal-notifier"


def notify(
    title: str,
    message: str,
    *,
    subtitle: str | None = None,
    sound: str | None = None,
    open_target: str | None = None,
    group: str | None = None,
) -> bool:
    """Show a desktop notification; returns whether it was delivered"""
    executable = shutil.which(NOTIFIER_COMMAND)
    if executable is None:
        return False

    args = [executable, "-title", title, "-message", message]
    if subtitle:
        args += ["-subtitle", subtitle]
    if sound:
        args += ["-sound", sound]
    if open_target:
        args += ["-open", open_target]
    if group:
        args += ["-group", group]

    try:
        result = subprocess.run(
            args,
            stdout=subprocess.DEVNULL,
            stderr=subprocess.DEVNULL,
            timeout=10,
            check=False,
        )
    except (OSError, subprocess.SubprocessError) as e:
        logger.warning("Notification failed: %s", e)
        return False
    return result.returncode == 0


class DesktopNotifier:
    """Run-level notifications (disabled instances do nothing)"""

    def __init__(self, enabled: bool = True) -> None:
        self.enabled = enabled

    def complete(self, model_count: int, samples_per_model: int, open_target: str) -> bool:
        if not self.enabled:
            return False
        return notify(
            "Best-of-N",
            f"{model_count} models × {samples_per_model} samples complete",
            subtitle="Query complete",
            sound="default",
            open_target=open_target,
            group="best-of-n",
        )

    def error(self, message: str) -> bool:
        if not self.enabled:
            return False
        return notify("Best-of-N: Error", message, sound="Basso", group="best-of-n-error")
