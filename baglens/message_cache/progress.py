"""Progress reporting for block loading.

Block loading runs in different contexts (interactive CLI, background task,
tests). Reporters give the loader one interface so the loading loop does not
depend on how progress is displayed.
"""

from __future__ import annotations

import logging
from typing import Protocol

from rich.progress import Progress, TaskID


class ProgressReporter(Protocol):
    """Receives block loading progress."""

    def start(self, label: str, total_blocks: int) -> None:
        """Begin reporting for a load of ``total_blocks`` (0 means unknown)."""

    def update(self, loaded_blocks: int, loaded_bytes: int) -> None:
        """Report the number of blocks and bytes loaded so far."""

    def finish(self) -> None:
        """Finalize reporting for the load."""


class NullProgressReporter:
    """No-op reporter for tests or silent operation."""

    def start(self, label: str, total_blocks: int) -> None:
        """Ignore load start."""
        return

    def update(self, loaded_blocks: int, loaded_bytes: int) -> None:
        """Ignore progress updates."""
        return

    def finish(self) -> None:
        """Ignore load completion."""
        return


class LoggingProgressReporter:
    """Emit throttled progress lines through a logger."""

    def __init__(self, logger: logging.Logger, *, report_every: int = 50) -> None:
        """Create a logger-backed reporter that logs every ``report_every`` blocks."""
        self._logger = logger
        self._report_every = max(1, report_every)
        self._label = ""
        self._total_blocks = 0
        self._last_reported = 0
        self._loaded_bytes = 0

    def start(self, label: str, total_blocks: int) -> None:
        """Reset counters and log the load start."""
        self._label = label
        self._total_blocks = max(0, total_blocks)
        self._last_reported = 0
        self._loaded_bytes = 0
        total_label = str(self._total_blocks) if self._total_blocks > 0 else "unknown"
        self._logger.info("%s: 0/%s block(s)", self._label, total_label)

    def update(self, loaded_blocks: int, loaded_bytes: int) -> None:
        """Log when enough blocks were loaded since the last line."""
        if loaded_blocks < 0:
            return
        self._loaded_bytes = loaded_bytes
        should_report = (loaded_blocks - self._last_reported) >= self._report_every
        if self._total_blocks > 0 and loaded_blocks >= self._total_blocks:
            should_report = True
        if not should_report:
            return

        self._last_reported = loaded_blocks
        if self._total_blocks > 0:
            pct = 100.0 * loaded_blocks / self._total_blocks
            self._logger.info(
                "%s: %s/%s block(s) (%.1f%%), %s bytes",
                self._label,
                loaded_blocks,
                self._total_blocks,
                pct,
                loaded_bytes,
            )
            return

        self._logger.info(
            "%s: %s block(s), %s bytes", self._label, loaded_blocks, loaded_bytes
        )

    def finish(self) -> None:
        """Log load completion."""
        self._logger.info("%s: done (%s bytes)", self._label, self._loaded_bytes)


class RichProgressReporter:
    """Render progress in a caller-owned rich ``Progress``."""

    def __init__(self, progress: Progress) -> None:
        """Bind a rich progress instance; tasks are added per load."""
        self._progress = progress
        self._task_id: TaskID | None = None

    def start(self, label: str, total_blocks: int) -> None:
        """Add a rich task for this load."""
        self._task_id = self._progress.add_task(
            label,
            total=total_blocks or None,
            completed=0,
        )

    def update(self, loaded_blocks: int, loaded_bytes: int) -> None:
        """Advance the rich task."""
        if self._task_id is None:
            return
        self._progress.update(self._task_id, completed=loaded_blocks, refresh=True)

    def finish(self) -> None:
        """Leave the task rendered; the caller owns the Progress lifecycle."""
        return
