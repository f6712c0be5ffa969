"""Stage progress tracking for a collection run.

The tracker owns the list of seven :class:`StageProgress` entries. Entries
are frozen models, replaced (never mutated) on every change, and subscribers
receive a tuple of deep copies, so nothing they do can alter the live state.

Statuses only move forward: ``pending -> running -> completed | error``.
A running stage may be updated in place (for example with a progress
message) without changing status.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, List, Optional, Tuple

from ..errors import StageTransitionError
from ..schemas.models import StageProgress, StageStatus


STAGE_NAMES: Tuple[str, ...] = (
    "Collecting blog posts",
    "Collecting videos",
    "Selecting relevant content",
    "Extracting video subtitles",
    "Fetching blog content",
    "Analysing blog content",
    "Analysing video transcripts",
)

BLOG_ACQUISITION, VIDEO_ACQUISITION, SELECTION, SUBTITLES, BLOG_FETCH, BLOG_ANALYSIS, VIDEO_ANALYSIS = range(7)

_STATUS_ORDER: Dict[str, int] = {"pending": 0, "running": 1, "completed": 2, "error": 2}
_PROGRESS: Dict[str, int] = {"pending": 0, "running": 50, "completed": 100, "error": 0}

Snapshot = Tuple[StageProgress, ...]
ProgressListener = Callable[[Snapshot], None]


class StageTracker:
    """Holds the stage list and notifies listeners after each change."""

    def __init__(self, logger: Optional[logging.Logger] = None):
        self.logger = logger or logging.getLogger(self.__class__.__name__)
        self._listeners: List[ProgressListener] = []
        self._stages: List[StageProgress] = []
        self.reset()

    def reset(self) -> None:
        self._stages = [StageProgress(step_name=name) for name in STAGE_NAMES]

    def subscribe(self, listener: ProgressListener) -> Callable[[], None]:
        """Register ``listener``; returns a function that unregisters it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def snapshot(self) -> Snapshot:
        return tuple(stage.model_copy(deep=True) for stage in self._stages)

    def running_index(self) -> Optional[int]:
        return next((i for i, stage in enumerate(self._stages) if stage.status == "running"), None)

    def update(
        self,
        index: int,
        status: StageStatus,
        data: Optional[Dict[str, Any]] = None,
        message: Optional[str] = None,
    ) -> None:
        current = self._stages[index]
        if status == current.status:
            if status != "running":
                raise StageTransitionError(f"Stage '{current.step_name}' is already {status}")
        elif _STATUS_ORDER[status] <= _STATUS_ORDER[current.status]:
            raise StageTransitionError(
                f"Stage '{current.step_name}' cannot move from {current.status} to {status}"
            )

        changes: Dict[str, Any] = {"status": status, "progress": _PROGRESS[status]}
        if data is not None:
            changes["data"] = dict(data)
        if message is not None:
            changes["message"] = message
        self._stages[index] = current.model_copy(update=changes)
        self.logger.debug(f"Stage {index + 1} '{current.step_name}' -> {status}")
        self._notify()

    def start(self, index: int) -> None:
        if index > 0 and _STATUS_ORDER[self._stages[index - 1].status] < 2:
            raise StageTransitionError(
                f"Stage '{self._stages[index].step_name}' started before '{self._stages[index - 1].step_name}' finished"
            )
        self.update(index, "running")

    def complete(self, index: int, data: Optional[Dict[str, Any]] = None, message: Optional[str] = None) -> None:
        self.update(index, "completed", data=data, message=message)

    def fail(self, index: int, message: str) -> None:
        self.update(index, "error", message=message)

    def annotate(self, index: int, message: str) -> None:
        """Attach a message to a running stage."""
        self.update(index, "running", message=message)

    def _notify(self) -> None:
        snapshot = self.snapshot()
        for listener in list(self._listeners):
            listener(snapshot)
