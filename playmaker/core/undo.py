from __future__ import annotations

from dataclasses import dataclass
import logging

from playmaker.core.keyframes import KeyframeSnapshot, Pose
from playmaker.core.track import TrackSnapshot


_log = logging.getLogger(__name__)

DEFAULT_HISTORY_LIMIT = 100


@dataclass(frozen=True, slots=True)
class SessionSnapshot:
    """Immutable capture of segments, displayed poses and keyframes."""

    tracks: TrackSnapshot
    poses: tuple[tuple[str, Pose], ...]
    keyframes: KeyframeSnapshot


class HistoryManager:
    def __init__(self, limit: int = DEFAULT_HISTORY_LIMIT):
        self.limit = max(1, int(limit))
        self.undo_stack: list[SessionSnapshot] = []
        self.redo_stack: list[SessionSnapshot] = []

    @property
    def can_undo(self) -> bool:
        return bool(self.undo_stack)

    @property
    def can_redo(self) -> bool:
        return bool(self.redo_stack)

    def clear(self):
        self.undo_stack.clear()
        self.redo_stack.clear()

    def push(self, snapshot: SessionSnapshot):
        """
        Records the state from just before a mutation.
        Any redo history is discarded.
        """
        self.undo_stack.append(snapshot)
        overflow = len(self.undo_stack) - self.limit
        if overflow > 0:
            del self.undo_stack[:overflow]
        self.redo_stack.clear()
        _log.debug("History push (%d undo steps)", len(self.undo_stack))

    def undo(self, current: SessionSnapshot) -> SessionSnapshot | None:
        """
        Returns the state to restore, keeping *current* for redo.
        """
        if not self.undo_stack:
            return None
        previous = self.undo_stack.pop()
        self._append_bounded(self.redo_stack, current)
        return previous

    def redo(self, current: SessionSnapshot) -> SessionSnapshot | None:
        """
        Returns the state undone most recently, keeping *current* for undo.
        """
        if not self.redo_stack:
            return None
        following = self.redo_stack.pop()
        self._append_bounded(self.undo_stack, current)
        return following

    def _append_bounded(self, stack: list[SessionSnapshot], snapshot: SessionSnapshot):
        stack.append(snapshot)
        if len(stack) > self.limit:
            del stack[0]
