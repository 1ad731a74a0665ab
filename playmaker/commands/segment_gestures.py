"""Pointer gestures over the field and timeline, expressed as core commands.

Positions arrive already translated to timeline pixels (or field units for
entity drags); these helpers only turn them into ticks and make sure a
continuous gesture lands in the undo history exactly once.
"""

from __future__ import annotations

from playmaker.core.keyframes import round_tick
from playmaker.core.session_controller import SegmentRef, SessionController
from playmaker.core.track import SegmentEdge


DEFAULT_TICK_PX = 4


def _resolve_tick_px(controller: SessionController, tick_px: float | None) -> float:
    if tick_px is None:
        tick_px = controller.settings.tick_px
    try:
        value = float(tick_px)
    except (TypeError, ValueError):
        return DEFAULT_TICK_PX
    return value if value > 0 else DEFAULT_TICK_PX


class SegmentDragGesture:
    """Drag a segment body (move) or one of its edges (resize)."""

    def __init__(
        self,
        controller: SessionController,
        ref: SegmentRef,
        origin_x: float,
        edge: SegmentEdge | str | None = None,
        tick_px: float | None = None,
    ) -> None:
        self.controller = controller
        self.ref = ref
        self.origin_x = float(origin_x)
        self.edge = SegmentEdge(edge) if edge is not None else None
        self.tick_px = _resolve_tick_px(controller, tick_px)
        self._snapshot_pushed = False

        segment = controller.track_manager.segment(ref.track_id, ref.index)
        if segment is None:
            self.origin_tick = None
            return
        if self.edge is SegmentEdge.END:
            self.origin_tick = segment.end_tick
        else:
            self.origin_tick = segment.start_tick
        controller.select_segment(ref)

    @property
    def is_valid(self) -> bool:
        return self.origin_tick is not None

    def move_to(self, x: float) -> None:
        if self.origin_tick is None:
            return
        if not self._snapshot_pushed:
            self.controller.push_snapshot()
            self._snapshot_pushed = True

        tick = self.origin_tick + round_tick((x - self.origin_x) / self.tick_px)
        if self.edge is None:
            moved = self.controller.move_segment(self.ref.track_id, self.ref.index, tick)
            if moved is not None:
                self.ref = moved
        else:
            self.controller.resize_segment(self.ref.track_id, self.ref.index, self.edge, tick)

    def finish(self) -> None:
        self.origin_tick = None


class EntityDragGesture:
    """Record an entity's motion for as long as it is held."""

    def __init__(self, controller: SessionController, entity_id: str) -> None:
        self.controller = controller
        self.entity_id = entity_id
        self.active = controller.start_recording(entity_id)

    def move_to(self, x: float, y: float) -> None:
        if self.active:
            self.controller.update_recording_pose(self.entity_id, x, y)

    def finish(self) -> None:
        if not self.active:
            return
        self.active = False
        if self.controller.recording_entity_id == self.entity_id:
            self.controller.stop_recording()


class ScrubGesture:
    """Seek the playhead by dragging along the ruler."""

    def __init__(
        self,
        controller: SessionController,
        x: float,
        tick_px: float | None = None,
    ) -> None:
        self.controller = controller
        self.tick_px = _resolve_tick_px(controller, tick_px)
        controller.select_segment(None)
        self.move_to(x)

    def move_to(self, x: float) -> None:
        self.controller.set_tick(round_tick(x / self.tick_px))
