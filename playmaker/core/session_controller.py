from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import Iterable

from PySide6.QtCore import QObject, Signal, Slot

from playmaker.core.entity import Entity, default_roster
from playmaker.core.keyframes import Keyframe, KeyframeStore
from playmaker.core.playback_clock import PlaybackClock
from playmaker.core.recording import Recorder
from playmaker.core.settings_controller import SettingsController
from playmaker.core.track import Segment, SegmentEdge, Track, TrackManager
from playmaker.core.undo import HistoryManager, SessionSnapshot


_log = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class SegmentRef:
    track_id: str
    index: int


class SessionController(QObject):
    """Owns the editable choreography and funnels every change through itself.

    The rendering layer reads the query properties, listens to the signals
    and calls the command methods; nothing else mutates tracks, keyframes or
    poses.
    """

    tick_changed = Signal(float)
    playing_changed = Signal(bool)
    poses_changed = Signal()
    tracks_changed = Signal()
    recording_changed = Signal(object)
    selection_changed = Signal()
    undo_stack_changed = Signal()

    def __init__(
        self,
        settings: SettingsController | None = None,
        entities: Iterable[Entity] | None = None,
        parent: QObject | None = None,
    ) -> None:
        super().__init__(parent)
        self.settings = settings if settings is not None else SettingsController()
        total_ticks = int(self.settings.fps * self.settings.duration_seconds)

        roster = list(entities) if entities is not None else default_roster()
        self._entities: dict[str, Entity] = {e.entity_id: e for e in roster}
        self.keyframe_store = KeyframeStore()
        self.track_manager = TrackManager.for_entities(
            roster,
            self.keyframe_store,
            total_ticks,
            self.settings.min_segment_ticks,
        )
        self.recorder = Recorder(self.track_manager, self.keyframe_store)
        self.history = HistoryManager(self.settings.history_limit)

        self.clock = PlaybackClock(
            total_ticks,
            self.settings.fps,
            self.settings.frame_interval_ms,
            parent=self,
        )
        self.clock.boundary_provider = self.recorder.boundary
        self.clock.tick_changed.connect(self._on_clock_tick)
        self.clock.playing_changed.connect(self.playing_changed.emit)
        self.clock.boundary_reached.connect(self._on_boundary_reached)

        self._selected_entity_id: str | None = None
        self._selected_segment: SegmentRef | None = None

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------
    @property
    def current_tick(self) -> float:
        return self.clock.current_tick

    @property
    def total_ticks(self) -> int:
        return self.clock.total_ticks

    @property
    def is_playing(self) -> bool:
        return self.clock.is_playing

    @property
    def tracks(self) -> list[Track]:
        return self.track_manager.tracks

    @property
    def entities(self) -> list[Entity]:
        return list(self._entities.values())

    def entity(self, entity_id: str) -> Entity | None:
        return self._entities.get(entity_id)

    def segments(self, track_id: str) -> tuple[Segment, ...]:
        track = self.track_manager.track(track_id)
        return tuple(track.segments) if track is not None else ()

    def keyframes(self, entity_id: str) -> tuple[Keyframe, ...]:
        return self.keyframe_store.keyframes(entity_id)

    @property
    def recording_entity_id(self) -> str | None:
        return self.recorder.entity_id

    @property
    def recording_start_tick(self) -> int | None:
        session = self.recorder.session
        return session.start_tick if session else None

    @property
    def selected_entity_id(self) -> str | None:
        return self._selected_entity_id

    @property
    def selected_segment(self) -> SegmentRef | None:
        return self._selected_segment

    @property
    def can_undo(self) -> bool:
        return self.history.can_undo

    @property
    def can_redo(self) -> bool:
        return self.history.can_redo

    # ------------------------------------------------------------------
    # Time
    # ------------------------------------------------------------------
    def set_tick(self, tick: float) -> None:
        """Seek to *tick*; poses are resampled even if the tick is unchanged."""
        previous = self.clock.current_tick
        self.clock.set_tick(tick)
        if self.clock.current_tick == previous:
            self.resample_poses()

    def step_tick(self, delta: float) -> None:
        self.set_tick(self.clock.current_tick + delta)

    def set_playing(self, playing: bool) -> None:
        self.clock.set_playing(playing)

    def toggle_playing(self) -> None:
        self.clock.toggle()

    @Slot(float)
    def _on_clock_tick(self, tick: float) -> None:
        self.tick_changed.emit(tick)
        self.resample_poses()

    @Slot(float)
    def _on_boundary_reached(self, tick: float) -> None:
        _log.debug("Recording reached existing segment at tick %s", tick)
        self.stop_recording()

    def resample_poses(self) -> None:
        """Move every entity not being recorded to its keyed pose."""

        recording_id = self.recorder.entity_id
        tick = self.clock.current_tick
        changed = False
        for entity in self._entities.values():
            if entity.entity_id == recording_id:
                continue
            pose = self.keyframe_store.sample(entity.entity_id, tick)
            if pose is None or pose == entity.pose:
                continue
            entity.pose = pose
            changed = True
        if changed:
            self.poses_changed.emit()

    # ------------------------------------------------------------------
    # Selection
    # ------------------------------------------------------------------
    def select_entity(self, entity_id: str | None) -> None:
        if entity_id is not None and entity_id not in self._entities:
            return
        if entity_id == self._selected_entity_id:
            return
        self._selected_entity_id = entity_id
        self.selection_changed.emit()

    def select_segment(self, ref: SegmentRef | None) -> None:
        if ref is not None and self.track_manager.segment(ref.track_id, ref.index) is None:
            return
        if ref == self._selected_segment:
            return
        self._selected_segment = ref
        self.selection_changed.emit()

    def clear_selection(self) -> None:
        changed = self._selected_entity_id is not None or self._selected_segment is not None
        self._selected_entity_id = None
        self._selected_segment = None
        if changed:
            self.selection_changed.emit()

    # ------------------------------------------------------------------
    # Recording
    # ------------------------------------------------------------------
    def start_recording(self, entity_id: str) -> bool:
        entity = self._entities.get(entity_id)
        if entity is None:
            return False
        if self.recorder.is_recording:
            self.stop_recording()

        tick = self.clock.current_tick
        if self.recorder.would_overwrite(entity_id, tick):
            self.push_snapshot()
        session = self.recorder.start(entity, tick)

        self._selected_entity_id = entity_id
        self._selected_segment = None
        self.selection_changed.emit()
        self.recording_changed.emit(session.entity_id)
        self.clock.set_recording_active(True)
        return True

    def update_recording_pose(self, entity_id: str, x: float, y: float) -> bool:
        entity = self._entities.get(entity_id)
        if entity is None:
            return False
        if not self.recorder.record_pose(entity, self.clock.current_tick, x, y):
            return False
        self.poses_changed.emit()
        return True

    def stop_recording(self) -> Segment | None:
        if not self.recorder.is_recording:
            return None
        segment = self.recorder.stop(self.clock.current_tick)
        self.clock.set_recording_active(False)
        self.recording_changed.emit(None)
        if segment is not None:
            self.tracks_changed.emit()
        return segment

    def rotate_entity(self, entity_id: str, angle: float) -> None:
        """Set the displayed heading without writing a keyframe."""

        entity = self._entities.get(entity_id)
        if entity is None:
            return
        entity.set_angle(angle)
        self.poses_changed.emit()

    # ------------------------------------------------------------------
    # Segment editing
    # ------------------------------------------------------------------
    def move_segment(
        self, track_id: str, index: int, desired_start_tick: float
    ) -> SegmentRef | None:
        new_index = self.track_manager.move_segment(track_id, index, desired_start_tick)
        if new_index is None:
            return None
        ref = SegmentRef(track_id, new_index)
        if self._selected_segment == SegmentRef(track_id, index):
            self._selected_segment = ref
        self.tracks_changed.emit()
        self.resample_poses()
        return ref

    def resize_segment(
        self, track_id: str, index: int, edge: SegmentEdge | str, desired_tick: float
    ) -> bool:
        if not self.track_manager.resize_segment(track_id, index, edge, desired_tick):
            return False
        self.tracks_changed.emit()
        self.resample_poses()
        return True

    def delete_selected_segment(self) -> Segment | None:
        ref = self._selected_segment
        if ref is None:
            return None
        if self.track_manager.segment(ref.track_id, ref.index) is None:
            return None
        self.push_snapshot()
        segment = self.track_manager.delete_segment(ref.track_id, ref.index)
        self._selected_segment = None
        self.selection_changed.emit()
        self.tracks_changed.emit()
        self.resample_poses()
        return segment

    # ------------------------------------------------------------------
    # History
    # ------------------------------------------------------------------
    def capture_snapshot(self) -> SessionSnapshot:
        return SessionSnapshot(
            tracks=self.track_manager.snapshot(),
            poses=tuple((e.entity_id, e.pose) for e in self._entities.values()),
            keyframes=self.keyframe_store.snapshot(),
        )

    def push_snapshot(self) -> None:
        self.history.push(self.capture_snapshot())
        self.undo_stack_changed.emit()

    def undo(self) -> bool:
        if self.recorder.is_recording:
            return False
        snapshot = self.history.undo(self.capture_snapshot())
        if snapshot is None:
            return False
        self._apply_snapshot(snapshot)
        return True

    def redo(self) -> bool:
        if self.recorder.is_recording:
            return False
        snapshot = self.history.redo(self.capture_snapshot())
        if snapshot is None:
            return False
        self._apply_snapshot(snapshot)
        return True

    def _apply_snapshot(self, snapshot: SessionSnapshot) -> None:
        self.track_manager.restore(snapshot.tracks)
        self.keyframe_store.restore(snapshot.keyframes)
        for entity_id, pose in snapshot.poses:
            entity = self._entities.get(entity_id)
            if entity is not None:
                entity.pose = pose
        self._selected_segment = None
        self.selection_changed.emit()
        self.tracks_changed.emit()
        self.undo_stack_changed.emit()
        self.poses_changed.emit()
        self.resample_poses()
