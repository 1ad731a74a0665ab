"""State machine that turns a live entity drag into keyframes and a segment."""

from __future__ import annotations

from dataclasses import dataclass
import logging

from playmaker.core.entity import Entity
from playmaker.core.keyframes import KeyframeStore, Pose, round_tick
from playmaker.core.track import Segment, TrackManager


_log = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class RecordingSession:
    entity_id: str
    start_tick: int


class Recorder:
    """Tracks the single active recording session, if any."""

    def __init__(self, track_manager: TrackManager, keyframes: KeyframeStore) -> None:
        self.track_manager = track_manager
        self.keyframes = keyframes
        self._session: RecordingSession | None = None

    @property
    def session(self) -> RecordingSession | None:
        return self._session

    @property
    def is_recording(self) -> bool:
        return self._session is not None

    @property
    def entity_id(self) -> str | None:
        return self._session.entity_id if self._session else None

    def would_overwrite(self, entity_id: str, tick: float) -> bool:
        """Whether recording from *tick* edits motion that already exists."""

        return self.track_manager.segment_covering(entity_id, round_tick(tick)) is not None

    def start(self, entity: Entity, tick: float) -> RecordingSession:
        start_tick = round_tick(tick)
        self.keyframes.set_keyframe(entity.entity_id, start_tick, entity.pose)
        self._session = RecordingSession(entity.entity_id, start_tick)
        _log.debug("Recording %s from tick %d", entity.entity_id, start_tick)
        return self._session

    def record_pose(self, entity: Entity, tick: float, x: float, y: float) -> bool:
        session = self._session
        if session is None or session.entity_id != entity.entity_id:
            return False
        entity.move_to(x, y)
        self.keyframes.set_keyframe(
            entity.entity_id,
            round_tick(tick),
            Pose(float(x), float(y), entity.pose.angle),
        )
        return True

    def stop(self, tick: float) -> Segment | None:
        """Close the session at *tick* and return the segment now stored.

        Recording over existing motion folds into the segment it overlaps,
        so the result can be wider than the recorded range.

        A session that did not advance past its start produces no segment;
        its anchor keyframe is left in place.
        """
        session = self._session
        if session is None:
            return None
        self._session = None
        end_tick = round_tick(tick)
        if end_tick <= session.start_tick:
            _log.debug("Discarded empty recording of %s", session.entity_id)
            return None
        stored = self.track_manager.add_segment(
            session.entity_id, session.start_tick, end_tick, merge=True
        )
        if stored is None:
            return None
        _log.debug(
            "Recorded %s over [%d, %d)", session.entity_id, session.start_tick, end_tick
        )
        return stored

    def boundary(self) -> int | None:
        """Start of the next existing segment the session must not run into."""

        session = self._session
        if session is None:
            return None
        return self.track_manager.next_segment_start(session.entity_id, session.start_tick)
