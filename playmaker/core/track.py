"""Per-entity recorded intervals and the edits that keep them disjoint."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
import logging
from typing import Iterable

from playmaker.core.entity import Entity, EntityKind
from playmaker.core.keyframes import KeyframeStore, round_tick


_log = logging.getLogger(__name__)

DEFAULT_MIN_SEGMENT_TICKS = 3

TrackSnapshot = tuple[tuple[str, tuple["Segment", ...]], ...]


@dataclass(frozen=True, slots=True)
class Segment:
    """A recorded range ``[start_tick, end_tick)`` on one track."""

    start_tick: int
    end_tick: int

    @property
    def duration(self) -> int:
        return self.end_tick - self.start_tick

    def contains(self, tick: float) -> bool:
        return self.start_tick <= tick < self.end_tick

    def overlaps(self, start_tick: float, end_tick: float) -> bool:
        return start_tick < self.end_tick and end_tick > self.start_tick


class SegmentEdge(Enum):
    START = "start"
    END = "end"


class Track:
    def __init__(self, track_id: str, kind: EntityKind, label: str) -> None:
        self.track_id = track_id
        self.kind = kind
        self.label = label
        self.segments: list[Segment] = []

    def __repr__(self) -> str:
        return f"Track({self.track_id!r}, segments={self.segments!r})"

    def sort_segments(self) -> None:
        self.segments.sort(key=lambda segment: segment.start_tick)


class TrackManager:
    """Owns one track per entity and every segment edit.

    Edits that touch a segment also re-time or drop the entity's keyframes
    so the samples stay attached to the range they were recorded in. Any
    edit that would leave two segments of a track overlapping is refused.
    """

    def __init__(
        self,
        keyframes: KeyframeStore,
        total_ticks: int,
        min_segment_ticks: int = DEFAULT_MIN_SEGMENT_TICKS,
    ) -> None:
        self.keyframes = keyframes
        self.total_ticks = int(total_ticks)
        self.min_segment_ticks = max(1, int(min_segment_ticks))
        self._tracks: dict[str, Track] = {}

    @classmethod
    def for_entities(
        cls,
        entities: Iterable[Entity],
        keyframes: KeyframeStore,
        total_ticks: int,
        min_segment_ticks: int = DEFAULT_MIN_SEGMENT_TICKS,
    ) -> "TrackManager":
        manager = cls(keyframes, total_ticks, min_segment_ticks)
        for entity in entities:
            manager.add_track(Track(entity.entity_id, entity.kind, entity.label))
        return manager

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------
    @property
    def tracks(self) -> list[Track]:
        return list(self._tracks.values())

    def add_track(self, track: Track) -> None:
        self._tracks.setdefault(track.track_id, track)

    def track(self, track_id: str) -> Track | None:
        return self._tracks.get(track_id)

    def segment(self, track_id: str, index: int) -> Segment | None:
        track = self._tracks.get(track_id)
        if track is None or not 0 <= index < len(track.segments):
            return None
        return track.segments[index]

    def segment_covering(self, track_id: str, tick: float) -> Segment | None:
        track = self._tracks.get(track_id)
        if track is None:
            return None
        for segment in track.segments:
            if segment.contains(tick):
                return segment
        return None

    def next_segment_start(self, track_id: str, after_tick: float) -> int | None:
        """Return the earliest segment start strictly after *after_tick*."""

        track = self._tracks.get(track_id)
        if track is None:
            return None
        starts = [s.start_tick for s in track.segments if s.start_tick > after_tick]
        return min(starts) if starts else None

    # ------------------------------------------------------------------
    # Edits
    # ------------------------------------------------------------------
    def add_segment(
        self, track_id: str, start_tick: int, end_tick: int, *, merge: bool = False
    ) -> Segment | None:
        """Insert ``[start_tick, end_tick)`` keeping the track sorted.

        An interval that overlaps existing segments is refused unless
        *merge* is set, in which case the overlapped segments are folded
        into a single segment spanning all of them.

        Returns the segment as stored, or ``None`` when nothing was added.
        """
        track = self._tracks.get(track_id)
        if track is None:
            return None
        start_tick = int(start_tick)
        end_tick = int(end_tick)
        if start_tick >= end_tick or start_tick < 0 or end_tick > self.total_ticks:
            return None

        overlapping = [s for s in track.segments if s.overlaps(start_tick, end_tick)]
        if overlapping:
            if not merge:
                return None
            start_tick = min([start_tick] + [s.start_tick for s in overlapping])
            end_tick = max([end_tick] + [s.end_tick for s in overlapping])
            track.segments = [s for s in track.segments if s not in overlapping]
            _log.debug(
                "Merged %d segment(s) on %s into [%d, %d)",
                len(overlapping), track_id, start_tick, end_tick,
            )

        added = Segment(start_tick, end_tick)
        track.segments.append(added)
        track.sort_segments()
        return added

    def delete_segment(self, track_id: str, index: int) -> Segment | None:
        track = self._tracks.get(track_id)
        if track is None or not 0 <= index < len(track.segments):
            return None
        segment = track.segments.pop(index)
        self.keyframes.remove_range(track_id, segment.start_tick, segment.end_tick)
        return segment

    def move_segment(self, track_id: str, index: int, desired_start: float) -> int | None:
        """Shift a segment to start near *desired_start*.

        A target that collides with a neighbour snaps flush against it:
        moving later lands just before the neighbour, moving earlier lands
        just after it. Returns the segment's index after the move, or
        ``None`` when nothing changed.
        """
        track = self._tracks.get(track_id)
        if track is None or not 0 <= index < len(track.segments):
            return None
        segment = track.segments[index]
        duration = segment.duration
        latest_start = self.total_ticks - duration
        others = [s for i, s in enumerate(track.segments) if i != index]

        new_start = round_tick(max(0, min(desired_start, latest_start)))
        for other in others:
            if other.overlaps(new_start, new_start + duration):
                if desired_start < segment.start_tick:
                    new_start = other.end_tick
                else:
                    new_start = other.start_tick - duration
        new_start = round_tick(max(0, min(new_start, latest_start)))

        if any(o.overlaps(new_start, new_start + duration) for o in others):
            _log.debug(
                "No room to move [%d, %d) on %s towards %s",
                segment.start_tick, segment.end_tick, track_id, desired_start,
            )
            return None
        delta = new_start - segment.start_tick
        if delta == 0:
            return None

        self.keyframes.retime_range(
            track_id,
            segment.start_tick,
            segment.end_tick,
            lambda tick: tick + delta,
        )
        moved = Segment(new_start, new_start + duration)
        track.segments[index] = moved
        track.sort_segments()
        return track.segments.index(moved)

    def resize_segment(
        self,
        track_id: str,
        index: int,
        edge: SegmentEdge | str,
        desired_tick: float,
    ) -> bool:
        track = self._tracks.get(track_id)
        if track is None or not 0 <= index < len(track.segments):
            return False
        try:
            edge = SegmentEdge(edge)
        except ValueError:
            return False

        segment = track.segments[index]
        others = [s for i, s in enumerate(track.segments) if i != index]
        start = segment.start_tick
        end = segment.end_tick
        if edge is SegmentEdge.START:
            start = round_tick(max(0, min(desired_tick, end - self.min_segment_ticks)))
            for other in others:
                if other.overlaps(start, end):
                    start = other.end_tick
        else:
            end = round_tick(
                max(start + self.min_segment_ticks, min(desired_tick, self.total_ticks))
            )
            end = min(end, self.total_ticks)
            for other in others:
                if other.overlaps(start, end):
                    end = other.start_tick

        if start == segment.start_tick and end == segment.end_tick:
            return False
        if (
            start >= end
            or start < 0
            or end > self.total_ticks
            or any(o.overlaps(start, end) for o in others)
        ):
            _log.debug("Rejected resize of %s segment %d to [%d, %d)", track_id, index, start, end)
            return False

        old_start = segment.start_tick
        old_duration = segment.duration
        new_duration = end - start

        def stretch(tick: int) -> int:
            fraction = (tick - old_start) / old_duration if old_duration > 0 else 0
            return round_tick(start + fraction * new_duration)

        self.keyframes.retime_range(track_id, segment.start_tick, segment.end_tick, stretch)
        track.segments[index] = Segment(start, end)
        return True

    # ------------------------------------------------------------------
    # Snapshots
    # ------------------------------------------------------------------
    def snapshot(self) -> TrackSnapshot:
        return tuple(
            (track.track_id, tuple(track.segments)) for track in self._tracks.values()
        )

    def restore(self, snapshot: TrackSnapshot) -> None:
        for track_id, segments in snapshot:
            track = self._tracks.get(track_id)
            if track is not None:
                track.segments = list(segments)
