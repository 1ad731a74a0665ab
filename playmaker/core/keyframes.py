"""Sparse per-entity pose samples and linear interpolation."""

from __future__ import annotations

from bisect import bisect_left, bisect_right
from collections.abc import Callable, Iterable
from dataclasses import dataclass
import math


@dataclass(frozen=True, slots=True)
class Pose:
    x: float
    y: float
    angle: float


@dataclass(frozen=True, slots=True)
class Keyframe:
    tick: int
    x: float
    y: float
    angle: float

    @property
    def pose(self) -> Pose:
        return Pose(self.x, self.y, self.angle)

    def with_tick(self, tick: int) -> "Keyframe":
        return Keyframe(tick, self.x, self.y, self.angle)


KeyframeSnapshot = tuple[tuple[str, tuple[Keyframe, ...]], ...]


def round_tick(value: float) -> int:
    """Round *value* half up to the nearest whole tick."""

    return int(math.floor(float(value) + 0.5))


def _lerp(a: float, b: float, t: float) -> float:
    return a + (b - a) * t


class KeyframeStore:
    """Ordered, tick-unique keyframe lists keyed by entity id."""

    def __init__(self) -> None:
        self._keyframes: dict[str, list[Keyframe]] = {}

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------
    def entity_ids(self) -> list[str]:
        return list(self._keyframes)

    def keyframes(self, entity_id: str) -> tuple[Keyframe, ...]:
        return tuple(self._keyframes.get(entity_id, ()))

    def ticks(self, entity_id: str) -> list[int]:
        return [keyframe.tick for keyframe in self._keyframes.get(entity_id, ())]

    def sample(self, entity_id: str, tick: float) -> Pose | None:
        """Return the interpolated pose for *entity_id* at *tick*.

        Outside the keyed range the nearest end keyframe is held. Headings
        are blended as plain numbers, so 350 to 10 sweeps through 180.
        """
        keyframes = self._keyframes.get(entity_id)
        if not keyframes:
            return None
        first = keyframes[0]
        last = keyframes[-1]
        if tick <= first.tick:
            return first.pose
        if tick >= last.tick:
            return last.pose

        ticks = [keyframe.tick for keyframe in keyframes]
        index = bisect_right(ticks, tick) - 1
        before = keyframes[index]
        after = keyframes[index + 1]
        t = (tick - before.tick) / (after.tick - before.tick)
        return Pose(
            _lerp(before.x, after.x, t),
            _lerp(before.y, after.y, t),
            _lerp(before.angle, after.angle, t),
        )

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------
    def set_keyframe(self, entity_id: str, tick: int, pose: Pose) -> Keyframe:
        tick = int(tick)
        keyframe = Keyframe(tick, pose.x, pose.y, pose.angle)
        keyframes = self._keyframes.setdefault(entity_id, [])
        ticks = [existing.tick for existing in keyframes]
        index = bisect_left(ticks, tick)
        if index < len(keyframes) and keyframes[index].tick == tick:
            keyframes[index] = keyframe
        else:
            keyframes.insert(index, keyframe)
        return keyframe

    def remove_range(self, entity_id: str, tick_lo: int, tick_hi: int) -> int:
        """Drop keyframes with ``tick_lo <= tick <= tick_hi``; return the count."""
        keyframes = self._keyframes.get(entity_id)
        if not keyframes:
            return 0
        kept = [k for k in keyframes if k.tick < tick_lo or k.tick > tick_hi]
        removed = len(keyframes) - len(kept)
        if removed:
            self._keyframes[entity_id] = kept
        return removed

    def retime_range(
        self,
        entity_id: str,
        old_lo: int,
        old_hi: int,
        map_fn: Callable[[int], int],
    ) -> int:
        """Move every keyframe inside ``[old_lo, old_hi]`` to ``map_fn(tick)``.

        Re-timed keyframes overwrite untouched ones landing on the same tick.
        When several re-timed keyframes collapse onto one tick the one that
        was later in time wins.
        """
        keyframes = self._keyframes.get(entity_id)
        if not keyframes:
            return 0

        untouched: dict[int, Keyframe] = {}
        moved: dict[int, Keyframe] = {}
        for keyframe in keyframes:
            if old_lo <= keyframe.tick <= old_hi:
                new_tick = int(map_fn(keyframe.tick))
                moved[new_tick] = keyframe.with_tick(new_tick)
            else:
                untouched[keyframe.tick] = keyframe
        if not moved:
            return 0

        untouched.update(moved)
        self._keyframes[entity_id] = [untouched[tick] for tick in sorted(untouched)]
        return len(moved)

    def replace(self, entity_id: str, keyframes: Iterable[Keyframe]) -> None:
        by_tick: dict[int, Keyframe] = {}
        for keyframe in keyframes:
            by_tick[keyframe.tick] = keyframe
        self._keyframes[entity_id] = [by_tick[tick] for tick in sorted(by_tick)]

    def clear(self) -> None:
        self._keyframes.clear()

    # ------------------------------------------------------------------
    # Snapshots
    # ------------------------------------------------------------------
    def snapshot(self) -> KeyframeSnapshot:
        return tuple(
            (entity_id, tuple(keyframes))
            for entity_id, keyframes in self._keyframes.items()
        )

    def restore(self, snapshot: KeyframeSnapshot) -> None:
        self._keyframes = {
            entity_id: list(keyframes) for entity_id, keyframes in snapshot
        }
