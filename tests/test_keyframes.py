import pytest

from playmaker.core.keyframes import Keyframe, KeyframeStore, Pose, round_tick


@pytest.fixture
def store():
    return KeyframeStore()


def _ticks(store, entity_id="p1"):
    return [k.tick for k in store.keyframes(entity_id)]


def test_sample_without_keyframes_is_none(store):
    assert store.sample("p1", 0) is None


def test_sample_interpolates_midpoint(store):
    store.set_keyframe("p1", 0, Pose(0, 0, 0))
    store.set_keyframe("p1", 10, Pose(10, 0, 0))

    assert store.sample("p1", 5) == Pose(5, 0, 0)


def test_sample_holds_end_keyframes(store):
    store.set_keyframe("p1", 4, Pose(1, 2, 30))
    store.set_keyframe("p1", 8, Pose(5, 6, 60))

    assert store.sample("p1", 0) == Pose(1, 2, 30)
    assert store.sample("p1", 4) == Pose(1, 2, 30)
    assert store.sample("p1", 8) == Pose(5, 6, 60)
    assert store.sample("p1", 100) == Pose(5, 6, 60)


def test_sample_uses_bracketing_pair(store):
    store.set_keyframe("p1", 0, Pose(0, 0, 0))
    store.set_keyframe("p1", 10, Pose(10, 10, 0))
    store.set_keyframe("p1", 20, Pose(10, 30, 0))

    pose = store.sample("p1", 15)
    assert pose.x == pytest.approx(10)
    assert pose.y == pytest.approx(20)

    pose = store.sample("p1", 2.5)
    assert pose.x == pytest.approx(2.5)


def test_angle_blend_does_not_wrap(store):
    store.set_keyframe("p1", 0, Pose(0, 0, 350))
    store.set_keyframe("p1", 10, Pose(0, 0, 10))

    assert store.sample("p1", 5).angle == pytest.approx(180)


def test_set_keyframe_overwrites_same_tick(store):
    store.set_keyframe("p1", 5, Pose(1, 1, 0))
    store.set_keyframe("p1", 2, Pose(2, 2, 0))
    store.set_keyframe("p1", 5, Pose(3, 3, 0))

    assert store.keyframes("p1") == (Keyframe(2, 2, 2, 0), Keyframe(5, 3, 3, 0))


def test_remove_range_is_inclusive(store):
    for tick in (0, 5, 10, 15):
        store.set_keyframe("p1", tick, Pose(tick, 0, 0))

    removed = store.remove_range("p1", 5, 10)

    assert removed == 2
    assert _ticks(store) == [0, 15]


def test_remove_range_for_unknown_entity(store):
    assert store.remove_range("nobody", 0, 10) == 0


def test_retime_range_shifts_only_inside(store):
    for tick in (0, 5, 10, 20):
        store.set_keyframe("p1", tick, Pose(tick, 0, 0))

    store.retime_range("p1", 5, 10, lambda tick: tick + 3)

    assert _ticks(store) == [0, 8, 13, 20]
    assert store.keyframes("p1")[1].x == 5


def test_retime_range_keeps_ticks_unique(store):
    for tick in (0, 1, 2, 6):
        store.set_keyframe("p1", tick, Pose(tick, 0, 0))

    store.retime_range("p1", 0, 2, lambda tick: 6 if tick == 2 else tick // 2)

    ticks = _ticks(store)
    assert ticks == sorted(set(ticks))
    assert ticks == [0, 6]
    # the later re-timed sample wins over the earlier one and the untouched one
    assert store.keyframes("p1")[0].x == 1
    assert store.keyframes("p1")[1].x == 2


def test_snapshot_is_independent_of_later_edits(store):
    store.set_keyframe("p1", 0, Pose(0, 0, 0))
    snapshot = store.snapshot()

    store.set_keyframe("p1", 4, Pose(4, 0, 0))
    store.retime_range("p1", 0, 0, lambda tick: 2)

    assert snapshot == (("p1", (Keyframe(0, 0, 0, 0),)),)

    store.restore(snapshot)
    assert _ticks(store) == [0]


def test_round_tick_rounds_half_up():
    assert round_tick(2.5) == 3
    assert round_tick(3.5) == 4
    assert round_tick(-0.5) == 0
    assert round_tick(4.49) == 4


def test_replace_sorts_and_dedupes(store):
    store.replace("p1", [Keyframe(8, 0, 0, 0), Keyframe(2, 1, 0, 0), Keyframe(8, 5, 0, 0)])

    assert store.ticks("p1") == [2, 8]
    assert store.keyframes("p1")[1].x == 5
    assert store.entity_ids() == ["p1"]

    store.clear()
    assert store.entity_ids() == []
