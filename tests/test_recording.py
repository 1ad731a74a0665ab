import pytest

from playmaker.core.entity import default_roster
from playmaker.core.keyframes import KeyframeStore, Pose
from playmaker.core.recording import Recorder, RecordingSession
from playmaker.core.track import Segment, TrackManager


@pytest.fixture
def roster():
    return {entity.entity_id: entity for entity in default_roster()}


@pytest.fixture
def keyframes():
    return KeyframeStore()


@pytest.fixture
def manager(roster, keyframes):
    return TrackManager.for_entities(roster.values(), keyframes, total_ticks=900)


@pytest.fixture
def recorder(manager, keyframes):
    return Recorder(manager, keyframes)


def test_start_writes_anchor_keyframe(recorder, roster, keyframes):
    player = roster["p1"]

    session = recorder.start(player, 4.6)

    assert session == RecordingSession("p1", 5)
    assert recorder.is_recording
    assert keyframes.sample("p1", 5) == player.pose


def test_stop_without_advance_creates_no_segment(recorder, roster, manager, keyframes):
    recorder.start(roster["p1"], 5)

    assert recorder.stop(5) is None

    assert not recorder.is_recording
    assert manager.track("p1").segments == []
    assert [k.tick for k in keyframes.keyframes("p1")] == [5]


def test_stop_after_advance_creates_segment(recorder, roster, manager):
    recorder.start(roster["p1"], 5)

    assert recorder.stop(12) == Segment(5, 12)
    assert manager.track("p1").segments == [Segment(5, 12)]


def test_stop_before_start_is_discarded(recorder, roster, manager):
    recorder.start(roster["p1"], 20)

    assert recorder.stop(11.2) is None
    assert manager.track("p1").segments == []


def test_record_pose_keeps_heading_and_raw_position(recorder, roster, keyframes):
    player = roster["p2"]
    recorder.start(player, 0)

    assert recorder.record_pose(player, 3.4, 12.5, 7.0)

    assert player.pose == Pose(12.5, 7.0, 90.0)
    assert keyframes.keyframes("p2")[-1].tick == 3
    assert keyframes.sample("p2", 3) == Pose(12.5, 7.0, 90.0)


def test_record_pose_ignores_other_entities(recorder, roster, keyframes):
    recorder.start(roster["p1"], 0)

    assert not recorder.record_pose(roster["p2"], 1, 0, 0)
    assert keyframes.keyframes("p2") == ()


def test_would_overwrite_inside_existing_segment(recorder, manager):
    manager.add_segment("p1", 10, 20)

    assert recorder.would_overwrite("p1", 10)
    assert recorder.would_overwrite("p1", 19.4)
    assert not recorder.would_overwrite("p1", 20)
    assert not recorder.would_overwrite("p2", 15)


def test_boundary_is_next_segment_after_start(recorder, roster, manager):
    manager.add_segment("p1", 0, 5)
    manager.add_segment("p1", 40, 50)
    manager.add_segment("p1", 70, 80)

    assert recorder.boundary() is None
    recorder.start(roster["p1"], 10)

    assert recorder.boundary() == 40


def test_edit_in_place_merges_with_covering_segment(recorder, roster, manager):
    manager.add_segment("p1", 10, 20)
    recorder.start(roster["p1"], 15)

    assert recorder.stop(30) == Segment(10, 30)
    assert manager.track("p1").segments == [Segment(10, 30)]
