from playmaker.core.entity import BALL_ID, BLUE, RED, EntityKind, default_roster
from playmaker.core.keyframes import Pose


def test_default_roster_has_fifteen_players_and_a_ball():
    roster = default_roster()

    players = [e for e in roster if e.kind is EntityKind.PLAYER]
    assert [p.number for p in players] == list(range(1, 16))
    assert roster[-1].entity_id == BALL_ID
    assert roster[-1].label == "Ball"
    assert players[0].label == "#1"


def test_default_roster_teams_and_headings():
    roster = default_roster()

    assert {e.color for e in roster[:8]} == {RED}
    assert {e.color for e in roster[8:15]} == {BLUE}
    assert all(e.pose.angle == 90 for e in roster[:15])
    assert roster[0].pose == Pose(40, 25, 90)


def test_default_roster_returns_fresh_entities():
    first = default_roster()
    first[0].move_to(1, 2)

    assert default_roster()[0].pose == Pose(40, 25, 90)
    assert first[0].pose == Pose(1, 2, 90)
