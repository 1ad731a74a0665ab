from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from playmaker.core.keyframes import Pose


RED = "#dc2626"
BLUE = "#2563eb"
BALL_COLOR = "#ffffff"
BALL_ID = "ball"

# (number, x, y) in field units; every player starts facing 90 degrees.
_DEFAULT_PLAYERS = (
    (1, 40, 25), (2, 40, 35), (3, 40, 45), (4, 38, 29), (5, 38, 41),
    (6, 36, 23), (7, 36, 47), (8, 34, 35), (9, 32, 35), (10, 28, 35),
    (11, 20, 10), (12, 24, 28), (13, 22, 42), (14, 20, 60), (15, 15, 35),
)
_RED_PLAYER_COUNT = 8


class EntityKind(Enum):
    PLAYER = "player"
    BALL = "ball"


@dataclass(slots=True)
class Entity:
    """A fixed identity on the field together with its displayed pose."""

    entity_id: str
    kind: EntityKind
    color: str
    pose: Pose
    number: int | None = None

    @property
    def label(self) -> str:
        if self.kind is EntityKind.BALL:
            return "Ball"
        return f"#{self.number}"

    def move_to(self, x: float, y: float) -> None:
        self.pose = Pose(float(x), float(y), self.pose.angle)

    def set_angle(self, angle: float) -> None:
        self.pose = Pose(self.pose.x, self.pose.y, float(angle))


def default_roster() -> list[Entity]:
    """Return fresh entities for the 15 players followed by the ball."""

    roster = [
        Entity(
            entity_id=f"p{number}",
            kind=EntityKind.PLAYER,
            color=RED if number <= _RED_PLAYER_COUNT else BLUE,
            pose=Pose(float(x), float(y), 90.0),
            number=number,
        )
        for number, x, y in _DEFAULT_PLAYERS
    ]
    roster.append(
        Entity(
            entity_id=BALL_ID,
            kind=EntityKind.BALL,
            color=BALL_COLOR,
            pose=Pose(42.0, 35.0, 0.0),
        )
    )
    return roster
