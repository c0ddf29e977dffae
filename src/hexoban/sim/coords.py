from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any


class Direction(Enum):
    """The six axial directions, declared in canonical neighbor order."""

    UP = "U"
    BACKWARD = "B"
    LEFT = "L"
    DOWN = "D"
    FORWARD = "F"
    RIGHT = "R"

    def opposite(self) -> "Direction":
        return _OPPOSITES[self]

    @classmethod
    def from_code(cls, code: Any) -> "Direction":
        if not isinstance(code, str):
            raise ValueError("direction must be a string")
        try:
            return cls(code.upper())
        except ValueError:
            raise ValueError(f"unknown direction: {code!r}") from None


DIRECTIONS: tuple[Direction, ...] = tuple(Direction)

_OPPOSITES = {
    Direction.UP: Direction.DOWN,
    Direction.DOWN: Direction.UP,
    Direction.LEFT: Direction.RIGHT,
    Direction.RIGHT: Direction.LEFT,
    Direction.FORWARD: Direction.BACKWARD,
    Direction.BACKWARD: Direction.FORWARD,
}


def _require_int(value: Any, *, field_name: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"{field_name} must be an integer")
    return value


@dataclass(frozen=True, order=True)
class HexCoord:
    """Axial hex coordinate (i, j): i points down, j points right."""

    i: int
    j: int

    def up(self) -> "HexCoord":
        return HexCoord(self.i - 1, self.j)

    def down(self) -> "HexCoord":
        return HexCoord(self.i + 1, self.j)

    def left(self) -> "HexCoord":
        return HexCoord(self.i, self.j - 1)

    def right(self) -> "HexCoord":
        return HexCoord(self.i, self.j + 1)

    def forward(self) -> "HexCoord":
        return HexCoord(self.i + 1, self.j + 1)

    def backward(self) -> "HexCoord":
        return HexCoord(self.i - 1, self.j - 1)

    def neighbor(self, direction: Direction) -> "HexCoord":
        return _STEPS[direction](self)

    def to_pair(self) -> list[int]:
        return [self.i, self.j]

    @classmethod
    def from_pair(cls, value: Any, *, field_name: str = "coord") -> "HexCoord":
        if not isinstance(value, (list, tuple)) or len(value) != 2:
            raise ValueError(f"{field_name} must be a two-element integer pair")
        return cls(
            i=_require_int(value[0], field_name=f"{field_name}[0]"),
            j=_require_int(value[1], field_name=f"{field_name}[1]"),
        )


_STEPS = {
    Direction.UP: HexCoord.up,
    Direction.BACKWARD: HexCoord.backward,
    Direction.LEFT: HexCoord.left,
    Direction.DOWN: HexCoord.down,
    Direction.FORWARD: HexCoord.forward,
    Direction.RIGHT: HexCoord.right,
}


@dataclass(frozen=True)
class RectCoord:
    """Column/row position in the staggered text layout used by level files.

    Each column is half an i step and half a -j step (odd columns carry the
    extra i); each row is one i and one j.
    """

    col: int
    row: int

    def __post_init__(self) -> None:
        if _require_int(self.col, field_name="col") < 0:
            raise ValueError("col must be >= 0")
        if _require_int(self.row, field_name="row") < 0:
            raise ValueError("row must be >= 0")

    def to_hex(self) -> HexCoord:
        half, odd = divmod(self.col, 2)
        return HexCoord(i=half + odd + self.row, j=self.row - half)

    def to_hex_centered_at(self, center: HexCoord) -> HexCoord:
        coord = self.to_hex()
        return HexCoord(coord.i - center.i, coord.j - center.j)
