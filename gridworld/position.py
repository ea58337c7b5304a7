"""Position value type for grid worlds.

A Position is a point in 2D space, or in 3D space when ``z`` is given. It is
immutable: every helper that "moves" a position returns a new instance.

Two positions only share a z axis when both of them carry a z coordinate. All
distance helpers treat the z delta as 0 otherwise, while equality is strict and
considers a missing z different from any present z.
"""

from __future__ import annotations

import math
import re
from collections.abc import Iterable
from dataclasses import dataclass

import numpy as np

from gridworld.errors import PositionParseError

__all__ = ["Position"]

Number = int | float

_INT_PATTERN = re.compile(r"^[+-]?\d+$")


def _format_number(value: Number) -> str:
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def _parse_number(text: str, source: str) -> Number:
    text = text.strip()
    if _INT_PATTERN.match(text):
        return int(text)
    # float() also accepts "1_000", "nan" and "inf"
    if "_" in text:
        raise PositionParseError(source)
    try:
        value = float(text)
    except ValueError as e:
        raise PositionParseError(source) from e
    if not math.isfinite(value):
        raise PositionParseError(source)
    return value


@dataclass(frozen=True, slots=True)
class Position:
    """A 2D or 3D coordinate.

    Attributes:
        x: the x coordinate (column)
        y: the y coordinate (row)
        z: optional elevation / layer coordinate
    """

    x: Number
    y: Number
    z: Number | None = None

    @property
    def is_3d(self) -> bool:
        """Whether this position carries a z coordinate."""
        return self.z is not None

    def _shared_dz(self, other: Position) -> Number:
        if self.z is not None and other.z is not None:
            return self.z - other.z
        return 0

    def distance_to(self, other: Position) -> float:
        """Euclidean distance to another position."""
        dx = self.x - other.x
        dy = self.y - other.y
        dz = self._shared_dz(other)
        return math.sqrt(dx * dx + dy * dy + dz * dz)

    def manhattan_distance_to(self, other: Position) -> Number:
        """Sum of the absolute per-axis deltas."""
        return (
            abs(self.x - other.x) + abs(self.y - other.y) + abs(self._shared_dz(other))
        )

    def chebyshev_distance_to(self, other: Position) -> Number:
        """Largest absolute per-axis delta."""
        return max(
            abs(self.x - other.x), abs(self.y - other.y), abs(self._shared_dz(other))
        )

    def is_adjacent_to(self, other: Position, allow_diagonal: bool = True) -> bool:
        """Check whether another position is a direct neighbour on the x/y plane.

        Args:
            other: the position to compare with
            allow_diagonal: use the 8-neighbourhood if True, the 4-neighbourhood otherwise

        Returns:
            True if the positions are neighbours, the position itself is never adjacent.
        """
        dx = abs(self.x - other.x)
        dy = abs(self.y - other.y)

        if allow_diagonal:
            return dx <= 1 and dy <= 1 and dx + dy > 0
        return (dx == 1 and dy == 0) or (dx == 0 and dy == 1)

    def offset(self, dx: Number, dy: Number, dz: Number = 0) -> Position:
        """Return a new position translated by the given deltas.

        A 2D position stays 2D, ``dz`` is ignored in that case.
        """
        if self.z is None:
            return Position(self.x + dx, self.y + dy)
        return Position(self.x + dx, self.y + dy, self.z + dz)

    def direction_to(self, other: Position) -> Position:
        """Return the unit vector pointing from this position to another one.

        The z component is only part of the vector when both positions have a z.
        Coinciding positions yield a zero vector rather than an error.
        """
        dx = other.x - self.x
        dy = other.y - self.y
        dz = (
            other.z - self.z if self.z is not None and other.z is not None else None
        )

        magnitude = math.sqrt(dx * dx + dy * dy + (dz * dz if dz is not None else 0))

        if magnitude == 0:
            return Position(0, 0, dz)

        return Position(
            dx / magnitude,
            dy / magnitude,
            dz / magnitude if dz is not None else None,
        )

    def equals(self, other: Position) -> bool:
        """Strict field equality, including the presence of z."""
        return self == other

    def as_tuple(self) -> tuple[Number, ...]:
        """Return the coordinates as a tuple of length 2 or 3."""
        if self.z is None:
            return (self.x, self.y)
        return (self.x, self.y, self.z)

    def as_array(self) -> np.ndarray:
        """Return the coordinates as a numpy array of length 2 or 3."""
        return np.asarray(self.as_tuple(), dtype=float)

    @classmethod
    def from_iterable(cls, values: Iterable[Number]) -> Position:
        """Build a position from 2 or 3 numbers."""
        values = tuple(values)
        if len(values) not in (2, 3):
            raise ValueError(
                f"A position needs 2 or 3 coordinates, got {len(values)}."
            )
        return cls(*values)

    @classmethod
    def from_string(cls, text: str) -> Position:
        """Parse ``"(x, y)"`` or ``"(x, y, z)"``.

        Surrounding whitespace and the enclosing parentheses are optional.

        Raises:
            PositionParseError: if the text does not contain 2 or 3 numbers
        """
        body = text.strip()
        if body.startswith("(") and body.endswith(")"):
            body = body[1:-1]

        parts = body.split(",")
        if len(parts) not in (2, 3):
            raise PositionParseError(text)

        return cls(*(_parse_number(part, text) for part in parts))

    def __str__(self) -> str:  # noqa: D105
        return "(" + ", ".join(_format_number(v) for v in self.as_tuple()) + ")"
