"""Stateless spatial queries over collections of unit positions.

The functions in this module work on any sequence of records that expose
``unit_id``, ``map_id`` and ``position`` attributes, such as the
``UnitPosition`` snapshots returned by ``World.get_all_units``. They are meant
for unit lists owned by the game logic, for instance to find units in range or
to detect collisions after a bulk import, and never modify the World.

Missing maps are never an error here: bounds checks against an unknown map
return False or an empty list.
"""

from __future__ import annotations

import math
from typing import NamedTuple, Protocol, TypeVar, runtime_checkable

from gridworld.position import Position
from gridworld.world import World

__all__ = [
    "Collision",
    "HasUnitPosition",
    "are_positions_adjacent",
    "find_collisions",
    "get_adjacent_positions",
    "get_adjacent_positions_to_position",
    "get_distance_between_positions",
    "get_position_at_coordinate",
    "get_positions_at_coordinate",
    "get_positions_in_map",
    "get_positions_within_range",
    "is_valid_position",
    "step_towards",
]


@runtime_checkable
class HasUnitPosition(Protocol):
    """Protocol for records locating a unit on a named map."""

    unit_id: str
    map_id: str
    position: Position


P = TypeVar("P", bound=HasUnitPosition)


class Collision(NamedTuple):
    """Several records sharing the same cell."""

    map_id: str
    x: float
    y: float
    positions: list


# fmt: off
CARDINAL_OFFSETS = [
    (-1, 0), (1, 0), (0, -1), (0, 1),
]
DIAGONAL_OFFSETS = [
    (-1, -1), (-1, 1), (1, -1), (1, 1),
]
# fmt: on


def _at(record: HasUnitPosition, map_id: str, x, y) -> bool:
    return (
        record.map_id == map_id and record.position.x == x and record.position.y == y
    )


def get_positions_at_coordinate(positions: list[P], map_id: str, x, y) -> list[P]:
    """Return all records located at the given cell."""
    return [record for record in positions if _at(record, map_id, x, y)]


def get_position_at_coordinate(positions: list[P], map_id: str, x, y) -> P | None:
    """Return the first record located at the given cell, if any."""
    return next((record for record in positions if _at(record, map_id, x, y)), None)


def find_collisions(positions: list[P]) -> list[Collision]:
    """Group records by cell and return the cells holding more than one record.

    Collisions are returned in the order their cell was first seen.
    """
    seen: dict[tuple[str, float, float], list[P]] = {}
    for record in positions:
        key = (record.map_id, record.position.x, record.position.y)
        seen.setdefault(key, []).append(record)

    return [
        Collision(map_id, x, y, occupants)
        for (map_id, x, y), occupants in seen.items()
        if len(occupants) > 1
    ]


def get_positions_in_map(positions: list[P], map_id: str) -> list[P]:
    """Return the records on one map."""
    return [record for record in positions if record.map_id == map_id]


def get_positions_within_range(
    positions: list[P],
    world: World,
    reference: HasUnitPosition,
    max_distance: float,
    use_manhattan: bool = True,
) -> list[P]:
    """Return the records on the reference's map within ``max_distance`` of it.

    Args:
        positions: records to search
        world: the world the records belong to
        reference: the record to measure from, it is never part of the result
        max_distance: inclusive distance limit
        use_manhattan: use Manhattan distance if True, Euclidean otherwise
    """
    result = []
    for record in positions:
        if record.unit_id == reference.unit_id or record.map_id != reference.map_id:
            continue
        if (
            get_distance_between_positions(reference, record, use_manhattan)
            <= max_distance
        ):
            result.append(record)
    return result


def get_distance_between_positions(
    pos1: HasUnitPosition, pos2: HasUnitPosition, use_manhattan: bool = True
) -> float:
    """Return the distance between two records, infinite across maps."""
    if pos1.map_id != pos2.map_id:
        return math.inf

    if use_manhattan:
        return pos1.position.manhattan_distance_to(pos2.position)
    return pos1.position.distance_to(pos2.position)


def are_positions_adjacent(
    pos1: HasUnitPosition, pos2: HasUnitPosition, allow_diagonal: bool = True
) -> bool:
    """Check whether two records are neighbours on the same map.

    With diagonals, neighbours are at Chebyshev distance 1; without, at
    Manhattan distance 1. The z coordinate is ignored.
    """
    if pos1.map_id != pos2.map_id:
        return False

    dx = abs(pos1.position.x - pos2.position.x)
    dy = abs(pos1.position.y - pos2.position.y)
    if allow_diagonal:
        return max(dx, dy) == 1
    return dx + dy == 1


def get_adjacent_positions(
    world: World, map_id: str, x, y, allow_diagonal: bool = True
) -> list[Position]:
    """Return the neighbouring cells of a coordinate that lie inside the map.

    The map edges are always respected, even on a wrapped map. Cardinal
    neighbours come first (left, right, up, down), then the diagonals.

    Returns:
        an empty list if the map does not exist
    """
    grid_map = world.get_map(map_id)
    if grid_map is None:
        return []

    offsets = CARDINAL_OFFSETS + DIAGONAL_OFFSETS if allow_diagonal else CARDINAL_OFFSETS
    return [
        Position(x + dx, y + dy)
        for dx, dy in offsets
        if grid_map.in_bounds(x + dx, y + dy)
    ]


def is_valid_position(world: World, map_id: str, x, y) -> bool:
    """Check a coordinate against the edges of a map, False if the map is missing."""
    grid_map = world.get_map(map_id)
    return grid_map is not None and grid_map.in_bounds(x, y)


def get_adjacent_positions_to_position(
    positions: list[P],
    world: World,
    reference: HasUnitPosition,
    allow_diagonal: bool = True,
) -> list[P]:
    """Return the records occupying the cells around a reference record.

    At most one record is reported per neighbouring cell.
    """
    adjacent = []
    for neighbour in get_adjacent_positions(
        world,
        reference.map_id,
        reference.position.x,
        reference.position.y,
        allow_diagonal,
    ):
        record = get_position_at_coordinate(
            positions, reference.map_id, neighbour.x, neighbour.y
        )
        if record is not None and record.unit_id != reference.unit_id:
            adjacent.append(record)
    return adjacent


def _sign(value) -> int:
    return (value > 0) - (value < 0)


def step_towards(world: World, map_id: str, start: Position, goal: Position) -> Position:
    """Take a single step from ``start`` towards ``goal``.

    The step follows the axis with the larger distance, x on ties, and the
    result is clamped to the map. If the map does not exist, the clamp range
    ends at ``start``. The z coordinate of ``start`` is kept.
    """
    grid_map = world.get_map(map_id)
    width = grid_map.width if grid_map is not None else start.x + 1
    height = grid_map.height if grid_map is not None else start.y + 1

    dx = goal.x - start.x
    dy = goal.y - start.y

    step_x, step_y = 0, 0
    if abs(dx) >= abs(dy):
        step_x = _sign(dx)
    else:
        step_y = _sign(dy)

    next_x = min(max(start.x + step_x, 0), width - 1)
    next_y = min(max(start.y + step_y, 0), height - 1)
    return Position(next_x, next_y, start.z)
