"""The World keeps track of maps and of the units placed on them.

A World owns a set of uniquely named GridMaps and a registry that maps each
unit id to the map and position it occupies. The registry and the occupant
field of the map cells always agree:

- every tracked unit is the occupant of the cell at its tracked position
- every unit placed through the World has a tracked position

All occupancy changes go through ``_occupy`` and ``_vacate``, and every
relocation runs through ``_relocate``, which snapshots the affected cells and
restores them if the placement cannot complete or raises. A failed move
therefore leaves both the maps and the registry untouched. Map observers are
notified only after a relocation has been committed, so a rolled back move
is never reported.

Lookups return None when a map or unit is unknown; mutators return False.
Nothing in this module raises for a missing map or unit.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import NamedTuple

from gridworld.discrete_space.cell import Cell
from gridworld.discrete_space.grid import GridMap
from gridworld.events import EventEmitter, MapEventType
from gridworld.gridworld_logging import create_module_logger, method_logger
from gridworld.position import Position

__all__ = ["UnitPosition", "World"]

_logger = create_module_logger()


@dataclass(frozen=True, slots=True)
class UnitPosition:
    """Where a unit is located in a World.

    Attributes:
        unit_id: the unit identifier, owned by the caller
        map_id: name of the map the unit is on
        position: the cell the unit occupies
    """

    unit_id: str
    map_id: str
    position: Position


class _Vacated(NamedTuple):
    map_id: str
    position: Position
    cleared_map: GridMap | None


def _as_position(position: Position | Sequence) -> Position:
    if isinstance(position, Position):
        return position
    return Position.from_iterable(position)


class World(EventEmitter):
    """Registry of maps and unit positions."""

    def __init__(self) -> None:
        """Create an empty world."""
        super().__init__()
        self._maps: dict[str, GridMap] = {}
        self._unit_positions: dict[str, tuple[str, Position]] = {}

    # maps

    @method_logger(__name__)
    def add_map(self, grid_map: GridMap) -> bool:
        """Adopt a map.

        Returns:
            False if a map with the same name is already part of the world.
        """
        if grid_map.name in self._maps:
            _logger.debug(f"map {grid_map.name} already exists")
            return False

        self._maps[grid_map.name] = grid_map
        self._emit(MapEventType.MAP_CHANGED, grid_map.name, action="added")
        return True

    def get_map(self, name: str) -> GridMap | None:
        """Return the map with the given name, None if there is none."""
        return self._maps.get(name)

    def has_map(self, name: str) -> bool:
        """Whether a map with this name is part of the world."""
        return name in self._maps

    def get_all_maps(self) -> list[GridMap]:
        """Return the maps in the order they were added."""
        return list(self._maps.values())

    @method_logger(__name__)
    def remove_map(self, name: str) -> bool:
        """Remove a map together with every unit tracked on it.

        The removed units are cleared from the map cells as well, so the map
        can be added again later without stale occupants.

        Returns:
            False if no map with this name exists.
        """
        if name not in self._maps:
            return False

        removed = [
            unit_id
            for unit_id, (map_id, _) in self._unit_positions.items()
            if map_id == name
        ]
        vacated = [(unit_id, self._vacate(unit_id)) for unit_id in removed]
        for unit_id, entry in vacated:
            self._notify_vacated(unit_id, entry)

        del self._maps[name]
        self._emit(
            MapEventType.MAP_CHANGED, name, action="removed", removed_units=removed
        )
        return True

    # occupancy bookkeeping

    def _occupy(self, unit_id: str, grid_map: GridMap, position: Position) -> bool:
        if not grid_map._put_unit(unit_id, position.x, position.y):
            return False
        self._unit_positions[unit_id] = (grid_map.name, position)
        return True

    def _vacate(self, unit_id: str) -> _Vacated | None:
        entry = self._unit_positions.pop(unit_id, None)
        if entry is None:
            return None

        map_id, position = entry
        grid_map = self._maps.get(map_id)
        # a map removed behind our back is tolerated
        if grid_map is None or grid_map.get_unit_at(position.x, position.y) != unit_id:
            return _Vacated(map_id, position, None)
        grid_map._take_unit(position.x, position.y)
        return _Vacated(map_id, position, grid_map)

    @staticmethod
    def _notify_vacated(unit_id: str, vacated: _Vacated | None) -> None:
        if vacated is not None and vacated.cleared_map is not None:
            vacated.cleared_map._notify_occupancy(
                MapEventType.UNIT_REMOVED, vacated.position.x, vacated.position.y, unit_id
            )

    def _relocate(self, unit_id: str, grid_map: GridMap, target: Position) -> bool:
        previous = self._unit_positions.get(unit_id)

        touched: list[Cell] = [grid_map.get_cell(target.x, target.y)]
        if previous is not None and previous[0] in self._maps:
            touched.append(self._maps[previous[0]].get_cell(previous[1].x, previous[1].y))
        snapshot = [(cell, cell.occupant) for cell in touched if cell is not None]

        try:
            vacated = self._vacate(unit_id)
            placed = self._occupy(unit_id, grid_map, target)
        except BaseException:
            self._restore(unit_id, snapshot, previous)
            raise

        if not placed:
            self._restore(unit_id, snapshot, previous)
            _logger.debug(f"rolled back relocation of {unit_id} to {grid_map.name} {target}")
            return False

        # map observers only hear about the move once it is committed
        self._notify_vacated(unit_id, vacated)
        grid_map._notify_occupancy(MapEventType.UNIT_PLACED, target.x, target.y, unit_id)
        return True

    def _restore(self, unit_id: str, snapshot, previous) -> None:
        for cell, occupant in snapshot:
            cell.occupant = occupant
        if previous is None:
            self._unit_positions.pop(unit_id, None)
        else:
            self._unit_positions[unit_id] = previous

    @staticmethod
    def _normalize(grid_map: GridMap, x, y, z) -> Position:
        cx, cy = grid_map.resolve(x, y)
        return Position(cx, cy, z)

    # units

    def get_unit_position(self, unit_id: str) -> UnitPosition | None:
        """Return where a unit is, None if the unit is not tracked."""
        entry = self._unit_positions.get(unit_id)
        if entry is None:
            return None
        return UnitPosition(unit_id, *entry)

    def has_unit(self, unit_id: str) -> bool:
        """Whether the unit has a tracked position."""
        return unit_id in self._unit_positions

    @method_logger(__name__)
    def set_unit_position(
        self, unit_id: str, map_id: str, position: Position | Sequence
    ) -> bool:
        """Place a unit on a map, taking it away from wherever it was.

        The unit may come from any map or from nowhere. A tracked position on
        a map that has since been removed is simply discarded.

        Args:
            unit_id: the unit to place
            map_id: name of the destination map
            position: destination cell, a Position or an ``(x, y[, z])`` sequence

        Returns:
            False if the map does not exist or the cell is blocked or occupied.
        """
        position = _as_position(position)
        grid_map = self._maps.get(map_id)
        if grid_map is None:
            _logger.debug(f"map {map_id} does not exist")
            return False
        if not grid_map.can_place_unit_at(position.x, position.y):
            return False

        previous = self.get_unit_position(unit_id)
        target = self._normalize(grid_map, position.x, position.y, position.z)
        if not self._relocate(unit_id, grid_map, target):
            return False

        if previous is None:
            self._emit(MapEventType.UNIT_PLACED, map_id, target, unit_id=unit_id)
        else:
            self._emit(
                MapEventType.UNIT_MOVED,
                map_id,
                target,
                unit_id=unit_id,
                from_map=previous.map_id,
                from_position=previous.position,
            )
        return True

    @method_logger(__name__)
    def remove_unit(self, unit_id: str) -> bool:
        """Take a unit out of the world.

        Returns:
            False if the unit is not tracked.
        """
        entry = self._vacate(unit_id)
        if entry is None:
            return False

        self._notify_vacated(unit_id, entry)
        map_id, position, _ = entry
        self._emit(MapEventType.UNIT_REMOVED, map_id, position, unit_id=unit_id)
        return True

    @method_logger(__name__)
    def move_unit(self, unit_id: str, x, y) -> bool:
        """Move a unit to another cell of the map it is on.

        The z coordinate of the unit is kept.

        Returns:
            False if the unit is not tracked, its map is gone or the
            destination is blocked or occupied. The world is unchanged then.
        """
        current = self.get_unit_position(unit_id)
        if current is None:
            return False
        grid_map = self._maps.get(current.map_id)
        if grid_map is None or not grid_map.can_place_unit_at(x, y):
            return False

        target = self._normalize(grid_map, x, y, current.position.z)
        if not self._relocate(unit_id, grid_map, target):
            return False

        self._emit(
            MapEventType.UNIT_MOVED,
            current.map_id,
            target,
            unit_id=unit_id,
            from_map=current.map_id,
            from_position=current.position,
        )
        return True

    @method_logger(__name__)
    def move_unit_to_map(self, unit_id: str, new_map_id: str, x, y) -> bool:
        """Move a unit to a cell on another map.

        The z coordinate of the unit is kept.

        Returns:
            False if the unit is not tracked, either map is missing or the
            destination is blocked or occupied. The world is unchanged then.
        """
        current = self.get_unit_position(unit_id)
        if current is None:
            return False
        new_map = self._maps.get(new_map_id)
        if new_map is None or not new_map.can_place_unit_at(x, y):
            return False
        if current.map_id not in self._maps:
            _logger.debug(f"{unit_id} is tracked on missing map {current.map_id}")
            return False

        target = self._normalize(new_map, x, y, current.position.z)
        if not self._relocate(unit_id, new_map, target):
            return False

        self._emit(
            MapEventType.UNIT_MOVED,
            new_map_id,
            target,
            unit_id=unit_id,
            from_map=current.map_id,
            from_position=current.position,
        )
        return True

    def _tracked_pair(
        self, unit1_id: str, unit2_id: str
    ) -> tuple[UnitPosition, UnitPosition] | None:
        pos1 = self.get_unit_position(unit1_id)
        pos2 = self.get_unit_position(unit2_id)
        if pos1 is None or pos2 is None:
            return None
        return pos1, pos2

    def get_distance_between_units(
        self, unit1_id: str, unit2_id: str, use_manhattan: bool = False
    ) -> float | None:
        """Return the distance between two units on the same map.

        Returns:
            None if either unit is untracked or the units are on different maps.
        """
        positions = self._tracked_pair(unit1_id, unit2_id)
        if positions is None:
            return None
        pos1, pos2 = positions
        if pos1.map_id != pos2.map_id:
            return None

        if use_manhattan:
            return pos1.position.manhattan_distance_to(pos2.position)
        return pos1.position.distance_to(pos2.position)

    def are_units_adjacent(
        self, unit1_id: str, unit2_id: str, allow_diagonal: bool = True
    ) -> bool | None:
        """Check whether two units are neighbours.

        Returns:
            None if either unit is untracked, False if they are on different maps.
        """
        positions = self._tracked_pair(unit1_id, unit2_id)
        if positions is None:
            return None
        pos1, pos2 = positions
        if pos1.map_id != pos2.map_id:
            return False
        return pos1.position.is_adjacent_to(pos2.position, allow_diagonal)

    def get_all_units(self) -> list[UnitPosition]:
        """Return a snapshot of every tracked unit."""
        return [
            UnitPosition(unit_id, map_id, position)
            for unit_id, (map_id, position) in self._unit_positions.items()
        ]

    def get_units_on_map(self, map_id: str) -> list[UnitPosition]:
        """Return a snapshot of the units tracked on one map."""
        return [unit for unit in self.get_all_units() if unit.map_id == map_id]

    @method_logger(__name__)
    def clear(self) -> None:
        """Drop all maps and all tracked units."""
        vacated = [
            (unit_id, self._vacate(unit_id)) for unit_id in list(self._unit_positions)
        ]
        for unit_id, entry in vacated:
            self._notify_vacated(unit_id, entry)
        names = list(self._maps)
        self._maps.clear()
        for name in names:
            self._emit(MapEventType.MAP_CHANGED, name, action="cleared")

    def __repr__(self):  # noqa: D105
        return f"World(maps={list(self._maps)}, units={len(self._unit_positions)})"
