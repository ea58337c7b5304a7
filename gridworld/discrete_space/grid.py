"""Terrain-bearing rectangular grid with single-occupancy cells.

A GridMap owns ``height`` rows of ``width`` cells, indexed ``cells[y][x]``.
Coordinates are resolved in one of two modes:

- bounded (default): only ``0 <= x < width`` and ``0 <= y < height`` resolve,
  lookups outside return None instead of raising
- wrapped (``wrap_edges=True``): every integral coordinate resolves by folding
  it back into range, so the map behaves like a torus

Each cell holds at most one occupant. The map checks terrain and occupancy
before placing a unit, but it does not know whether the same unit already sits
in another cell; that bookkeeping belongs to the World.
"""

from __future__ import annotations

import math
import numbers
from collections.abc import Iterator, Mapping
from typing import Any, NamedTuple

import numpy as np

from gridworld.config import MapConfig
from gridworld.discrete_space.cell import Cell
from gridworld.discrete_space.property_layer import build_property_layer, select_cells
from gridworld.errors import GridDimensionError
from gridworld.events import EventEmitter, MapEventType
from gridworld.gridworld_logging import create_module_logger, method_logger
from gridworld.position import Position
from gridworld.terrain import (
    TerrainProperties,
    default_terrain_properties,
    merge_terrain_properties,
)

__all__ = ["GridMap", "NearbyCell", "PlacedUnit"]

_logger = create_module_logger()


class PlacedUnit(NamedTuple):
    """A unit found on a map."""

    unit_id: str
    position: Position


class NearbyCell(NamedTuple):
    """A cell found around a center coordinate.

    ``x`` and ``y`` are the requested coordinates, which lie outside the map
    range on a wrapped map.
    """

    x: int
    y: int
    cell: Cell


def _as_index(value) -> int | None:
    if isinstance(value, numbers.Integral):
        return int(value)
    if isinstance(value, numbers.Real) and float(value).is_integer():
        return int(value)
    return None


def _validate_dimensions(width, height) -> None:
    for dim in (width, height):
        if isinstance(dim, bool) or not isinstance(dim, numbers.Integral) or dim <= 0:
            raise GridDimensionError(width, height)


class GridMap(EventEmitter):
    """A 2D grid of terrain cells.

    Attributes:
        name (str): the display name, unique within a World
        width (int): number of columns
        height (int): number of rows
        config (MapConfig): wrap mode and defaults for new cells
        cells (list[list[Cell]]): the grid, indexed ``cells[y][x]``

    """

    def __init__(
        self,
        width: int,
        height: int,
        name: str = "Unnamed Map",
        config: MapConfig | None = None,
        **config_kwargs: Any,
    ) -> None:
        """Create a new map filled with the default terrain.

        Args:
            width: number of columns, must be positive
            height: number of rows, must be positive
            name: the map name
            config: the map configuration
            config_kwargs: alternatively, MapConfig fields such as ``wrap_edges=True``

        Raises:
            GridDimensionError: if width or height is not a positive integer
        """
        super().__init__()
        if config is not None and config_kwargs:
            raise ValueError("Specify either config or keyword arguments, not both")
        _validate_dimensions(width, height)

        self.config = config if config is not None else MapConfig(**config_kwargs)
        self.name = name
        self.width = int(width)
        self.height = int(height)
        self.cells: list[list[Cell]] = [
            [self._create_default_cell() for _ in range(self.width)]
            for _ in range(self.height)
        ]

    @property
    def wrap_edges(self) -> bool:
        """Whether coordinates wrap around the edges."""
        return self.config.wrap_edges

    @property
    def dimensions(self) -> tuple[int, int]:
        """The ``(width, height)`` of the map."""
        return self.width, self.height

    def _create_default_cell(self) -> Cell:
        return Cell(
            self.config.default_terrain,
            TerrainProperties(movement_cost=self.config.default_movement_cost),
        )

    def resolve(self, x, y) -> tuple[int, int] | None:
        """Translate a coordinate into the storage coordinate of its cell.

        Returns:
            ``(x, y)`` inside ``[0, width) x [0, height)`` or None if the
            coordinate does not address a cell.
        """
        ix, iy = _as_index(x), _as_index(y)
        if ix is None or iy is None:
            return None
        if self.config.wrap_edges:
            # python's modulo is already non-negative for a positive divisor
            return ix % self.width, iy % self.height
        if 0 <= ix < self.width and 0 <= iy < self.height:
            return ix, iy
        return None

    def in_bounds(self, x, y) -> bool:
        """Check the raw coordinate against the map edges, ignoring wrapping."""
        return 0 <= x < self.width and 0 <= y < self.height

    def get_cell(self, x, y) -> Cell | None:
        """Return the cell at the coordinate or None if there is none."""
        coord = self.resolve(x, y)
        if coord is None:
            return None
        cx, cy = coord
        return self.cells[cy][cx]

    def get_terrain(self, x, y) -> str | None:
        """Return the terrain kind at the coordinate."""
        cell = self.get_cell(x, y)
        return cell.terrain if cell is not None else None

    def get_terrain_properties(self, x, y) -> TerrainProperties | None:
        """Return the terrain properties at the coordinate."""
        cell = self.get_cell(x, y)
        return cell.properties if cell is not None else None

    def default_terrain_properties(self, terrain: str) -> TerrainProperties:
        """Return the default properties for a terrain kind."""
        return default_terrain_properties(terrain)

    @method_logger(__name__)
    def set_terrain(
        self,
        x,
        y,
        terrain: str,
        overrides: Mapping[str, Any] | TerrainProperties | None = None,
    ) -> bool:
        """Change the terrain of a cell.

        The new properties are the defaults of the terrain kind, updated with
        ``overrides``. The occupant of the cell is kept.

        Args:
            x: column
            y: row
            terrain: the new terrain kind
            overrides: property values that win over the terrain defaults

        Returns:
            False if the coordinate addresses no cell, True otherwise.
        """
        cell = self.get_cell(x, y)
        if cell is None:
            return False

        properties = merge_terrain_properties(terrain, overrides)
        old_terrain = cell.terrain
        cell.terrain = terrain
        cell.properties = properties

        self._emit(
            MapEventType.TERRAIN_CHANGED,
            self.name,
            Position(*self.resolve(x, y)),
            old=old_terrain,
            new=terrain,
        )
        return True

    def is_walkable(self, x, y) -> bool:
        """Whether the cell exists, has passable terrain and no occupant."""
        cell = self.get_cell(x, y)
        return cell is not None and cell.is_walkable

    def can_place_unit_at(self, x, y) -> bool:
        """Whether a unit may be placed on the cell."""
        return self.is_walkable(x, y)

    @method_logger(__name__)
    def place_unit(self, unit_id: str, x, y) -> bool:
        """Occupy a cell with a unit.

        Returns:
            False if the cell is missing, blocked or occupied.
        """
        if not self._put_unit(unit_id, x, y):
            _logger.debug(f"cannot place {unit_id} at ({x}, {y}) on {self.name}")
            return False

        self._notify_occupancy(MapEventType.UNIT_PLACED, x, y, unit_id)
        return True

    @method_logger(__name__)
    def remove_unit(self, x, y) -> bool:
        """Clear the occupant of a cell.

        Returns:
            True if the coordinate addresses a cell, whether or not it was
            occupied. Removing twice is harmless.
        """
        if self.get_cell(x, y) is None:
            return False

        unit_id = self._take_unit(x, y)
        if unit_id is not None:
            self._notify_occupancy(MapEventType.UNIT_REMOVED, x, y, unit_id)
        return True

    def _put_unit(self, unit_id: str, x, y) -> bool:
        """Write the occupant of a cell without notifying observers."""
        if not self.can_place_unit_at(x, y):
            return False
        self.get_cell(x, y).occupant = unit_id
        return True

    def _take_unit(self, x, y) -> str | None:
        """Clear the occupant of a cell without notifying observers."""
        cell = self.get_cell(x, y)
        if cell is None:
            return None
        unit_id, cell.occupant = cell.occupant, None
        return unit_id

    def _notify_occupancy(self, event_type: MapEventType, x, y, unit_id: str) -> None:
        self._emit(event_type, self.name, Position(*self.resolve(x, y)), unit_id=unit_id)

    def get_unit_at(self, x, y) -> str | None:
        """Return the id of the unit in the cell, if any."""
        cell = self.get_cell(x, y)
        return cell.occupant if cell is not None else None

    def iter_cells(self) -> Iterator[tuple[int, int, Cell]]:
        """Yield ``(x, y, cell)`` for every cell in row-major order."""
        for y, row in enumerate(self.cells):
            for x, cell in enumerate(row):
                yield x, y, cell

    def get_all_units(self) -> list[PlacedUnit]:
        """Return every occupant with its position, scanning rows top to bottom."""
        return [
            PlacedUnit(cell.occupant, Position(x, y))
            for x, y, cell in self.iter_cells()
            if cell.occupant is not None
        ]

    def get_nearby_cells(
        self, x, y, radius: int, include_diagonals: bool = True
    ) -> list[NearbyCell]:
        """Return the cells within ``radius`` steps along each axis.

        The center is excluded. Without diagonals, offsets with ``|dx| == |dy|``
        are skipped. Coordinates that address no cell are left out.
        """
        cells = []
        for dy in range(-radius, radius + 1):
            for dx in range(-radius, radius + 1):
                if dx == 0 and dy == 0:
                    continue
                if not include_diagonals and abs(dx) == abs(dy):
                    continue

                nx, ny = x + dx, y + dy
                cell = self.get_cell(nx, ny)
                if cell is not None:
                    cells.append(NearbyCell(nx, ny, cell))
        return cells

    def get_region(
        self, top_left_x, top_left_y, width: int, height: int
    ) -> list[list[Cell]]:
        """Return copies of a rectangular block of cells, indexed ``[y][x]``.

        Coordinates that address no cell yield a fresh default cell, so a
        region can always be extracted.
        """
        region = []
        for dy in range(height):
            row = []
            for dx in range(width):
                cell = self.get_cell(top_left_x + dx, top_left_y + dy)
                row.append(cell.copy() if cell is not None else self._create_default_cell())
            region.append(row)
        return region

    @method_logger(__name__)
    def resize(self, new_width: int, new_height: int) -> None:
        """Change the map dimensions.

        Cells whose coordinates remain in range are kept, new cells get the
        default terrain. Cells beyond the new edges are dropped together with
        their occupants; a World holding those units must be reconciled by the
        caller.

        Raises:
            GridDimensionError: if a dimension is not a positive integer
        """
        _validate_dimensions(new_width, new_height)
        new_width, new_height = int(new_width), int(new_height)

        dropped = [
            unit
            for unit in self.get_all_units()
            if unit.position.x >= new_width or unit.position.y >= new_height
        ]
        if dropped:
            _logger.debug(
                f"resizing {self.name} drops units {[u.unit_id for u in dropped]}"
            )

        self.cells = [
            [
                self.cells[y][x]
                if x < self.width and y < self.height
                else self._create_default_cell()
                for x in range(new_width)
            ]
            for y in range(new_height)
        ]
        old_dimensions = self.dimensions
        self.width = new_width
        self.height = new_height

        self._emit(
            MapEventType.MAP_CHANGED,
            self.name,
            old_dimensions=old_dimensions,
            new_dimensions=self.dimensions,
            dropped_units=[u.unit_id for u in dropped],
        )

    def clone(self, name: str | None = None) -> GridMap:
        """Return a deep copy of the map, occupants included.

        Observers are not copied.
        """
        new_map = GridMap(
            self.width, self.height, name if name is not None else self.name, self.config
        )
        new_map.cells = [[cell.copy() for cell in row] for row in self.cells]
        return new_map

    def get_movement_cost(self, x, y) -> float:
        """Return the movement cost of the cell, infinite if there is no cell."""
        properties = self.get_terrain_properties(x, y)
        return properties.movement_cost if properties is not None else math.inf

    def property_layer(self, name: str) -> np.ndarray:
        """Return a ``(height, width)`` array of one cell attribute.

        Args:
            name: movement_cost, defense_bonus, visibility_modifier, impassable, occupied or empty
        """
        return build_property_layer(self, name)

    def select_cells(
        self,
        conditions: dict | None = None,
        extreme_values: dict | None = None,
        masks=None,
        only_empty: bool = False,
        return_list: bool = True,
    ):
        """Select cells based on property layer conditions.

        See ``gridworld.discrete_space.property_layer.select_cells``.
        """
        return select_cells(
            self,
            conditions=conditions,
            extreme_values=extreme_values,
            masks=masks,
            only_empty=only_empty,
            return_list=return_list,
        )

    def __repr__(self):  # noqa: D105
        return (
            f"GridMap(name={self.name!r}, width={self.width}, height={self.height}, "
            f"wrap_edges={self.wrap_edges})"
        )
