"""Grid maps made of terrain cells.

This package provides the discrete spatial substrate of gridworld:

- Cell: a single grid unit with terrain and at most one occupant
- GridMap: a bounded or wrapped rectangle of cells
- property layers: numpy views over cell attributes for vectorised selection

Maps are usually adopted by a ``gridworld.World``, which keeps track of which
unit sits where across maps.
"""

from gridworld.discrete_space.cell import Cell
from gridworld.discrete_space.grid import GridMap, NearbyCell, PlacedUnit
from gridworld.discrete_space.property_layer import (
    PROPERTY_LAYERS,
    build_property_layer,
    select_cells,
)

__all__ = [
    "PROPERTY_LAYERS",
    "Cell",
    "GridMap",
    "NearbyCell",
    "PlacedUnit",
    "build_property_layer",
    "select_cells",
]
