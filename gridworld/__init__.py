"""gridworld: spatial substrate for grid-based games.

Core Objects: Position, GridMap, World.
"""

import datetime

__all__ = [
    "Cell",
    "GridMap",
    "MapConfig",
    "MapEvent",
    "MapEventType",
    "PathfindingOptions",
    "Position",
    "TerrainKind",
    "TerrainProperties",
    "UnitPosition",
    "World",
    "spatial",
]

__title__ = "gridworld"
__version__ = "0.3.0.dev"
__license__ = "Apache 2.0"
_this_year = datetime.datetime.now(tz=datetime.UTC).date().year
__copyright__ = f"Copyright {_this_year} gridworld contributors"

import gridworld.spatial as spatial  # noqa: E402
from gridworld.config import MapConfig, PathfindingOptions  # noqa: E402
from gridworld.discrete_space import Cell, GridMap  # noqa: E402
from gridworld.events import MapEvent, MapEventType  # noqa: E402
from gridworld.position import Position  # noqa: E402
from gridworld.terrain import TerrainKind, TerrainProperties  # noqa: E402
from gridworld.world import UnitPosition, World  # noqa: E402
