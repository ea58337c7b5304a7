"""Configuration objects for maps and movement."""

from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar, Literal

from gridworld.errors import ConfigurationError
from gridworld.position import Position
from gridworld.terrain import TerrainKind

__all__ = ["Heuristic", "MapConfig", "PathfindingOptions"]

Heuristic = Literal["manhattan", "euclidean", "chebyshev"]


@dataclass(frozen=True, slots=True)
class MapConfig:
    """Settings of a GridMap.

    Attributes:
        wrap_edges: whether coordinates past an edge fold back to the other side
        default_terrain: terrain kind of freshly created cells
        default_movement_cost: movement cost of freshly created cells
    """

    wrap_edges: bool = False
    default_terrain: str = TerrainKind.GRASS
    default_movement_cost: float = 1.0

    def __post_init__(self):  # noqa: D105
        if not isinstance(self.wrap_edges, bool):
            raise ConfigurationError("wrap_edges", "must be a boolean")
        if not isinstance(self.default_terrain, str) or not self.default_terrain:
            raise ConfigurationError("default_terrain", "must be a non-empty string")
        if not isinstance(self.default_movement_cost, int | float) or not (
            self.default_movement_cost > 0
        ):
            raise ConfigurationError("default_movement_cost", "must be positive")


@dataclass(frozen=True, slots=True)
class PathfindingOptions:
    """Movement options for an external pathfinder.

    No search algorithm lives in this package, the options only describe the
    neighbourhood and the distance estimate a pathfinder should use.
    """

    heuristics: ClassVar[tuple[str, ...]] = ("manhattan", "euclidean", "chebyshev")

    allow_diagonal: bool = True
    heuristic: Heuristic = "manhattan"

    def __post_init__(self):  # noqa: D105
        if not isinstance(self.allow_diagonal, bool):
            raise ConfigurationError("allow_diagonal", "must be a boolean")
        if self.heuristic not in self.heuristics:
            raise ConfigurationError(
                "heuristic", f"must be one of {', '.join(self.heuristics)}"
            )

    def distance(self, a: Position, b: Position) -> float:
        """Evaluate the configured heuristic between two positions."""
        match self.heuristic:
            case "manhattan":
                return a.manhattan_distance_to(b)
            case "euclidean":
                return a.distance_to(b)
            case _:
                return a.chebyshev_distance_to(b)
