"""Terrain kinds and their movement, defense and visibility properties.

The set of terrain kinds is open: ``TerrainKind`` lists the kinds that come
with default properties, any other string is accepted as a custom kind and
receives the grass defaults.
"""

from __future__ import annotations

import dataclasses
from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any

__all__ = [
    "DEFAULT_TERRAIN_PROPERTIES",
    "TerrainKind",
    "TerrainProperties",
    "default_terrain_properties",
    "merge_terrain_properties",
]


class TerrainKind(StrEnum):
    """Terrain kinds with known default properties."""

    GRASS = "grass"
    WATER = "water"
    MOUNTAIN = "mountain"
    FOREST = "forest"
    DESERT = "desert"
    ROAD = "road"
    PLAINS = "plains"
    SWAMP = "swamp"
    SNOW = "snow"
    SAND = "sand"


@dataclass(frozen=True, slots=True)
class TerrainProperties:
    """Effects of a terrain on units standing on or moving through it.

    Attributes:
        movement_cost: multiplier applied to movement, must be positive
        defense_bonus: bonus to defense for a unit on this terrain
        visibility_modifier: factor applied to visibility from this terrain
        impassable: blocks walking and placement regardless of the cost
        tags: free-form labels for game specific extensions
    """

    movement_cost: float = 1.0
    defense_bonus: float | None = None
    visibility_modifier: float | None = None
    impassable: bool = False
    tags: frozenset[str] = field(default_factory=frozenset)

    def __post_init__(self):  # noqa: D105
        if not self.movement_cost > 0:
            raise ValueError(
                f"movement_cost must be positive, got {self.movement_cost!r}."
            )
        if not isinstance(self.tags, frozenset):
            object.__setattr__(self, "tags", frozenset(self.tags))


DEFAULT_TERRAIN_PROPERTIES: dict[str, TerrainProperties] = {
    TerrainKind.GRASS: TerrainProperties(movement_cost=1.0),
    TerrainKind.WATER: TerrainProperties(movement_cost=2.0, impassable=True),
    TerrainKind.MOUNTAIN: TerrainProperties(movement_cost=3.0),
    TerrainKind.FOREST: TerrainProperties(movement_cost=1.5, visibility_modifier=0.7),
    TerrainKind.DESERT: TerrainProperties(movement_cost=1.2),
    TerrainKind.ROAD: TerrainProperties(movement_cost=0.8),
    TerrainKind.PLAINS: TerrainProperties(movement_cost=1.0),
    TerrainKind.SWAMP: TerrainProperties(movement_cost=2.5),
    TerrainKind.SNOW: TerrainProperties(movement_cost=1.3),
    TerrainKind.SAND: TerrainProperties(movement_cost=1.4),
}


def default_terrain_properties(terrain: str) -> TerrainProperties:
    """Return the default properties of a terrain kind, grass for unknown kinds."""
    return DEFAULT_TERRAIN_PROPERTIES.get(
        terrain, DEFAULT_TERRAIN_PROPERTIES[TerrainKind.GRASS]
    )


def merge_terrain_properties(
    terrain: str, overrides: Mapping[str, Any] | TerrainProperties | None = None
) -> TerrainProperties:
    """Combine the defaults of a terrain kind with caller supplied overrides.

    Args:
        terrain: the terrain kind
        overrides: field values that win over the defaults. A complete
            TerrainProperties instance replaces the defaults entirely.

    Raises:
        TypeError: if an override names an unknown field
        ValueError: if the resulting movement cost is not positive
    """
    defaults = default_terrain_properties(terrain)
    if overrides is None:
        return defaults
    if isinstance(overrides, TerrainProperties):
        return overrides
    return dataclasses.replace(defaults, **overrides)
