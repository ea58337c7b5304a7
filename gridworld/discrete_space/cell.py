"""Cells are the basic spatial unit of a GridMap.

A cell carries a terrain kind, the terrain's properties and at most one
occupant. Occupancy is changed through the owning GridMap, which checks
walkability before placing anything.
"""

from __future__ import annotations

from gridworld.terrain import TerrainProperties

__all__ = ["Cell"]


class Cell:
    """The cell represents a position in a discrete space.

    Attributes:
        terrain (str): the terrain kind of the cell
        properties (TerrainProperties): movement, defense and visibility effects
        occupant (str | None): id of the unit in this cell, if any

    """

    __slots__ = ["occupant", "properties", "terrain"]

    def __init__(
        self,
        terrain: str,
        properties: TerrainProperties,
        occupant: str | None = None,
    ) -> None:
        """Initialise the cell.

        Args:
            terrain: the terrain kind
            properties: the terrain properties
            occupant: id of the unit in this cell
        """
        self.terrain = terrain
        self.properties = properties
        self.occupant = occupant

    @property
    def is_empty(self) -> bool:
        """Whether no unit occupies the cell."""
        return self.occupant is None

    @property
    def is_blocked(self) -> bool:
        """Whether the terrain forbids walking onto the cell."""
        return self.properties.impassable

    @property
    def is_walkable(self) -> bool:
        """Whether a unit could step onto this cell right now."""
        return not self.is_blocked and self.is_empty

    def copy(self) -> Cell:
        """Return an independent copy of this cell."""
        # TerrainProperties is frozen, sharing it is safe
        return Cell(self.terrain, self.properties, self.occupant)

    def __eq__(self, other) -> bool:  # noqa: D105
        if not isinstance(other, Cell):
            return NotImplemented
        return (
            self.terrain == other.terrain
            and self.properties == other.properties
            and self.occupant == other.occupant
        )

    __hash__ = None

    def __repr__(self):  # noqa: D105
        return f"Cell(terrain={self.terrain!r}, occupant={self.occupant!r})"
