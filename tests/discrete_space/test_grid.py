"""Tests for GridMap."""

import math

import pytest

from gridworld.config import MapConfig
from gridworld.discrete_space.cell import Cell
from gridworld.discrete_space.grid import GridMap
from gridworld.errors import GridDimensionError
from gridworld.position import Position


@pytest.fixture
def grid():
    return GridMap(10, 10, "test")


@pytest.fixture
def torus():
    return GridMap(10, 5, "torus", wrap_edges=True)


class TestConstruction:
    """Creating maps."""

    def test_default_cells(self, grid):
        """Test all cells start with the default terrain and no occupant."""
        assert grid.name == "test"
        assert grid.dimensions == (10, 10)
        assert len(grid.cells) == 10
        assert all(len(row) == 10 for row in grid.cells)
        for _, _, cell in grid.iter_cells():
            assert cell.terrain == "grass"
            assert cell.properties.movement_cost == 1.0
            assert cell.occupant is None

    def test_rows_are_height_and_columns_width(self):
        """Test cells are indexed [y][x]."""
        grid = GridMap(4, 2)
        assert len(grid.cells) == 2
        assert len(grid.cells[0]) == 4
        assert grid.name == "Unnamed Map"

    def test_config_defaults_apply_to_cells(self):
        """Test the configured default terrain and cost."""
        grid = GridMap(3, 3, config=MapConfig(default_terrain="sand", default_movement_cost=2.5))
        assert grid.get_terrain(1, 1) == "sand"
        assert grid.get_movement_cost(1, 1) == 2.5

    def test_config_and_keywords_are_exclusive(self):
        """Test passing both a config and config keywords fails."""
        with pytest.raises(ValueError):
            GridMap(3, 3, config=MapConfig(), wrap_edges=True)

    @pytest.mark.parametrize("width, height", [(0, 5), (5, -1), (2.5, 3), (True, 3)])
    def test_invalid_dimensions(self, width, height):
        """Test dimensions must be positive integers."""
        with pytest.raises(GridDimensionError, match="positive integers"):
            GridMap(width, height)


class TestCoordinates:
    """Bounded and wrapped coordinate resolution."""

    def test_bounded_get_cell(self, grid):
        """Test get_cell is not None exactly inside the bounds."""
        for x in range(-2, 13):
            for y in range(-2, 13):
                inside = 0 <= x < 10 and 0 <= y < 10
                assert (grid.get_cell(x, y) is not None) is inside

    def test_out_of_bounds_queries_return_none(self, grid):
        """Test out of range lookups do not raise."""
        assert grid.get_terrain(-1, 0) is None
        assert grid.get_terrain_properties(10, 0) is None
        assert grid.get_unit_at(0, 10) is None

    def test_wrapped_get_cell_always_resolves(self, torus):
        """Test every coordinate addresses a cell on a wrapped map."""
        for x in range(-25, 25, 3):
            for y in range(-12, 12, 2):
                cell = torus.get_cell(x, y)
                assert cell is not None
                assert cell is torus.get_cell(x + torus.width, y + torus.height)

    def test_wrapped_negative_coordinates(self, torus):
        """Test negative coordinates fold to the far edge."""
        assert torus.resolve(-1, -1) == (9, 4)
        assert torus.resolve(10, 5) == (0, 0)
        assert torus.get_cell(-1, 0) is torus.cells[0][9]

    def test_non_integral_coordinates_do_not_resolve(self, grid, torus):
        """Test fractional coordinates address no cell."""
        assert grid.get_cell(1.5, 2) is None
        assert torus.get_cell(1.5, 2) is None
        assert grid.get_cell(2.0, 3.0) is grid.cells[3][2]

    def test_in_bounds_ignores_wrapping(self, torus):
        """Test in_bounds checks the raw edges."""
        assert torus.in_bounds(0, 0)
        assert not torus.in_bounds(-1, 0)
        assert not torus.in_bounds(10, 0)


class TestTerrain:
    """Terrain changes."""

    def test_set_terrain_water(self):
        """Test water costs 2.0 to enter."""
        grid = GridMap(10, 10)
        assert grid.set_terrain(5, 5, "water")
        assert grid.get_movement_cost(5, 5) == 2.0
        assert grid.get_terrain(5, 5) == "water"

    def test_set_terrain_out_of_bounds(self, grid):
        """Test set_terrain reports failure outside the map."""
        assert grid.set_terrain(10, 0, "water") is False

    def test_set_terrain_with_overrides(self, grid):
        """Test overrides are merged over the terrain defaults."""
        grid.set_terrain(1, 1, "forest", {"defense_bonus": 2.0})
        properties = grid.get_terrain_properties(1, 1)
        assert properties.movement_cost == 1.5
        assert properties.visibility_modifier == 0.7
        assert properties.defense_bonus == 2.0

    def test_unknown_terrain_uses_grass_defaults(self, grid):
        """Test custom kinds behave like grass."""
        grid.set_terrain(2, 2, "lava")
        assert grid.get_terrain(2, 2) == "lava"
        assert grid.get_terrain_properties(2, 2) == grid.default_terrain_properties("grass")

    def test_set_terrain_on_wrapped_map(self, torus):
        """Test wrapped coordinates change the folded cell."""
        assert torus.set_terrain(-1, -1, "road")
        assert torus.get_terrain(9, 4) == "road"

    def test_set_terrain_keeps_occupant(self, grid):
        """Test a terrain change does not evict the unit."""
        grid.place_unit("u1", 3, 3)
        grid.set_terrain(3, 3, "water")
        assert grid.get_unit_at(3, 3) == "u1"

    def test_movement_cost_outside_is_infinite(self, grid):
        """Test missing cells have an infinite cost."""
        assert grid.get_movement_cost(-1, -1) == math.inf


class TestUnits:
    """Placing and removing units."""

    def test_place_and_get_unit(self, grid):
        """Test a placed unit can be found."""
        assert grid.place_unit("u1", 2, 3)
        assert grid.get_unit_at(2, 3) == "u1"
        assert not grid.is_walkable(2, 3)

    def test_cannot_place_on_occupied_cell(self, grid):
        """Test single occupancy."""
        grid.place_unit("u1", 2, 3)
        assert grid.place_unit("u2", 2, 3) is False
        assert grid.get_unit_at(2, 3) == "u1"

    def test_cannot_place_on_impassable_terrain(self, grid):
        """Test impassable terrain blocks placement."""
        grid.set_terrain(4, 4, "water")
        assert not grid.is_walkable(4, 4)
        assert not grid.can_place_unit_at(4, 4)
        assert grid.place_unit("u1", 4, 4) is False

    def test_costly_terrain_is_still_walkable(self, grid):
        """Test a high cost alone does not block."""
        grid.set_terrain(4, 4, "mountain")
        assert grid.is_walkable(4, 4)

    def test_cannot_place_outside(self, grid):
        """Test placement outside the map fails."""
        assert grid.place_unit("u1", 10, 10) is False

    def test_map_does_not_track_unit_identity(self, grid):
        """Test the same id may be placed twice on a bare map."""
        assert grid.place_unit("u1", 0, 0)
        assert grid.place_unit("u1", 1, 0)

    def test_remove_unit_is_idempotent(self, grid):
        """Test removing twice returns True both times."""
        grid.place_unit("u1", 5, 5)
        assert grid.remove_unit(5, 5) is True
        assert grid.remove_unit(5, 5) is True
        assert grid.get_unit_at(5, 5) is None

    def test_remove_unit_outside(self, grid):
        """Test removing outside the map reports False."""
        assert grid.remove_unit(-1, 5) is False

    def test_get_all_units_is_row_major(self, grid):
        """Test units are listed y first, then x."""
        grid.place_unit("c", 1, 2)
        grid.place_unit("a", 9, 0)
        grid.place_unit("b", 0, 2)

        units = grid.get_all_units()
        assert [u.unit_id for u in units] == ["a", "b", "c"]
        assert units[0].position == Position(9, 0)


class TestNeighbourhoods:
    """Nearby cells and regions."""

    def test_nearby_cells_with_diagonals(self, grid):
        """Test a radius 1 neighbourhood has 8 cells."""
        nearby = grid.get_nearby_cells(5, 5, 1)
        assert len(nearby) == 8
        assert (5, 5) not in {(n.x, n.y) for n in nearby}

    def test_nearby_cells_without_diagonals(self, grid):
        """Test offsets with |dx| == |dy| are skipped."""
        nearby = grid.get_nearby_cells(5, 5, 2, include_diagonals=False)
        coords = {(n.x, n.y) for n in nearby}
        assert len(nearby) == 16
        assert (6, 6) not in coords
        assert (7, 7) not in coords
        assert (7, 6) in coords

    def test_nearby_cells_drop_outside(self, grid):
        """Test the corner has only 3 neighbours."""
        nearby = grid.get_nearby_cells(0, 0, 1)
        assert {(n.x, n.y) for n in nearby} == {(1, 0), (0, 1), (1, 1)}

    def test_nearby_cells_wrap(self, torus):
        """Test a wrapped map always yields the full neighbourhood."""
        nearby = torus.get_nearby_cells(0, 0, 1)
        assert len(nearby) == 8
        assert nearby[0].cell is torus.get_cell(9, 4)

    def test_region_returns_copies(self, grid):
        """Test region cells are snapshots."""
        grid.place_unit("u1", 1, 1)
        region = grid.get_region(0, 0, 3, 2)
        assert len(region) == 2
        assert len(region[0]) == 3
        assert region[1][1].occupant == "u1"

        region[1][1].occupant = None
        assert grid.get_unit_at(1, 1) == "u1"

    def test_region_outside_uses_default_cells(self, grid):
        """Test region extraction never fails."""
        grid.set_terrain(9, 9, "road")
        region = grid.get_region(8, 8, 4, 4)
        assert region[1][1].terrain == "road"
        assert region[3][3] == Cell("grass", grid.default_terrain_properties("grass"))


class TestResize:
    """Changing dimensions."""

    def test_grow_keeps_cells(self, grid):
        """Test existing cells survive and new cells are defaults."""
        grid.set_terrain(2, 2, "sand")
        grid.resize(15, 12)
        assert grid.dimensions == (15, 12)
        assert len(grid.cells) == 12
        assert all(len(row) == 15 for row in grid.cells)
        assert grid.get_terrain(2, 2) == "sand"
        assert grid.get_terrain(14, 11) == "grass"

    def test_shrink_drops_cells_and_occupants(self, grid):
        """Test cells beyond the new edges disappear."""
        grid.place_unit("keep", 1, 1)
        grid.place_unit("lost", 8, 8)
        grid.resize(5, 5)
        assert grid.get_cell(8, 8) is None
        assert [u.unit_id for u in grid.get_all_units()] == ["keep"]

    @pytest.mark.parametrize("width, height", [(0, 5), (5, 0), (-3, 3)])
    def test_invalid_resize(self, grid, width, height):
        """Test resize rejects non-positive dimensions without changing the map."""
        with pytest.raises(GridDimensionError):
            grid.resize(width, height)
        assert grid.dimensions == (10, 10)


class TestClone:
    """Deep copies."""

    def test_clone_is_deep(self, grid):
        """Test the clone shares no cells with the original."""
        grid.set_terrain(1, 1, "swamp")
        grid.place_unit("u1", 2, 2)
        copy = grid.clone("copy")

        assert copy.name == "copy"
        assert copy.get_terrain(1, 1) == "swamp"
        assert copy.get_unit_at(2, 2) == "u1"
        assert copy.get_cell(2, 2) is not grid.get_cell(2, 2)

        copy.remove_unit(2, 2)
        copy.set_terrain(1, 1, "road")
        assert grid.get_unit_at(2, 2) == "u1"
        assert grid.get_terrain(1, 1) == "swamp"

    def test_clone_keeps_name_and_config(self, torus):
        """Test the clone defaults to the same name and wrap mode."""
        copy = torus.clone()
        assert copy.name == "torus"
        assert copy.wrap_edges is True
