"""Tests for terrain kinds and their default properties."""

import pytest

from gridworld.terrain import (
    DEFAULT_TERRAIN_PROPERTIES,
    TerrainKind,
    TerrainProperties,
    default_terrain_properties,
    merge_terrain_properties,
)


def test_every_known_kind_has_defaults():
    """Test the default table covers all TerrainKind members."""
    assert set(DEFAULT_TERRAIN_PROPERTIES) == set(TerrainKind)


@pytest.mark.parametrize(
    "kind, cost",
    [
        ("grass", 1.0),
        ("water", 2.0),
        ("mountain", 3.0),
        ("forest", 1.5),
        ("desert", 1.2),
        ("road", 0.8),
        ("plains", 1.0),
        ("swamp", 2.5),
        ("snow", 1.3),
        ("sand", 1.4),
    ],
)
def test_default_movement_costs(kind, cost):
    """Test the default movement cost per terrain kind."""
    assert default_terrain_properties(kind).movement_cost == cost


def test_water_is_impassable_and_forest_limits_visibility():
    """Test the non-cost defaults."""
    assert default_terrain_properties(TerrainKind.WATER).impassable
    assert default_terrain_properties("forest").visibility_modifier == 0.7
    assert not default_terrain_properties("mountain").impassable


def test_unknown_kind_falls_back_to_grass():
    """Test custom terrain kinds get the grass defaults."""
    assert default_terrain_properties("lava") == default_terrain_properties("grass")


def test_merge_overrides_win():
    """Test overrides replace individual default fields."""
    merged = merge_terrain_properties("forest", {"movement_cost": 4.0, "defense_bonus": 2})
    assert merged.movement_cost == 4.0
    assert merged.defense_bonus == 2
    assert merged.visibility_modifier == 0.7


def test_merge_can_unblock_water():
    """Test impassable can be overridden like any other field."""
    assert not merge_terrain_properties("water", {"impassable": False}).impassable


def test_merge_with_full_properties_replaces_defaults():
    """Test passing a TerrainProperties instance uses it as is."""
    custom = TerrainProperties(movement_cost=9.0, tags={"cursed"})
    assert merge_terrain_properties("grass", custom) is custom
    assert custom.tags == frozenset({"cursed"})


def test_merge_rejects_unknown_fields():
    """Test free-form keys are not accepted."""
    with pytest.raises(TypeError):
        merge_terrain_properties("grass", {"slippery": True})


@pytest.mark.parametrize("cost", [0, -1.0])
def test_movement_cost_must_be_positive(cost):
    """Test non-positive movement costs are rejected."""
    with pytest.raises(ValueError, match="movement_cost must be positive"):
        TerrainProperties(movement_cost=cost)


def test_terrain_kind_is_a_string():
    """Test TerrainKind members compare equal to plain strings."""
    assert TerrainKind.SWAMP == "swamp"
    assert str(TerrainKind.SNOW) == "snow"
