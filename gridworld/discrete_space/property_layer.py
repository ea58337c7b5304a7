"""Numpy views over the cells of a GridMap.

Cells store their terrain properties as objects, which is convenient for
single cell lookups but slow for map wide questions such as "which open cells
cost less than 1.5 to enter". This module turns one cell attribute at a time
into a ``(height, width)`` array, indexed ``[y, x]``, and provides vectorised
cell selection on top of those arrays.

The arrays are snapshots: changing them does not change the map.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING

import numpy as np

from gridworld.errors import PropertyLayerNotFoundError

if TYPE_CHECKING:
    from gridworld.discrete_space.cell import Cell
    from gridworld.discrete_space.grid import GridMap

__all__ = ["PROPERTY_LAYERS", "build_property_layer", "select_cells"]


def _optional(value: float | None) -> float:
    return np.nan if value is None else value


PROPERTY_LAYERS: dict[str, tuple[type, Callable[[Cell], object]]] = {
    "movement_cost": (float, lambda cell: cell.properties.movement_cost),
    "defense_bonus": (float, lambda cell: _optional(cell.properties.defense_bonus)),
    "visibility_modifier": (
        float,
        lambda cell: _optional(cell.properties.visibility_modifier),
    ),
    "impassable": (bool, lambda cell: cell.properties.impassable),
    "occupied": (bool, lambda cell: cell.occupant is not None),
    "empty": (bool, lambda cell: cell.occupant is None),
}


def build_property_layer(grid_map: GridMap, name: str) -> np.ndarray:
    """Return the named cell attribute of every cell as an array.

    Args:
        grid_map: the map to read
        name: one of the keys of PROPERTY_LAYERS

    Raises:
        PropertyLayerNotFoundError: if name is not a known layer
    """
    try:
        dtype, getter = PROPERTY_LAYERS[name]
    except KeyError as e:
        raise PropertyLayerNotFoundError(name) from e

    return np.array(
        [[getter(cell) for cell in row] for row in grid_map.cells], dtype=dtype
    ).reshape(grid_map.height, grid_map.width)


def select_cells(
    grid_map: GridMap,
    conditions: dict | None = None,
    extreme_values: dict | None = None,
    masks=None,
    only_empty: bool = False,
    return_list: bool = True,
):
    """Select cells using vectorised NumPy operations on property layers.

    Args:
        grid_map: the map to select from
        conditions: ``{layer_name: callable}``, the callable receives the array and returns a boolean mask.
        extreme_values: ``{layer_name: "highest"|"lowest"}``.
        masks: Boolean array or list of boolean arrays shaped ``(height, width)`` (AND-combined).
        only_empty: Restrict to cells without an occupant.
        return_list: If True return ``(x, y)`` tuples in row-major order; if False return the boolean mask.
    """
    shape = (grid_map.height, grid_map.width)
    combined = np.ones(shape, dtype=bool)
    if masks is not None:
        for m in [masks] if isinstance(masks, np.ndarray) else masks:
            m = np.asarray(m, dtype=bool)
            if m.shape != shape:
                raise ValueError(
                    f"Mask shape {m.shape} does not match map shape {shape}."
                )
            combined &= m
    if only_empty:
        combined &= build_property_layer(grid_map, "empty")
    if conditions:
        for layer_name, cond in conditions.items():
            combined &= cond(build_property_layer(grid_map, layer_name))
    if extreme_values:
        for layer_name, mode in extreme_values.items():
            if not combined.any():
                break
            layer = build_property_layer(grid_map, layer_name)
            masked_layer = np.ma.array(layer, mask=~combined)
            if mode == "highest":
                target = masked_layer.max()
            elif mode == "lowest":
                target = masked_layer.min()
            else:
                raise ValueError(f"Invalid mode '{mode}'. Use 'highest' or 'lowest'.")
            combined &= layer == target
    if return_list:
        return [(int(x), int(y)) for y, x in zip(*np.nonzero(combined))]
    return combined
