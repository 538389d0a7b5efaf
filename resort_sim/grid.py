"""Grid coordinate mapping and island terrain predicates.

Cells are addressed by integer ``(gx, gz)``; ``grid_to_world`` returns the
cell centre and ``world_to_grid`` rounds back, so the two are exact inverses
on integer cells.
"""
from __future__ import annotations

import math
from enum import Enum

from resort_sim.config import GridConfig
from resort_sim.types import Cell, CellKey

_DEFAULT = GridConfig()


class Terrain(str, Enum):
    """Where an item may stand."""

    LAND = "land"
    SHORE = "shore"


def _round_away(value: float) -> int:
    if value >= 0:
        return math.floor(value + 0.5)
    return -math.floor(-value + 0.5)


def world_to_grid(x: float, z: float, cell_size: float = _DEFAULT.cell_size) -> Cell:
    return _round_away(x / cell_size), _round_away(z / cell_size)


def grid_to_world(gx: int, gz: int, cell_size: float = _DEFAULT.cell_size) -> tuple[float, float]:
    return gx * cell_size, gz * cell_size


def key(gx: int, gz: int) -> CellKey:
    """Canonical set/map key for a cell.

    >>> key(3, -2)
    '3,-2'
    """
    return f"{gx},{gz}"


def parse_key(value: CellKey) -> Cell:
    gx, gz = value.split(",")
    return int(gx), int(gz)


def neighbors4(gx: int, gz: int) -> list[Cell]:
    return [
        (gx + 1, gz),
        (gx - 1, gz),
        (gx, gz + 1),
        (gx, gz - 1),
    ]


def within_grid(gx: int, gz: int, config: GridConfig = _DEFAULT) -> bool:
    return abs(gx) <= config.half_extent and abs(gz) <= config.half_extent


def radial_distance(gx: int, gz: int, config: GridConfig = _DEFAULT) -> float:
    x, z = grid_to_world(gx, gz, config.cell_size)
    return math.hypot(x, z)


def on_shore(gx: int, gz: int, config: GridConfig = _DEFAULT) -> bool:
    r = radial_distance(gx, gz, config)
    return config.shore_inner_radius <= r <= config.shore_outer_radius


def is_buildable(
    gx: int,
    gz: int,
    terrain: Terrain = Terrain.LAND,
    config: GridConfig = _DEFAULT,
) -> bool:
    """Inner grass disc or shore annulus; shore-only items need the annulus."""
    if terrain is Terrain.SHORE:
        return on_shore(gx, gz, config)
    return radial_distance(gx, gz, config) <= config.grass_radius or on_shore(gx, gz, config)


def shore_cells(config: GridConfig = _DEFAULT) -> list[Cell]:
    half = config.half_extent
    return [
        (gx, gz)
        for gx in range(-half, half + 1)
        for gz in range(-half, half + 1)
        if on_shore(gx, gz, config)
    ]


def chebyshev(a: Cell, b: Cell) -> int:
    return max(abs(a[0] - b[0]), abs(a[1] - b[1]))
