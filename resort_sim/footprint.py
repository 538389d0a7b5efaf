"""Footprints, cell occupancy, and placement validation."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Iterable

from resort_sim.config import GridConfig
from resort_sim.grid import chebyshev, is_buildable, key, within_grid
from resort_sim.types import Cell, CellKey, Reason, Uid

if TYPE_CHECKING:
    from resort_sim.catalog import Catalog, CatalogItem


@dataclass(frozen=True)
class BuildingInstance:
    """A placed building.

    ``gx``/``gz`` is the footprint anchor (min corner).  ``handle`` belongs
    to the rendering layer and is ignored by equality.
    """

    uid: Uid
    id: str
    gx: int
    gz: int
    built_in: bool = False
    handle: Any = field(default=None, compare=False, repr=False)

    @property
    def anchor(self) -> Cell:
        return self.gx, self.gz


def footprint_cells(gx: int, gz: int, footprint: tuple[int, int] = (1, 1)) -> list[Cell]:
    """Cells covered by a ``(w, h)`` footprint anchored at its min corner.

    >>> footprint_cells(5, 3, (2, 2))
    [(5, 3), (5, 4), (6, 3), (6, 4)]
    """
    w, h = footprint
    if w < 1 or h < 1:
        raise ValueError(f"footprint dimensions must be >= 1, got {footprint}")
    return [(gx + dx, gz + dz) for dx in range(w) for dz in range(h)]


class Occupancy:
    """Maps every covered cell key to the uid of the building covering it."""

    def __init__(self) -> None:
        self._cells: dict[CellKey, Uid] = {}
        self._buildings: dict[Uid, list[CellKey]] = {}

    def add(self, uid: Uid, cells: Iterable[Cell]) -> None:
        self.remove(uid)
        keys = [key(gx, gz) for gx, gz in cells]
        for k in keys:
            self._cells[k] = uid
        self._buildings[uid] = keys

    def move(self, uid: Uid, cells: Iterable[Cell]) -> None:
        if uid not in self._buildings:
            raise KeyError(f"Building {uid!r} is not tracked")
        self.add(uid, cells)

    def remove(self, uid: Uid) -> None:
        for k in self._buildings.pop(uid, ()):
            if self._cells.get(k) == uid:
                del self._cells[k]

    def owner(self, gx: int, gz: int) -> Uid | None:
        return self._cells.get(key(gx, gz))

    def cells_of(self, uid: Uid) -> list[CellKey]:
        return list(self._buildings.get(uid, ()))

    def keys(self) -> frozenset[CellKey]:
        return frozenset(self._cells)

    def clear(self) -> None:
        self._cells.clear()
        self._buildings.clear()

    def rebuild(self, buildings: Iterable[BuildingInstance], catalog: Catalog) -> None:
        self.clear()
        for b in buildings:
            item = catalog.get(b.id)
            self.add(b.uid, footprint_cells(b.gx, b.gz, item.footprint))

    def __contains__(self, cell_key: object) -> bool:
        return cell_key in self._cells

    def __len__(self) -> int:
        return len(self._cells)


def validate_placement(
    item: CatalogItem,
    gx: int,
    gz: int,
    *,
    occupancy: Occupancy,
    buildings: Iterable[BuildingInstance],
    level: int,
    money: float,
    grid: GridConfig = GridConfig(),
    ignore_uid: Uid | None = None,
    check_level: bool = True,
    check_funds: bool = True,
) -> Reason | None:
    """Return the first failing rule for placing *item* at ``(gx, gz)``, or None.

    Rules run in order: grid bounds, buildable terrain, occupancy, same-item
    spacing, unlock level, funds.  ``ignore_uid`` treats that building as
    absent (used when moving it).
    """
    cells = footprint_cells(gx, gz, item.footprint)

    for cx, cz in cells:
        if not within_grid(cx, cz, grid):
            return Reason.OUT_OF_BOUNDS

    for cx, cz in cells:
        if not is_buildable(cx, cz, item.terrain, grid):
            return Reason.UNBUILDABLE

    for cx, cz in cells:
        owner = occupancy.owner(cx, cz)
        if owner is not None and owner != ignore_uid:
            return Reason.TILE_OCCUPIED

    if item.spacing > 0:
        for b in buildings:
            if b.id != item.id or b.uid == ignore_uid:
                continue
            if chebyshev(b.anchor, (gx, gz)) <= item.spacing:
                return Reason.SPACING_VIOLATION

    if check_level and level < item.unlock_level:
        return Reason.LEVEL_LOCKED

    if check_funds and money < item.cost:
        return Reason.INSUFFICIENT_FUNDS

    return None


class RoadDrag:
    """Straight-line drag gesture for road placement.

    The first pointer cell that differs from the start locks the dominant
    axis (ties lock x).  ``cells_to`` then yields each cell on the locked
    line that this gesture has not attempted yet.
    """

    def __init__(self, start: Cell) -> None:
        self.start = start
        self.axis: str | None = None
        self._attempted: set[CellKey] = {key(*start)}

    def cells_to(self, gx: int, gz: int) -> list[Cell]:
        sx, sz = self.start
        if self.axis is None:
            dx, dz = gx - sx, gz - sz
            if dx == 0 and dz == 0:
                return []
            self.axis = "x" if abs(dx) >= abs(dz) else "z"

        if self.axis == "x":
            lo, hi = min(sx, gx), max(sx, gx)
            line = [(x, sz) for x in range(lo, hi + 1)]
        else:
            lo, hi = min(sz, gz), max(sz, gz)
            line = [(sx, z) for z in range(lo, hi + 1)]

        fresh: list[Cell] = []
        for cell in line:
            k = key(*cell)
            if k in self._attempted:
                continue
            self._attempted.add(k)
            fresh.append(cell)
        return fresh

    def attempted(self) -> frozenset[CellKey]:
        return frozenset(self._attempted)
