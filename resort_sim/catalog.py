"""Static building catalog."""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterator

from resort_sim.grid import Terrain
from resort_sim.types import UnknownItemError


class Category(str, Enum):
    STAY = "Stay"
    UTILITY = "Utility"
    DECOR = "Decor"
    ATTRACTION = "Attraction"
    FOOD = "Food"


@dataclass(frozen=True)
class CatalogItem:
    """Immutable building definition.

    Attributes:
        id: Unique catalog id, referenced by building instances.
        name: Display name.
        category: Shop category; drives happiness and guest destinations.
        cost: Coins charged on placement.
        footprint: ``(w, h)`` cells covered from the anchor cell.
        income_per_sec: Base income while active (0 for non-earning items).
        requires_power: Earns only inside a generator's radius.
        unlock_level: Minimum player level to build.
        building_tier: Multiplier for placement XP.
        power_radius: Set only on generators; coverage radius in cells.
        terrain: ``Terrain.SHORE`` restricts the item to the shore annulus.
        spacing: Chebyshev radius that must stay free of items with the same id.
    """

    id: str
    name: str
    category: Category
    cost: int
    footprint: tuple[int, int] = (1, 1)
    income_per_sec: float = 0
    requires_power: bool = False
    unlock_level: int = 1
    building_tier: float = 1.0
    power_radius: float | None = None
    terrain: Terrain = Terrain.LAND
    spacing: int = 0

    def __post_init__(self) -> None:
        if not self.id:
            raise ValueError("CatalogItem id must be non-empty")
        w, h = self.footprint
        if w < 1 or h < 1:
            raise ValueError(f"{self.id}: footprint dimensions must be >= 1, got {self.footprint}")
        if self.cost < 0:
            raise ValueError(f"{self.id}: cost must be >= 0, got {self.cost}")
        if self.income_per_sec < 0:
            raise ValueError(f"{self.id}: income_per_sec must be >= 0")
        if self.unlock_level < 1:
            raise ValueError(f"{self.id}: unlock_level must be >= 1")
        if self.spacing < 0:
            raise ValueError(f"{self.id}: spacing must be >= 0")
        if self.power_radius is not None:
            if self.power_radius < 0:
                raise ValueError(f"{self.id}: power_radius must be >= 0")
            if self.requires_power:
                raise ValueError(f"{self.id}: a generator cannot itself require power")

    @property
    def is_generator(self) -> bool:
        return self.power_radius is not None

    @property
    def is_road(self) -> bool:
        return self.id == "road"


class Catalog:
    """Ordered, read-only registry of catalog items."""

    def __init__(self, items: list[CatalogItem] | tuple[CatalogItem, ...]) -> None:
        self._items: dict[str, CatalogItem] = {}
        for item in items:
            if item.id in self._items:
                raise ValueError(f"Duplicate catalog id {item.id!r}")
            self._items[item.id] = item

    def get(self, item_id: str) -> CatalogItem:
        try:
            return self._items[item_id]
        except KeyError:
            raise UnknownItemError(item_id) from None

    def has(self, item_id: str) -> bool:
        return item_id in self._items

    def ids(self) -> list[str]:
        return list(self._items)

    def items(self) -> list[CatalogItem]:
        return list(self._items.values())

    def generators(self) -> list[CatalogItem]:
        return [item for item in self._items.values() if item.is_generator]

    def unlocked_between(self, old_level: int, new_level: int) -> list[CatalogItem]:
        """Items whose unlock level lies in ``(old_level, new_level]``."""
        return [
            item for item in self._items.values()
            if old_level < item.unlock_level <= new_level
        ]

    def __iter__(self) -> Iterator[CatalogItem]:
        return iter(self._items.values())

    def __len__(self) -> int:
        return len(self._items)

    def __contains__(self, item_id: object) -> bool:
        return item_id in self._items


def default_catalog() -> Catalog:
    """Create the standard resort catalog."""
    return Catalog([
        CatalogItem("reception", "Reception", Category.STAY, cost=150,
                    footprint=(2, 2), income_per_sec=2, building_tier=1.5),
        CatalogItem("villa", "Villa", Category.STAY, cost=200,
                    footprint=(2, 2), income_per_sec=3, requires_power=True),
        CatalogItem("road", "Road", Category.UTILITY, cost=10, building_tier=0.2),
        CatalogItem("generator", "Generator", Category.UTILITY, cost=250,
                    building_tier=1.2, power_radius=6),
        CatalogItem("palm", "Palm", Category.DECOR, cost=15,
                    building_tier=0.2, spacing=1),
        CatalogItem("flower_bed", "Flower Bed", Category.DECOR, cost=25,
                    building_tier=0.3),
        CatalogItem("water_tower", "Water Tower", Category.UTILITY, cost=120,
                    unlock_level=2, building_tier=0.8),
        CatalogItem("pool", "Pool", Category.ATTRACTION, cost=300, footprint=(2, 2),
                    income_per_sec=4, requires_power=True, unlock_level=2, building_tier=2.0),
        CatalogItem("icecream_parlour", "Ice Cream Parlour", Category.ATTRACTION, cost=260,
                    income_per_sec=3, requires_power=True, unlock_level=2, building_tier=1.5),
        CatalogItem("burgershop", "Burger Shop", Category.FOOD, cost=220,
                    income_per_sec=3, requires_power=True, unlock_level=2, building_tier=1.5),
        CatalogItem("villa_plus", "Villa Plus", Category.STAY, cost=450, footprint=(2, 2),
                    income_per_sec=7, requires_power=True, unlock_level=3, building_tier=1.5),
        CatalogItem("nightbar", "Night Bar", Category.ATTRACTION, cost=400, footprint=(2, 1),
                    income_per_sec=5, requires_power=True, unlock_level=4, building_tier=2.0),
        CatalogItem("beach_dj", "Beach DJ", Category.ATTRACTION, cost=350,
                    income_per_sec=5, requires_power=True, unlock_level=4, building_tier=2.0,
                    terrain=Terrain.SHORE),
        CatalogItem("beachclub", "Beach Club", Category.ATTRACTION, cost=600, footprint=(2, 2),
                    income_per_sec=8, requires_power=True, unlock_level=5, building_tier=2.5,
                    terrain=Terrain.SHORE),
        CatalogItem("spa", "Spa", Category.ATTRACTION, cost=700, footprint=(2, 2),
                    income_per_sec=9, requires_power=True, unlock_level=6, building_tier=3.0),
        CatalogItem("pool_halloween", "Halloween Pool", Category.ATTRACTION, cost=500,
                    footprint=(2, 2), income_per_sec=6, requires_power=True,
                    unlock_level=7, building_tier=2.5),
    ])
