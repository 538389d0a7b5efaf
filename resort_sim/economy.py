"""Economy engine: power coverage, happiness, guests, income and expenses.

Everything here is a pure function of the building list; the simulation
recomputes the whole report after each mutation.
"""
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import TYPE_CHECKING, Iterable, Sequence

from resort_sim.catalog import Category
from resort_sim.config import ExpenseTuning, GuestTuning, HappinessTuning
from resort_sim.types import Uid, round_half_up

if TYPE_CHECKING:
    from resort_sim.catalog import Catalog, CatalogItem
    from resort_sim.footprint import BuildingInstance


@dataclass(frozen=True)
class EconomyStatus:
    uid: Uid
    id: str
    gx: int
    gz: int
    active: bool
    road_ok: bool
    power_ok: bool
    income_per_sec: int


@dataclass(frozen=True)
class EconomyReport:
    """Result of one economy pass.

    ``total`` is net income per second before loan payments; ``expenses``
    includes the loan payment so the HUD can show the full outflow.
    """

    total: int
    income: int
    expenses: int
    statuses: tuple[EconomyStatus, ...]
    happiness: int = 0
    guests: int = 0

    @classmethod
    def empty(cls) -> EconomyReport:
        return cls(total=0, income=0, expenses=0, statuses=())


@dataclass(frozen=True)
class ItemStats:
    income_per_sec: float
    expenses_per_sec: float
    happiness_impact: float
    guests: int
    power_radius: float | None


def is_powered(gx: int, gz: int, generators: Iterable[tuple[BuildingInstance, float]]) -> bool:
    """True if any ``(generator, radius)`` pair covers ``(gx, gz)``."""
    for g, radius in generators:
        if math.hypot(gx - g.gx, gz - g.gz) <= radius:
            return True
    return False


def compute_guest_count(
    buildings: Iterable[BuildingInstance],
    tuning: GuestTuning = GuestTuning(),
) -> int:
    return sum(tuning.weights.get(b.id, 0) for b in buildings)


def compute_happiness(
    buildings: Sequence[BuildingInstance],
    catalog: Catalog,
    money: float,
    has_loan: bool,
    tuning: HappinessTuning = HappinessTuning(),
) -> int:
    """Settlement quality score in ``[0, 100]``."""
    attractions = roads = palms = generators = decor = utilities = non_roads = 0
    for b in buildings:
        item = catalog.get(b.id)
        if item.category is Category.ATTRACTION:
            attractions += 1
        if item.is_road:
            roads += 1
        else:
            non_roads += 1
        if b.id == "palm":
            palms += 1
        if item.is_generator:
            generators += 1
        if item.category is Category.DECOR:
            decor += 1
        if item.category is Category.UTILITY:
            utilities += 1

    t = tuning
    score = t.base
    score += attractions * t.attraction_bonus
    score += min(t.road_cap, roads * t.road_bonus)
    score += min(t.palm_cap, palms * t.palm_bonus)
    score += min(t.decor_cap, decor * t.decor_bonus)
    score -= generators * t.generator_penalty
    if non_roads > t.crowding_threshold:
        score -= min(t.crowding_cap, (non_roads - t.crowding_threshold) * t.crowding_penalty)
    if attractions == 0:
        score -= t.no_attraction_penalty
    if roads == 0:
        score -= t.no_road_penalty
    if utilities == 0:
        score -= t.no_utility_penalty
    if money < 0:
        score -= t.negative_money_penalty
    if has_loan:
        score -= t.loan_penalty

    return max(0, min(100, round_half_up(score)))


def income_multiplier(happiness: float, tuning: HappinessTuning = HappinessTuning()) -> float:
    """Happiness only ever boosts income, up to ``max_income_boost``."""
    return max(1.0, 1.0 + happiness / 100 * tuning.max_income_boost)


def compute_expenses(
    buildings: Sequence[BuildingInstance],
    catalog: Catalog,
    guests: int,
    level: int,
    tuning: ExpenseTuning = ExpenseTuning(),
) -> int:
    """Raw operating cost per second, before the income cap."""
    generators = utilities = 0
    surcharge = 0.0
    for b in buildings:
        item = catalog.get(b.id)
        if item.is_generator:
            generators += 1
        elif item.category is Category.UTILITY:
            utilities += 1
        surcharge += tuning.surcharges.get(b.id, 0.0)

    raw = (
        tuning.base
        + len(buildings) * tuning.per_building
        + generators * tuning.per_generator
        + guests * tuning.per_guest
        + utilities * tuning.per_utility
        + surcharge
    )
    return max(0, round_half_up(raw * (1 + level * tuning.level_scale)))


def compute_economy(
    buildings: Sequence[BuildingInstance],
    catalog: Catalog,
    guests: int,
    level: int,
    happiness: float,
    loan_payment_per_sec: float = 0.0,
    *,
    happiness_tuning: HappinessTuning = HappinessTuning(),
    expense_tuning: ExpenseTuning = ExpenseTuning(),
) -> EconomyReport:
    generators = [
        (b, catalog.get(b.id).power_radius)
        for b in buildings
        if catalog.get(b.id).is_generator
    ]
    multiplier = income_multiplier(happiness, happiness_tuning)

    statuses: list[EconomyStatus] = []
    income = 0
    for b in buildings:
        item = catalog.get(b.id)
        if item.income_per_sec <= 0:
            continue
        road_ok = True
        power_ok = is_powered(b.gx, b.gz, generators) if item.requires_power else True
        active = road_ok and power_ok
        earned = round_half_up(item.income_per_sec * multiplier) if active else 0
        statuses.append(EconomyStatus(
            uid=b.uid, id=b.id, gx=b.gx, gz=b.gz,
            active=active, road_ok=road_ok, power_ok=power_ok,
            income_per_sec=earned,
        ))
        income += earned

    raw = compute_expenses(buildings, catalog, guests, level, expense_tuning)
    if income > 0:
        capped = min(raw, round_half_up(income * expense_tuning.income_cap_ratio))
    else:
        capped = 0

    return EconomyReport(
        total=income - capped,
        income=income,
        expenses=capped + round_half_up(loan_payment_per_sec),
        statuses=tuple(statuses),
        happiness=round_half_up(happiness),
        guests=guests,
    )


def item_stats(
    item: CatalogItem,
    *,
    happiness_tuning: HappinessTuning = HappinessTuning(),
    expense_tuning: ExpenseTuning = ExpenseTuning(),
    guest_tuning: GuestTuning = GuestTuning(),
) -> ItemStats:
    """Per-item numbers for the build shop tooltip."""
    h = happiness_tuning
    impact = 0.0
    if item.is_road:
        impact += h.road_bonus
    if item.id == "palm":
        impact += h.palm_bonus
    if item.category is Category.DECOR:
        impact += h.decor_bonus
    if item.category is Category.ATTRACTION:
        impact += h.attraction_bonus
    if item.is_generator:
        impact -= h.generator_penalty

    upkeep = expense_tuning.per_building
    if item.is_generator:
        upkeep += expense_tuning.per_generator
    elif item.category is Category.UTILITY:
        upkeep += expense_tuning.per_utility
    upkeep += expense_tuning.surcharges.get(item.id, 0.0)

    return ItemStats(
        income_per_sec=item.income_per_sec,
        expenses_per_sec=upkeep,
        happiness_impact=impact,
        guests=guest_tuning.weights.get(item.id, 0),
        power_radius=item.power_radius,
    )
