"""Tests for power coverage, happiness, and the income/expense pass."""
from __future__ import annotations

import pytest
from resort_sim.catalog import Catalog, CatalogItem, Category, default_catalog
from resort_sim.config import ExpenseTuning, HappinessTuning
from resort_sim.economy import (
    compute_economy,
    compute_expenses,
    compute_guest_count,
    compute_happiness,
    income_multiplier,
    is_powered,
    item_stats,
)
from resort_sim.footprint import BuildingInstance


@pytest.fixture
def catalog() -> Catalog:
    return default_catalog()


def _b(uid: str, item_id: str, gx: int = 0, gz: int = 0) -> BuildingInstance:
    return BuildingInstance(uid, item_id, gx, gz)


def _many(item_id: str, n: int) -> list[BuildingInstance]:
    return [_b(f"{item_id}-{i}", item_id, i, 0) for i in range(n)]


class TestPower:
    def test_inside_radius(self) -> None:
        gen = _b("g", "generator", 0, 0)
        assert is_powered(5, 0, [(gen, 6)])
        assert is_powered(6, 0, [(gen, 6)])

    def test_outside_radius(self) -> None:
        gen = _b("g", "generator", 0, 0)
        assert not is_powered(7, 0, [(gen, 6)])
        assert not is_powered(5, 4, [(gen, 6)])  # hypot = 6.4

    def test_any_generator_suffices(self) -> None:
        gens = [(_b("a", "generator", 0, 0), 2), (_b("b", "generator", 10, 0), 2)]
        assert is_powered(9, 0, gens)

    def test_no_generators(self) -> None:
        assert not is_powered(0, 0, [])


class TestHappiness:
    def test_empty_resort_clamps_to_zero(self, catalog: Catalog) -> None:
        assert compute_happiness([], catalog, 1000, False) == 0

    def test_mixed_resort(self, catalog: Catalog) -> None:
        buildings = [
            _b("p", "pool", 0, 0),
            *_many("road", 3),
            _b("palm-a", "palm", 5, 5),
            _b("palm-b", "palm", 7, 5),
            _b("g", "generator", -3, -3),
        ]
        # 5 + 2.4 (roads) + 2.4 (palms) + 1.6 (decor) - 2 (generator)
        assert compute_happiness(buildings, catalog, 1000, False) == 9

    def test_money_and_loan_penalties(self, catalog: Catalog) -> None:
        buildings = [
            _b("p", "pool", 0, 0),
            *_many("road", 3),
            _b("palm-a", "palm", 5, 5),
            _b("palm-b", "palm", 7, 5),
            _b("g", "generator", -3, -3),
        ]
        assert compute_happiness(buildings, catalog, -1, True) == 0
        assert compute_happiness(buildings, catalog, 1000, True) == 5

    def test_road_bonus_is_capped(self, catalog: Catalog) -> None:
        buildings = [_b("p", "pool"), *_many("road", 30)]
        assert compute_happiness(buildings, catalog, 0, False) == 25

    def test_crowding_penalty(self, catalog: Catalog) -> None:
        tuning = HappinessTuning(
            no_attraction_penalty=0, no_road_penalty=0, no_utility_penalty=0,
        )
        # 20 decor items: 16 decor bonus, 2 over the crowding threshold.
        assert compute_happiness(_many("flower_bed", 20), catalog, 0, False, tuning) == 15
        # Decor capped at 18, crowding capped at 10.
        assert compute_happiness(_many("flower_bed", 40), catalog, 0, False, tuning) == 8

    def test_clamped_to_100(self, catalog: Catalog) -> None:
        buildings = _many("pool", 30)
        assert compute_happiness(buildings, catalog, 0, False) == 100


class TestIncomeMultiplier:
    def test_bounds(self) -> None:
        assert income_multiplier(0) == 1.0
        assert income_multiplier(50) == pytest.approx(1.25)
        assert income_multiplier(100) == pytest.approx(1.5)

    def test_never_below_one(self) -> None:
        assert income_multiplier(-40) == 1.0


class TestGuestCount:
    def test_weights(self) -> None:
        assert compute_guest_count([_b("r", "reception"), _b("v", "villa")]) == 14

    def test_unweighted_items(self) -> None:
        assert compute_guest_count(_many("road", 5)) == 0


class TestExpenses:
    def test_raw_expenses(self, catalog: Catalog) -> None:
        buildings = [_b("g", "generator"), _b("v", "villa", 5, 0)]
        # (4 + 0.9 + 1.2 + 0.24) * 1.02
        assert compute_expenses(buildings, catalog, guests=6, level=1) == 6

    def test_roads_count_as_utilities(self, catalog: Catalog) -> None:
        # (4 + 4 * 0.45 + 4 * 0.5) * 1.02 = 7.956
        assert compute_expenses(_many("road", 4), catalog, guests=0, level=1) == 8

    def test_surcharges(self, catalog: Catalog) -> None:
        base = compute_expenses([_b("p", "pool")], catalog, guests=0, level=0)
        spa = compute_expenses([_b("s", "spa")], catalog, guests=0, level=0)
        assert base == 4  # 4.45
        assert spa == 6  # 6.05

    def test_custom_tuning(self, catalog: Catalog) -> None:
        tuning = ExpenseTuning(base=0, per_building=1, level_scale=0)
        assert compute_expenses(_many("palm", 3), catalog, 0, 9, tuning) == 3


class TestComputeEconomy:
    def test_powered_villa_is_active(self, catalog: Catalog) -> None:
        buildings = [_b("g", "generator", 0, 0), _b("v", "villa", 5, 0)]
        report = compute_economy(buildings, catalog, guests=6, level=1, happiness=0)
        (status,) = report.statuses
        assert status.uid == "v"
        assert status.active and status.power_ok and status.road_ok
        assert status.income_per_sec == 3
        assert report.income == 3
        assert report.expenses == 1  # raw 6, capped at 20% of income
        assert report.total == 2

    def test_villa_outside_radius_is_inactive(self, catalog: Catalog) -> None:
        buildings = [_b("g", "generator", 0, 0), _b("v", "villa", 7, 0)]
        report = compute_economy(buildings, catalog, guests=6, level=1, happiness=0)
        (status,) = report.statuses
        assert not status.active
        assert not status.power_ok
        assert status.income_per_sec == 0
        assert report.income == 0

    def test_unpowered_items_need_no_generator(self, catalog: Catalog) -> None:
        report = compute_economy([_b("r", "reception")], catalog, 8, 1, 0)
        (status,) = report.statuses
        assert status.active
        assert report.income == 2

    def test_non_earning_items_have_no_status(self, catalog: Catalog) -> None:
        buildings = [_b("g", "generator"), *_many("road", 2)]
        report = compute_economy(buildings, catalog, 0, 1, 0)
        assert report.statuses == ()

    def test_zero_income_means_zero_expenses(self, catalog: Catalog) -> None:
        report = compute_economy([_b("g", "generator")], catalog, 0, 1, 0)
        assert report.income == 0
        assert report.expenses == 0
        assert report.total == 0

    def test_loan_payment_added_to_expenses_only(self, catalog: Catalog) -> None:
        buildings = [_b("g", "generator", 0, 0), _b("v", "villa", 5, 0)]
        report = compute_economy(buildings, catalog, 6, 1, 0, loan_payment_per_sec=550 / 60)
        assert report.expenses == 10
        assert report.total == 2

    def test_happiness_boosts_income(self, catalog: Catalog) -> None:
        buildings = [_b("g", "generator", 0, 0), _b("v", "villa", 5, 0)]
        full = compute_economy(buildings, catalog, 6, 1, happiness=100)
        half = compute_economy(buildings, catalog, 6, 1, happiness=50)
        assert full.income == 5  # 4.5 rounds up
        assert half.income == 4  # 3.75
        assert full.happiness == 100

    def test_each_generator_uses_its_own_radius(self) -> None:
        catalog = Catalog([
            CatalogItem("small_gen", "Small", Category.UTILITY, cost=1, power_radius=2),
            CatalogItem("hut", "Hut", Category.STAY, cost=1, income_per_sec=2,
                        requires_power=True),
        ])
        near = compute_economy([_b("g", "small_gen"), _b("h", "hut", 2, 0)], catalog, 0, 1, 0)
        far = compute_economy([_b("g", "small_gen"), _b("h", "hut", 3, 0)], catalog, 0, 1, 0)
        assert near.statuses[0].active
        assert not far.statuses[0].active


class TestItemStats:
    def test_generator(self, catalog: Catalog) -> None:
        stats = item_stats(catalog.get("generator"))
        assert stats.expenses_per_sec == pytest.approx(1.65)
        assert stats.happiness_impact == pytest.approx(-2.0)
        assert stats.power_radius == 6

    def test_spa(self, catalog: Catalog) -> None:
        stats = item_stats(catalog.get("spa"))
        assert stats.income_per_sec == 9
        assert stats.expenses_per_sec == pytest.approx(2.05)
        assert stats.happiness_impact == pytest.approx(5.0)
        assert stats.guests == 8

    def test_palm(self, catalog: Catalog) -> None:
        stats = item_stats(catalog.get("palm"))
        assert stats.happiness_impact == pytest.approx(2.0)
        assert stats.power_radius is None
