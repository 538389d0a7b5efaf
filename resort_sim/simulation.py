"""Simulation - the placement orchestrator and owner of all game state."""
from __future__ import annotations

import dataclasses
import logging
import os
import random
from typing import Any

from resort_sim.catalog import Catalog, CatalogItem, default_catalog
from resort_sim.commands import (
    CommandQueue,
    CommandResult,
    DemolishAt,
    DemolishBuilding,
    DragRoadTo,
    EndRoadDrag,
    MoveBuilding,
    PlaceBuilding,
    ResetGame,
    StartRoadDrag,
    TakeLoan,
    Tick,
)
from resort_sim.config import ResortConfig
from resort_sim.display import MoneyDisplay
from resort_sim.economy import (
    EconomyReport,
    EconomyStatus,
    compute_economy,
    compute_guest_count,
    compute_happiness,
)
from resort_sim.events import Event, EventBus
from resort_sim.finance import BankruptcyWatchdog, LoanState, loan_tick, take_loan
from resort_sim.footprint import (
    BuildingInstance,
    Occupancy,
    RoadDrag,
    footprint_cells,
    validate_placement,
)
from resort_sim.grid import is_buildable, key, shore_cells, within_grid
from resort_sim.guests import Guest, GuestRouter
from resort_sim.progression import (
    EarningTracker,
    ProgressionState,
    apply_xp,
    building_xp,
)
from resort_sim.schedule import Scheduler, TickKind
from resort_sim.tutorial import TutorialProgress, tutorial_progress
from resort_sim.types import CellKey, Reason, Uid

logger = logging.getLogger(__name__)

BUILT_IN_PALM_COUNT = 14


class Simulation:
    """Single owner of buildings, money, progression, loan and bankruptcy state.

    Every mutation goes through a method here (or ``apply`` with a command),
    and derived state (occupancy, economy) is recomputed before the method
    returns.  Rendering code reads the properties and the event bus.
    """

    def __init__(
        self,
        catalog: Catalog | None = None,
        config: ResortConfig | None = None,
        seed: int | None = None,
    ) -> None:
        self._catalog = catalog if catalog is not None else default_catalog()
        self._config = config if config is not None else ResortConfig()
        if seed is None:
            seed = int.from_bytes(os.urandom(8))
        self._seed = seed
        self._rng = random.Random(seed)

        cfg = self._config
        self._bus = EventBus()
        self._scheduler = Scheduler(cfg.timers)
        self._occupancy = Occupancy()
        self._router = GuestRouter(cfg.guests)
        self._earning = EarningTracker(cfg.xp)
        self._watchdog = BankruptcyWatchdog(cfg.bankruptcy)
        self._display = MoneyDisplay(cfg.starting_money, cfg.timers.money_display)

        self._buildings: list[BuildingInstance] = []
        self._money: float = cfg.starting_money
        self._progression = ProgressionState.initial(cfg.xp)
        self._loan: LoanState | None = None
        self._drag: RoadDrag | None = None
        self._next_uid = 0
        self._economy = EconomyReport.empty()
        self._last_total = 0

        self._queue = CommandQueue()
        self._queue.handle(PlaceBuilding, lambda c: self.place_building(c.item_id, c.gx, c.gz))
        self._queue.handle(MoveBuilding, lambda c: self.move_building(c.uid, c.gx, c.gz))
        self._queue.handle(DemolishBuilding, lambda c: self.demolish_building(c.uid))
        self._queue.handle(DemolishAt, lambda c: self.demolish_at(c.gx, c.gz))
        self._queue.handle(TakeLoan, lambda c: self.take_loan(c.principal, c.rate))
        self._queue.handle(Tick, lambda c: self.tick(c.kind))
        self._queue.handle(ResetGame, lambda c: self.reset_game())
        self._queue.handle(StartRoadDrag, lambda c: self.start_road_drag(c.gx, c.gz))
        self._queue.handle(DragRoadTo, lambda c: self.drag_road_to(c.gx, c.gz))
        self._queue.handle(EndRoadDrag, lambda c: self.end_road_drag())

        self._recompute()

    # -- Read-only views --

    @property
    def catalog(self) -> Catalog:
        return self._catalog

    @property
    def config(self) -> ResortConfig:
        return self._config

    @property
    def seed(self) -> int:
        return self._seed

    @property
    def events(self) -> EventBus:
        return self._bus

    @property
    def buildings(self) -> tuple[BuildingInstance, ...]:
        return tuple(self._buildings)

    @property
    def occupied(self) -> frozenset[CellKey]:
        return self._occupancy.keys()

    @property
    def roads(self) -> frozenset[CellKey]:
        return frozenset(key(b.gx, b.gz) for b in self._buildings if self._item(b).is_road)

    @property
    def economy(self) -> EconomyReport:
        return self._economy

    @property
    def statuses(self) -> tuple[EconomyStatus, ...]:
        return self._economy.statuses

    @property
    def happiness(self) -> int:
        return self._economy.happiness

    @property
    def money(self) -> float:
        return self._money

    @property
    def money_display(self) -> int:
        return self._display.value

    @property
    def money_bumped(self) -> bool:
        return self._display.bumped

    @property
    def progression(self) -> ProgressionState:
        return self._progression

    @property
    def loan(self) -> LoanState | None:
        return self._loan

    @property
    def bankrupt(self) -> bool:
        return self._watchdog.bankrupt

    @property
    def watchdog(self) -> BankruptcyWatchdog:
        return self._watchdog

    @property
    def guests(self) -> list[Guest]:
        return self._router.guests()

    @property
    def dragging(self) -> bool:
        return self._drag is not None

    def building(self, uid: Uid) -> BuildingInstance | None:
        for b in self._buildings:
            if b.uid == uid:
                return b
        return None

    def building_at(self, gx: int, gz: int) -> BuildingInstance | None:
        uid = self._occupancy.owner(gx, gz)
        return self.building(uid) if uid is not None else None

    def tutorial(self) -> TutorialProgress:
        return tutorial_progress(self._buildings)

    def validate(self, item_id: str, gx: int, gz: int) -> Reason | None:
        """Check a placement without performing it (hover previews)."""
        return self._validate(self._catalog.get(item_id), gx, gz)

    def attach_handle(self, uid: Uid, handle: Any) -> None:
        """Store the renderer's object for a building; unknown uids are ignored."""
        for i, b in enumerate(self._buildings):
            if b.uid == uid:
                self._buildings[i] = dataclasses.replace(b, handle=handle)
                return

    # -- Commands --

    def apply(self, cmd: Any) -> CommandResult:
        """Run *cmd* now and flush the event bus. The result carries its events."""
        result = self._queue.dispatch(cmd)
        self._bus.flush()
        return result

    def enqueue(self, cmd: Any) -> None:
        """Buffer a command until the next ``advance``."""
        self._queue.enqueue(cmd)

    def place_building(self, item_id: str, gx: int, gz: int) -> CommandResult:
        if self.bankrupt:
            return CommandResult.rejected(Reason.BANKRUPT)
        item = self._catalog.get(item_id)
        reason = self._validate(item, gx, gz)
        if reason is not None:
            logger.debug("Rejected %s at (%d, %d): %s", item.id, gx, gz, reason.value)
            return CommandResult.rejected(reason)

        mark = self._bus.mark()
        building = BuildingInstance(uid=self._new_uid(item.id), id=item.id, gx=gx, gz=gz)
        cells = footprint_cells(gx, gz, item.footprint)
        self._buildings.append(building)
        self._occupancy.add(building.uid, cells)
        self._bus.publish(
            "building_placed",
            uid=building.uid, id=item.id, gx=gx, gz=gz, cells=cells,
        )
        self._set_money(self._money - item.cost)
        self._grant_xp(building_xp(item, self._config.xp), source="placement")
        self._recompute()
        logger.debug("Placed %s at (%d, %d) as %s", item.id, gx, gz, building.uid)
        return CommandResult.ok(self._bus.since(mark))

    def move_building(self, uid: Uid, gx: int, gz: int) -> CommandResult:
        if self.bankrupt:
            return CommandResult.rejected(Reason.BANKRUPT)
        building = self.building(uid)
        if building is None:
            return CommandResult.rejected(Reason.UNKNOWN_BUILDING)
        item = self._item(building)
        if item.is_road:
            return CommandResult.rejected(Reason.NOT_MOVABLE)
        if (gx, gz) == building.anchor:
            return CommandResult.ok()

        reason = validate_placement(
            item, gx, gz,
            occupancy=self._occupancy,
            buildings=self._buildings,
            level=self._progression.level,
            money=self._money,
            grid=self._config.grid,
            ignore_uid=uid,
            check_level=False,
            check_funds=False,
        )
        if reason is not None:
            logger.debug("Rejected move of %s to (%d, %d): %s", uid, gx, gz, reason.value)
            return CommandResult.rejected(reason)

        mark = self._bus.mark()
        moved = dataclasses.replace(building, gx=gx, gz=gz, handle=None)
        self._buildings[self._buildings.index(building)] = moved
        self._occupancy.move(uid, footprint_cells(gx, gz, item.footprint))
        self._bus.publish(
            "building_moved",
            uid=uid, id=item.id, from_cell=building.anchor, to_cell=(gx, gz),
        )
        self._recompute()
        return CommandResult.ok(self._bus.since(mark))

    def demolish_building(self, uid: Uid) -> CommandResult:
        if self.bankrupt:
            return CommandResult.rejected(Reason.BANKRUPT)
        building = self.building(uid)
        if building is None:
            return CommandResult.rejected(Reason.UNKNOWN_BUILDING)

        mark = self._bus.mark()
        self._buildings.remove(building)
        self._occupancy.remove(uid)
        self._bus.publish(
            "building_demolished",
            uid=uid, id=building.id, gx=building.gx, gz=building.gz,
        )
        self._recompute()
        return CommandResult.ok(self._bus.since(mark))

    def demolish_at(self, gx: int, gz: int) -> CommandResult:
        if self.bankrupt:
            return CommandResult.rejected(Reason.BANKRUPT)
        uid = self._occupancy.owner(gx, gz)
        if uid is None:
            return CommandResult.rejected(Reason.UNKNOWN_BUILDING)
        return self.demolish_building(uid)

    def take_loan(self, principal: int, rate: float) -> CommandResult:
        """Borrow *principal*; a no-op while another loan is outstanding."""
        if self.bankrupt:
            return CommandResult.rejected(Reason.BANKRUPT)
        loan = take_loan(self._loan, principal, rate, self._config.loan)
        if loan is None:
            logger.debug("Loan request ignored: a loan is already active")
            return CommandResult.ok()

        mark = self._bus.mark()
        self._loan = loan
        self._bus.publish(
            "loan_taken",
            principal=loan.principal, rate=loan.rate, total_owed=loan.total_owed,
            payment_per_second=loan.payment_per_second,
        )
        self._set_money(self._money + principal)
        self._recompute()
        logger.info(
            "Loan taken: %d at %.0f%% (%.2f/sec)",
            principal, rate * 100, loan.payment_per_second,
        )
        return CommandResult.ok(self._bus.since(mark))

    def start_road_drag(self, gx: int, gz: int) -> CommandResult:
        """Place a road at the start cell and begin a drag gesture there."""
        self._drag = None
        result = self.place_building("road", gx, gz)
        if result.accepted:
            self._drag = RoadDrag((gx, gz))
        return result

    def drag_road_to(self, gx: int, gz: int) -> CommandResult:
        """Extend the drag to the pointer cell along the locked axis."""
        if self.bankrupt:
            return CommandResult.rejected(Reason.BANKRUPT)
        if self._drag is None:
            return CommandResult.ok()

        mark = self._bus.mark()
        road = self._catalog.get("road")
        grid = self._config.grid
        for cx, cz in self._drag.cells_to(gx, gz):
            if not within_grid(cx, cz, grid) or not is_buildable(cx, cz, road.terrain, grid):
                continue
            result = self.place_building(road.id, cx, cz)
            if result.accepted or result.reason is Reason.TILE_OCCUPIED:
                continue
            self._drag = None
            self._bus.publish("drag_aborted", reason=result.reason, gx=cx, gz=cz)
            return CommandResult(
                accepted=False, reason=result.reason, events=self._bus.since(mark),
            )
        return CommandResult.ok(self._bus.since(mark))

    def end_road_drag(self) -> CommandResult:
        self._drag = None
        return CommandResult.ok()

    def tick(self, kind: TickKind | str) -> CommandResult:
        """Run one fixed-interval timer body."""
        kind = TickKind(kind)
        if self.bankrupt:
            return CommandResult.rejected(Reason.BANKRUPT)
        mark = self._bus.mark()
        handler = {
            TickKind.INCOME: self._tick_income,
            TickKind.LOAN: self._tick_loan,
            TickKind.XP: self._tick_xp,
            TickKind.VILLA_STATUS: self._tick_villa_status,
            TickKind.GUEST: self._tick_guest,
            TickKind.WALK: self._tick_walk,
            TickKind.BANKRUPTCY: self._tick_bankruptcy,
        }[kind]
        handler()
        return CommandResult.ok(self._bus.since(mark))

    def advance(self, dt: float) -> list[Event]:
        """Advance wall time: drain queued commands, fire due timers, ease the display.

        Returns every event published since the last flush, after delivering
        them to subscribers. The bus is empty afterwards.
        """
        if dt < 0:
            raise ValueError(f"dt must be >= 0, got {dt}")
        self._queue.drain()
        for kind in self._scheduler.advance(dt):
            self.tick(kind)
        self._display.advance(dt)
        return self._bus.flush()

    def reset_game(self) -> CommandResult:
        """Return to a fresh session. Calling it repeatedly is harmless."""
        cfg = self._config
        self._buildings.clear()
        self._occupancy.clear()
        self._money = cfg.starting_money
        self._display.snap(cfg.starting_money)
        self._progression = ProgressionState.initial(cfg.xp)
        self._loan = None
        self._drag = None
        self._next_uid = 0
        self._watchdog.reset()
        self._scheduler.reset()
        self._router.clear()
        self._earning.clear()
        self._queue.clear()
        self._rng = random.Random(self._seed)
        self._economy = EconomyReport.empty()
        self._last_total = 0
        self._bus.clear()
        self._recompute()
        event = self._bus.publish("game_reset")
        logger.debug("Game reset")
        return CommandResult.ok((event,))

    def seed_palms(self, count: int = BUILT_IN_PALM_COUNT) -> list[BuildingInstance]:
        """Scatter free decorative palms over random free shore cells."""
        palm = self._catalog.get("palm")
        candidates = shore_cells(self._config.grid)
        self._rng.shuffle(candidates)
        placed: list[BuildingInstance] = []
        for gx, gz in candidates:
            if len(placed) >= count:
                break
            if self._occupancy.owner(gx, gz) is not None:
                continue
            building = BuildingInstance(
                uid=self._new_uid(palm.id), id=palm.id, gx=gx, gz=gz, built_in=True,
            )
            self._buildings.append(building)
            self._occupancy.add(building.uid, footprint_cells(gx, gz, palm.footprint))
            self._bus.publish(
                "building_placed",
                uid=building.uid, id=palm.id, gx=gx, gz=gz, cells=[(gx, gz)],
            )
            placed.append(building)
        if placed:
            self._recompute()
        return placed

    # -- Timer bodies --

    def _tick_income(self) -> None:
        total = self._economy.total
        if total > 0:
            self._bus.publish("income", amount=total)
            self._set_money(self._money + total)

    def _tick_loan(self) -> None:
        if self._loan is None:
            return
        loan, payment = loan_tick(self._loan)
        self._loan = loan
        self._bus.publish(
            "loan_payment",
            amount=payment, remaining=loan.remaining_owed if loan is not None else 0.0,
        )
        self._set_money(round(self._money - payment, 2))
        if loan is None:
            self._bus.publish("loan_repaid")
        self._recompute()

    def _tick_xp(self) -> None:
        if self._economy.total > 0:
            if self._grant_xp(self._config.xp.positive_income, source="income"):
                self._recompute()

    def _tick_villa_status(self) -> None:
        for status in self._economy.statuses:
            if status.id in self._config.guests.source_ids and status.active:
                self._bus.publish(
                    "villa_earning",
                    uid=status.uid, gx=status.gx, gz=status.gz, income=status.income_per_sec,
                )

    def _tick_guest(self) -> None:
        guest = self._router.try_spawn(
            self._buildings, self._catalog, self._economy, self.roads, self._rng,
        )
        if guest is not None:
            self._bus.publish(
                "guest_spawned",
                gid=guest.gid, path=list(guest.outbound),
                source=guest.source_uid, destination=guest.destination_uid,
            )

    def _tick_walk(self) -> None:
        active, gone = self._router.step_all()
        for guest in active:
            self._bus.publish(
                "guest_moved", gid=guest.gid, cell=guest.position, state=guest.state.value,
            )
        for guest in gone:
            self._bus.publish("guest_despawned", gid=guest.gid)

    def _tick_bankruptcy(self) -> None:
        payment = self._loan.payment_per_second if self._loan is not None else 0.0
        tripped = self._watchdog.observe(
            self._money, payment, self._economy.total,
            self._scheduler.interval(TickKind.BANKRUPTCY),
        )
        if tripped:
            self._drag = None
            self._queue.clear()
            self._bus.publish("bankrupt", money=self._money)

    # -- Internals --

    def _item(self, building: BuildingInstance) -> CatalogItem:
        return self._catalog.get(building.id)

    def _new_uid(self, item_id: str) -> Uid:
        uid = f"{item_id}-{self._next_uid}"
        self._next_uid += 1
        return uid

    def _validate(self, item: CatalogItem, gx: int, gz: int) -> Reason | None:
        return validate_placement(
            item, gx, gz,
            occupancy=self._occupancy,
            buildings=self._buildings,
            level=self._progression.level,
            money=self._money,
            grid=self._config.grid,
        )

    def _set_money(self, value: float) -> None:
        old = self._money
        self._money = value
        self._display.retarget(value)
        self._bus.publish("money_changed", money=value, delta=value - old)
        if (old < 0) != (value < 0):
            # Happiness penalises a negative balance.
            self._recompute()

    def _grant_xp(self, amount: int, source: str) -> bool:
        """Add XP and publish progress. Returns True on level-up."""
        before = self._progression
        result = apply_xp(before, amount, self._config.xp)
        self._progression = result.next
        self._bus.publish(
            "xp_gained",
            amount=amount, source=source, level=result.next.level,
            xp=result.next.xp, xp_to_next=result.next.xp_to_next,
        )
        if result.leveled_up:
            unlocked = self._catalog.unlocked_between(before.level, result.next.level)
            self._bus.publish(
                "level_up",
                level=result.next.level, levels_gained=result.levels_gained,
                unlocked=[item.id for item in unlocked],
            )
        return result.leveled_up

    def _compute(self) -> EconomyReport:
        cfg = self._config
        guests = compute_guest_count(self._buildings, cfg.guests)
        happiness = compute_happiness(
            self._buildings, self._catalog, self._money, self._loan is not None, cfg.happiness,
        )
        payment = self._loan.payment_per_second if self._loan is not None else 0.0
        return compute_economy(
            self._buildings, self._catalog, guests, self._progression.level, happiness, payment,
            happiness_tuning=cfg.happiness, expense_tuning=cfg.expenses,
        )

    def _recompute(self) -> None:
        """Refresh the economy and award first-earning XP until the level settles."""
        while True:
            level = self._progression.level
            self._economy = self._compute()
            total = self._economy.total
            if total != self._last_total:
                delta = total - self._last_total
                self._bus.publish(
                    "income_changed",
                    total=total, delta=delta, trend="up" if delta > 0 else "down",
                )
                self._last_total = total
            for status in self._earning.newly_earning(self._economy.statuses):
                self._grant_xp(self._config.xp.first_earning, source=f"first_earning:{status.uid}")
            if self._progression.level == level:
                break
