"""resort-sim - Simulation core for an island resort tycoon game."""
from __future__ import annotations

# State owner
from resort_sim.simulation import Simulation

# Static data and tuning
from resort_sim.catalog import Catalog, CatalogItem, Category, default_catalog
from resort_sim.config import ResortConfig, config_from_dict, load_config

# Commands and events
from resort_sim.commands import (
    CommandQueue, CommandResult, DemolishAt, DemolishBuilding, DragRoadTo,
    EndRoadDrag, MoveBuilding, PlaceBuilding, ResetGame, StartRoadDrag,
    TakeLoan, Tick,
)
from resort_sim.events import Event, EventBus
from resort_sim.schedule import Periodic, Scheduler, TickKind

# Pure rules
from resort_sim.grid import (
    Terrain, grid_to_world, is_buildable, key, neighbors4, parse_key, world_to_grid,
)
from resort_sim.footprint import (
    BuildingInstance, Occupancy, RoadDrag, footprint_cells, validate_placement,
)
from resort_sim.economy import (
    EconomyReport, EconomyStatus, compute_economy, compute_guest_count,
    compute_happiness, is_powered, item_stats,
)
from resort_sim.guests import Guest, GuestRouter, GuestState, find_path, find_road_anchor
from resort_sim.progression import ProgressionState, XpResult, apply_xp
from resort_sim.finance import BankruptcyWatchdog, LoanState, loan_offers, loan_tick, take_loan
from resort_sim.display import MoneyDisplay
from resort_sim.tutorial import tutorial_progress
from resort_sim.types import Reason, UnknownItemError

__all__ = [
    "Simulation",
    "Catalog",
    "CatalogItem",
    "Category",
    "default_catalog",
    "ResortConfig",
    "config_from_dict",
    "load_config",
    "CommandQueue",
    "CommandResult",
    "DemolishAt",
    "DemolishBuilding",
    "DragRoadTo",
    "EndRoadDrag",
    "MoveBuilding",
    "PlaceBuilding",
    "ResetGame",
    "StartRoadDrag",
    "TakeLoan",
    "Tick",
    "Event",
    "EventBus",
    "Periodic",
    "Scheduler",
    "TickKind",
    "Terrain",
    "grid_to_world",
    "is_buildable",
    "key",
    "neighbors4",
    "parse_key",
    "world_to_grid",
    "BuildingInstance",
    "Occupancy",
    "RoadDrag",
    "footprint_cells",
    "validate_placement",
    "EconomyReport",
    "EconomyStatus",
    "compute_economy",
    "compute_guest_count",
    "compute_happiness",
    "is_powered",
    "item_stats",
    "Guest",
    "GuestRouter",
    "GuestState",
    "find_path",
    "find_road_anchor",
    "ProgressionState",
    "XpResult",
    "apply_xp",
    "BankruptcyWatchdog",
    "LoanState",
    "loan_offers",
    "loan_tick",
    "take_loan",
    "MoneyDisplay",
    "tutorial_progress",
    "Reason",
    "UnknownItemError",
]
