"""Tuning configuration for the resort simulation.

Every balance number lives in one of the frozen dataclasses below.
``ResortConfig()`` reproduces the default game; ``load_config`` overlays a
TOML file on top of the defaults::

    [loan]
    duration = 90.0

    [happiness]
    attraction_bonus = 6.0
"""
from __future__ import annotations

import dataclasses
import logging
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Any, Mapping

logger = logging.getLogger(__name__)


def _frozen_mapping(values: Mapping[str, Any]) -> Mapping[str, Any]:
    """Read-only copy of a tuning table."""
    return MappingProxyType(dict(values))


@dataclass(frozen=True)
class GridConfig:
    """Island geometry, in world units unless noted.

    Attributes:
        cell_size: World units per grid cell.
        half_extent: Grid covers cells ``-half_extent..half_extent`` on both axes.
        grass_radius: Inner buildable disc.
        shore_inner_radius: Start of the buildable shore annulus.
        shore_outer_radius: End of the buildable shore annulus.
    """

    cell_size: float = 4.0
    half_extent: int = 12
    grass_radius: float = 38.0
    shore_inner_radius: float = 44.0
    shore_outer_radius: float = 49.0

    def __post_init__(self) -> None:
        if self.cell_size <= 0:
            raise ValueError(f"cell_size must be > 0, got {self.cell_size}")
        if self.half_extent < 0:
            raise ValueError(f"half_extent must be >= 0, got {self.half_extent}")
        if self.grass_radius < 0:
            raise ValueError(f"grass_radius must be >= 0, got {self.grass_radius}")
        if not self.shore_inner_radius <= self.shore_outer_radius:
            raise ValueError(
                f"shore_inner_radius ({self.shore_inner_radius}) must not exceed "
                f"shore_outer_radius ({self.shore_outer_radius})"
            )


@dataclass(frozen=True)
class HappinessTuning:
    base: float = 0.0
    attraction_bonus: float = 5.0
    road_bonus: float = 0.8
    road_cap: float = 20.0
    palm_bonus: float = 1.2
    palm_cap: float = 15.0
    decor_bonus: float = 0.8
    decor_cap: float = 18.0
    generator_penalty: float = 2.0
    crowding_threshold: int = 18
    crowding_penalty: float = 0.5
    crowding_cap: float = 10.0
    no_attraction_penalty: float = 10.0
    no_road_penalty: float = 10.0
    no_utility_penalty: float = 6.0
    negative_money_penalty: float = 6.0
    loan_penalty: float = 4.0
    max_income_boost: float = 0.5

    def __post_init__(self) -> None:
        for f in dataclasses.fields(self):
            value = getattr(self, f.name)
            if f.name != "base" and value < 0:
                raise ValueError(f"{f.name} must be >= 0, got {value}")


@dataclass(frozen=True)
class ExpenseTuning:
    base: float = 4.0
    per_building: float = 0.45
    per_generator: float = 1.2
    per_guest: float = 0.04
    per_utility: float = 0.5
    level_scale: float = 0.02
    income_cap_ratio: float = 0.2
    surcharges: Mapping[str, float] = field(default_factory=lambda: _frozen_mapping({
        "beach_dj": 1.4,
        "spa": 1.6,
        "beachclub": 2.0,
    }), hash=False)

    def __post_init__(self) -> None:
        if not 0 <= self.income_cap_ratio <= 1:
            raise ValueError(
                f"income_cap_ratio must be in [0, 1], got {self.income_cap_ratio}"
            )
        object.__setattr__(self, "surcharges", _frozen_mapping(self.surcharges))
        for name, cost in self.surcharges.items():
            if cost < 0:
                raise ValueError(f"surcharge for {name!r} must be >= 0, got {cost}")


@dataclass(frozen=True)
class XpRewards:
    building_base: int = 10
    first_earning: int = 30
    positive_income: int = 10
    earning_ids: frozenset[str] = frozenset({"villa", "villa_plus"})
    start_xp_to_next: int = 100
    growth: float = 1.25
    growth_bonus: int = 25

    def __post_init__(self) -> None:
        if self.start_xp_to_next <= 0:
            raise ValueError(
                f"start_xp_to_next must be > 0, got {self.start_xp_to_next}"
            )
        if self.growth < 1:
            raise ValueError(f"growth must be >= 1, got {self.growth}")


@dataclass(frozen=True)
class LoanTerms:
    """Loan duration and the offers shown to the player.

    Attributes:
        duration: Seconds over which a loan is repaid.
        offers: ``(principal, rate)`` pairs.
    """

    duration: float = 60.0
    offers: tuple[tuple[int, float], ...] = ((500, 0.1), (2000, 0.2), (5000, 0.35))

    def __post_init__(self) -> None:
        if self.duration <= 0:
            raise ValueError(f"duration must be > 0, got {self.duration}")


@dataclass(frozen=True)
class BankruptcyTuning:
    negative_seconds: float = 3.0
    debt_seconds: float = 5.0
    debt_income_ratio: float = 0.75

    def __post_init__(self) -> None:
        if self.negative_seconds <= 0 or self.debt_seconds <= 0:
            raise ValueError("bankruptcy thresholds must be > 0")
        if not 0 < self.debt_income_ratio <= 1:
            raise ValueError(
                f"debt_income_ratio must be in (0, 1], got {self.debt_income_ratio}"
            )


@dataclass(frozen=True)
class GuestTuning:
    population_cap: int = 12
    weights: Mapping[str, int] = field(default_factory=lambda: _frozen_mapping({
        "reception": 8,
        "villa": 6,
        "villa_plus": 10,
        "beachclub": 12,
        "beach_dj": 8,
        "pool_halloween": 10,
        "icecream_parlour": 6,
        "burgershop": 6,
        "spa": 8,
    }), hash=False)
    source_ids: frozenset[str] = frozenset({"villa", "villa_plus"})
    destination_categories: frozenset[str] = frozenset({"Decor", "Utility"})

    def __post_init__(self) -> None:
        if self.population_cap < 0:
            raise ValueError(f"population_cap must be >= 0, got {self.population_cap}")
        object.__setattr__(self, "weights", _frozen_mapping(self.weights))


@dataclass(frozen=True)
class TimerConfig:
    """Fixed timer intervals in seconds."""

    income: float = 1.0
    xp: float = 30.0
    villa_status: float = 1.0
    guest: float = 4.0
    walk: float = 1.0
    loan: float = 1.0
    bankruptcy: float = 0.25
    money_display: float = 0.4

    def __post_init__(self) -> None:
        for f in dataclasses.fields(self):
            value = getattr(self, f.name)
            if value <= 0:
                raise ValueError(f"timer {f.name} must be > 0, got {value}")


@dataclass(frozen=True)
class ResortConfig:
    starting_money: int = 1000
    grid: GridConfig = field(default_factory=GridConfig)
    happiness: HappinessTuning = field(default_factory=HappinessTuning)
    expenses: ExpenseTuning = field(default_factory=ExpenseTuning)
    xp: XpRewards = field(default_factory=XpRewards)
    loan: LoanTerms = field(default_factory=LoanTerms)
    bankruptcy: BankruptcyTuning = field(default_factory=BankruptcyTuning)
    guests: GuestTuning = field(default_factory=GuestTuning)
    timers: TimerConfig = field(default_factory=TimerConfig)


_SECTIONS: dict[str, type] = {
    "grid": GridConfig,
    "happiness": HappinessTuning,
    "expenses": ExpenseTuning,
    "xp": XpRewards,
    "loan": LoanTerms,
    "bankruptcy": BankruptcyTuning,
    "guests": GuestTuning,
    "timers": TimerConfig,
}


def _coerce(current: Any, value: Any) -> Any:
    """Convert TOML values to the container type of the default."""
    if isinstance(current, frozenset):
        return frozenset(value)
    if isinstance(current, tuple):
        return tuple(tuple(v) if isinstance(v, list) else v for v in value)
    return value


def config_from_dict(data: dict[str, Any]) -> ResortConfig:
    """Build a config from a nested mapping. Unknown sections or keys raise ValueError."""
    overrides: dict[str, Any] = {}
    for section, values in data.items():
        if section == "starting_money":
            overrides[section] = int(values)
            continue
        cls = _SECTIONS.get(section)
        if cls is None:
            raise ValueError(f"Unknown config section {section!r}")
        if not isinstance(values, dict):
            raise ValueError(f"Config section {section!r} must be a table")
        defaults = cls()
        known = {f.name for f in dataclasses.fields(cls)}
        fields: dict[str, Any] = {}
        for name, value in values.items():
            if name not in known:
                raise ValueError(f"Unknown key {name!r} in section {section!r}")
            fields[name] = _coerce(getattr(defaults, name), value)
        overrides[section] = dataclasses.replace(defaults, **fields)
    return ResortConfig(**overrides)


def load_config(path: str | Path) -> ResortConfig:
    """Read a TOML tuning file and overlay it on the defaults."""
    path = Path(path)
    with open(path, "rb") as f:
        data = tomllib.load(f)
    config = config_from_dict(data)
    logger.debug("Loaded tuning from %s (%d sections)", path, len(data))
    return config
