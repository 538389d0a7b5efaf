"""Experience and levels."""
from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Iterable

from resort_sim.config import XpRewards
from resort_sim.types import Uid, round_half_up

if TYPE_CHECKING:
    from resort_sim.catalog import CatalogItem
    from resort_sim.economy import EconomyStatus


@dataclass(frozen=True)
class ProgressionState:
    level: int = 1
    xp: int = 0
    xp_to_next: int = 100

    def __post_init__(self) -> None:
        if self.level < 1:
            raise ValueError(f"level must be >= 1, got {self.level}")
        if not 0 <= self.xp < self.xp_to_next:
            raise ValueError(
                f"xp must be in [0, {self.xp_to_next}), got {self.xp}"
            )

    @classmethod
    def initial(cls, rewards: XpRewards = XpRewards()) -> ProgressionState:
        return cls(level=1, xp=0, xp_to_next=rewards.start_xp_to_next)


@dataclass(frozen=True)
class XpResult:
    next: ProgressionState
    leveled_up: bool
    levels_gained: int


def next_threshold(xp_to_next: int, rewards: XpRewards = XpRewards()) -> int:
    """XP needed for the level after a level-up.

    >>> next_threshold(100)
    150
    """
    return round_half_up(xp_to_next * rewards.growth + rewards.growth_bonus)


def apply_xp(
    state: ProgressionState,
    amount: int,
    rewards: XpRewards = XpRewards(),
) -> XpResult:
    """Add *amount* XP, rolling any overflow into as many level-ups as it covers."""
    if amount < 0:
        raise ValueError(f"amount must be >= 0, got {amount}")
    level, xp, xp_to_next = state.level, state.xp + amount, state.xp_to_next
    gained = 0
    while xp >= xp_to_next:
        xp -= xp_to_next
        level += 1
        xp_to_next = next_threshold(xp_to_next, rewards)
        gained += 1
    return XpResult(
        next=ProgressionState(level=level, xp=xp, xp_to_next=xp_to_next),
        leveled_up=gained > 0,
        levels_gained=gained,
    )


def building_xp(item: CatalogItem, rewards: XpRewards = XpRewards()) -> int:
    return round_half_up(rewards.building_base * item.building_tier)


class EarningTracker:
    """Remembers which buildings already earned their first-income XP."""

    def __init__(self, rewards: XpRewards = XpRewards()) -> None:
        self._rewards = rewards
        self._seen: set[Uid] = set()

    def newly_earning(self, statuses: Iterable[EconomyStatus]) -> list[EconomyStatus]:
        """Statuses of tracked ids that are active for the first time; marks them seen."""
        fresh: list[EconomyStatus] = []
        for status in statuses:
            if status.id not in self._rewards.earning_ids or not status.active:
                continue
            if status.uid in self._seen:
                continue
            self._seen.add(status.uid)
            fresh.append(status)
        return fresh

    def seen(self) -> frozenset[Uid]:
        return frozenset(self._seen)

    def clear(self) -> None:
        self._seen.clear()
