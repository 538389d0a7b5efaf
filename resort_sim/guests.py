"""Guest routing: road anchors, BFS over the road network, guest lifecycle."""
from __future__ import annotations

import logging
import random
from collections import deque
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, AbstractSet, Sequence

from resort_sim.config import GuestTuning
from resort_sim.grid import key, neighbors4
from resort_sim.types import Cell, CellKey

if TYPE_CHECKING:
    from resort_sim.catalog import Catalog
    from resort_sim.economy import EconomyReport
    from resort_sim.footprint import BuildingInstance

logger = logging.getLogger(__name__)


def find_road_anchor(gx: int, gz: int, roads: AbstractSet[CellKey]) -> Cell | None:
    """First 4-neighbour of ``(gx, gz)`` that is a road cell."""
    for cell in neighbors4(gx, gz):
        if key(*cell) in roads:
            return cell
    return None


def find_path(start: Cell, goal: Cell, roads: AbstractSet[CellKey]) -> list[Cell] | None:
    """Shortest 4-connected path across road cells, inclusive of both ends.

    The graph is read fresh from *roads* on every call, so cost grows with
    the size of the road network.  Returns None when *goal* is unreachable.
    """
    if start == goal:
        return [start]
    if key(*start) not in roads or key(*goal) not in roads:
        return None

    came_from: dict[Cell, Cell | None] = {start: None}
    frontier: deque[Cell] = deque([start])
    while frontier:
        current = frontier.popleft()
        if current == goal:
            break
        for n in neighbors4(*current):
            if n in came_from or key(*n) not in roads:
                continue
            came_from[n] = current
            frontier.append(n)

    if goal not in came_from:
        return None

    path: list[Cell] = []
    step: Cell | None = goal
    while step is not None:
        path.append(step)
        step = came_from[step]
    path.reverse()
    return path


class GuestState(str, Enum):
    SPAWNED = "spawned"
    WALKING = "walking"
    AT_DESTINATION = "at_destination"
    RETURNING = "returning"
    DESPAWNED = "despawned"


_NEXT: dict[GuestState, GuestState] = {
    GuestState.SPAWNED: GuestState.WALKING,
    GuestState.WALKING: GuestState.AT_DESTINATION,
    GuestState.AT_DESTINATION: GuestState.RETURNING,
    GuestState.RETURNING: GuestState.DESPAWNED,
}


@dataclass
class Guest:
    """A visitor walking villa -> destination -> villa.

    ``index`` points into ``outbound``; the return leg walks the same path
    backwards.
    """

    gid: int
    outbound: list[Cell]
    state: GuestState = GuestState.SPAWNED
    index: int = 0
    source_uid: str = ""
    destination_uid: str = ""
    history: list[GuestState] = field(default_factory=list)

    @property
    def position(self) -> Cell:
        return self.outbound[self.index]

    @property
    def return_path(self) -> list[Cell]:
        return list(reversed(self.outbound))

    @property
    def done(self) -> bool:
        return self.state is GuestState.DESPAWNED

    def _transition(self) -> None:
        self.history.append(self.state)
        self.state = _NEXT[self.state]

    def step(self) -> GuestState:
        """Advance one cell (or one lifecycle stage) and return the new state."""
        last = len(self.outbound) - 1
        if self.state is GuestState.SPAWNED:
            self._transition()
        elif self.state is GuestState.WALKING:
            self.index = min(self.index + 1, last)
            if self.index >= last:
                self._transition()
        elif self.state is GuestState.AT_DESTINATION:
            self._transition()
        elif self.state is GuestState.RETURNING:
            self.index = max(self.index - 1, 0)
            if self.index <= 0:
                self._transition()
        return self.state


class GuestRouter:
    """Spawns guests between active villas and destinations, and walks them."""

    def __init__(self, tuning: GuestTuning = GuestTuning()) -> None:
        self._tuning = tuning
        self._guests: dict[int, Guest] = {}
        self._next_id = 0

    @property
    def count(self) -> int:
        return len(self._guests)

    def guests(self) -> list[Guest]:
        return list(self._guests.values())

    def clear(self) -> None:
        self._guests.clear()
        self._next_id = 0

    def try_spawn(
        self,
        buildings: Sequence[BuildingInstance],
        catalog: Catalog,
        economy: EconomyReport,
        roads: AbstractSet[CellKey],
        rng: random.Random,
    ) -> Guest | None:
        """Attempt one spawn; returns the guest or None if any precondition fails."""
        if economy.total <= 0:
            return None
        if self.count >= self._tuning.population_cap:
            logger.debug("Guest spawn skipped: population cap %d reached", self.count)
            return None
        if not roads:
            return None

        sources = [
            s for s in economy.statuses
            if s.id in self._tuning.source_ids and s.active
        ]
        destinations = [
            b for b in buildings
            if not catalog.get(b.id).is_road
            and catalog.get(b.id).category.value in self._tuning.destination_categories
        ]
        if not sources or not destinations:
            return None

        source = rng.choice(sources)
        target = rng.choice(destinations)
        start = find_road_anchor(source.gx, source.gz, roads)
        goal = find_road_anchor(target.gx, target.gz, roads)
        if start is None or goal is None:
            logger.debug("Guest spawn skipped: %s or %s has no road access", source.uid, target.uid)
            return None
        path = find_path(start, goal, roads)
        if path is None:
            logger.debug("Guest spawn skipped: no road route %s -> %s", start, goal)
            return None

        guest = Guest(
            gid=self._next_id,
            outbound=path,
            source_uid=source.uid,
            destination_uid=target.uid,
        )
        self._next_id += 1
        self._guests[guest.gid] = guest
        return guest

    def step_all(self) -> tuple[list[Guest], list[Guest]]:
        """Walk every guest once. Returns ``(still_active, despawned)``."""
        active: list[Guest] = []
        gone: list[Guest] = []
        for guest in list(self._guests.values()):
            guest.step()
            if guest.done:
                del self._guests[guest.gid]
                gone.append(guest)
            else:
                active.append(guest)
        return active, gone
