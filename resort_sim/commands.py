"""Command dataclasses and the FIFO command queue."""
from __future__ import annotations

from collections import deque
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Callable

from resort_sim.schedule import TickKind
from resort_sim.types import Reason, Uid

if TYPE_CHECKING:
    from resort_sim.events import Event


@dataclass(frozen=True)
class PlaceBuilding:
    item_id: str
    gx: int
    gz: int


@dataclass(frozen=True)
class MoveBuilding:
    uid: Uid
    gx: int
    gz: int


@dataclass(frozen=True)
class DemolishBuilding:
    uid: Uid


@dataclass(frozen=True)
class DemolishAt:
    """Demolish whatever covers a cell."""
    gx: int
    gz: int


@dataclass(frozen=True)
class TakeLoan:
    principal: int
    rate: float


@dataclass(frozen=True)
class Tick:
    kind: TickKind


@dataclass(frozen=True)
class ResetGame:
    pass


@dataclass(frozen=True)
class StartRoadDrag:
    gx: int
    gz: int


@dataclass(frozen=True)
class DragRoadTo:
    gx: int
    gz: int


@dataclass(frozen=True)
class EndRoadDrag:
    pass


@dataclass(frozen=True)
class CommandResult:
    """Outcome of one command: events on success, a reason on refusal."""

    accepted: bool
    reason: Reason | None = None
    events: tuple[Event, ...] = ()

    @classmethod
    def ok(cls, events: tuple[Event, ...] = ()) -> CommandResult:
        return cls(accepted=True, events=events)

    @classmethod
    def rejected(cls, reason: Reason) -> CommandResult:
        return cls(accepted=False, reason=reason)


class CommandQueue:
    """Routes commands to typed handlers, buffering them between frames.

    One handler per command class, dispatched by exact type.
    """

    def __init__(self) -> None:
        self._handlers: dict[type[Any], Callable[[Any], CommandResult]] = {}
        self._pending: deque[Any] = deque()

    def handle(self, cmd_type: type[Any], handler: Callable[[Any], CommandResult]) -> None:
        """Register *handler* for *cmd_type*. Later calls overwrite."""
        self._handlers[cmd_type] = handler

    def handles(self, cmd_type: type[Any]) -> bool:
        return cmd_type in self._handlers

    def dispatch(self, cmd: Any) -> CommandResult:
        """Run one command immediately.

        Raises ``TypeError`` if no handler is registered for its type.
        """
        handler = self._handlers.get(type(cmd))
        if handler is None:
            raise TypeError(f"No handler registered for {type(cmd).__qualname__}")
        return handler(cmd)

    def enqueue(self, cmd: Any) -> None:
        self._pending.append(cmd)

    def pending(self) -> int:
        return len(self._pending)

    def drain(self) -> list[tuple[Any, CommandResult]]:
        """Process every pending command in FIFO order."""
        results: list[tuple[Any, CommandResult]] = []
        while self._pending:
            cmd = self._pending.popleft()
            results.append((cmd, self.dispatch(cmd)))
        return results

    def clear(self) -> None:
        self._pending.clear()
