"""Outbound event bus read by the rendering layer."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable

_Handler = Callable[["Event"], None]


@dataclass(frozen=True)
class Event:
    name: str
    data: dict[str, Any] = field(default_factory=dict)


class EventBus:
    """Collects events as the simulation mutates.

    Consumers either ``subscribe`` and call ``flush`` once per frame, or
    poll with ``drain``.  Both consume the pending queue.
    """

    def __init__(self) -> None:
        self._subscribers: dict[str, list[_Handler]] = {}
        self._queue: list[Event] = []

    def subscribe(self, name: str, handler: _Handler) -> None:
        self._subscribers.setdefault(name, []).append(handler)

    def unsubscribe(self, name: str, handler: _Handler) -> None:
        handlers = self._subscribers.get(name)
        if handlers is None:
            return
        try:
            handlers.remove(handler)
        except ValueError:
            pass

    def publish(self, name: str, **data: Any) -> Event:
        event = Event(name, data)
        self._queue.append(event)
        return event

    def pending(self) -> int:
        return len(self._queue)

    def mark(self) -> int:
        """Position to pass to ``since`` to collect events published after now."""
        return len(self._queue)

    def since(self, mark: int) -> tuple[Event, ...]:
        return tuple(self._queue[mark:])

    def flush(self) -> list[Event]:
        """Deliver pending events to subscribers; return what was delivered."""
        snapshot = self._queue
        self._queue = []
        for event in snapshot:
            for handler in self._subscribers.get(event.name, []):
                handler(event)
        return snapshot

    def drain(self) -> list[Event]:
        snapshot = self._queue
        self._queue = []
        return snapshot

    def clear(self) -> None:
        self._queue.clear()
