"""Fixed-interval timers driven by elapsed seconds."""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from resort_sim.config import TimerConfig

_EPSILON = 1e-9


class TickKind(str, Enum):
    INCOME = "income"
    LOAN = "loan"
    XP = "xp"
    VILLA_STATUS = "villa_status"
    GUEST = "guest"
    WALK = "walk"
    BANKRUPTCY = "bankruptcy"


@dataclass
class Periodic:
    """Recurring timer. Fires every ``interval`` seconds of simulated time."""

    kind: TickKind
    interval: float
    elapsed: float = 0.0


class Scheduler:
    """Owns one Periodic per tick kind and reports which fire for a time step.

    Timers fire in time order, whatever the step size. Timers due at the same
    instant fire in registration order, so the bankruptcy watchdog sees the
    money changes made at that instant.
    """

    def __init__(self, timers: TimerConfig = TimerConfig()) -> None:
        self._periodics: list[Periodic] = [
            Periodic(TickKind.INCOME, timers.income),
            Periodic(TickKind.LOAN, timers.loan),
            Periodic(TickKind.XP, timers.xp),
            Periodic(TickKind.VILLA_STATUS, timers.villa_status),
            Periodic(TickKind.GUEST, timers.guest),
            Periodic(TickKind.WALK, timers.walk),
            Periodic(TickKind.BANKRUPTCY, timers.bankruptcy),
        ]

    def interval(self, kind: TickKind) -> float:
        for p in self._periodics:
            if p.kind is kind:
                return p.interval
        raise ValueError(f"No timer for {kind!r}")

    def advance(self, dt: float) -> list[TickKind]:
        """Run the clock forward *dt* seconds; return the kinds that fired.

        The result is in chronological order. A long step can fire the same
        timer more than once, interleaved with the others exactly as a run of
        short steps covering the same span would.
        """
        if dt < 0:
            raise ValueError(f"dt must be >= 0, got {dt}")
        fired: list[TickKind] = []
        left = dt
        while True:
            step = min(p.interval - p.elapsed for p in self._periodics)
            # Tolerate accumulated float error at exact interval boundaries.
            if step > left + _EPSILON:
                for p in self._periodics:
                    p.elapsed += left
                return fired
            step = max(0.0, step)
            left = max(0.0, left - step)
            for p in self._periodics:
                p.elapsed += step
            for p in self._periodics:
                if p.elapsed >= p.interval - _EPSILON:
                    p.elapsed = max(0.0, p.elapsed - p.interval)
                    fired.append(p.kind)

    def reset(self) -> None:
        for p in self._periodics:
            p.elapsed = 0.0
