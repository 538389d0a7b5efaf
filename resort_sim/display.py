"""Eased money counter for the HUD."""
from __future__ import annotations

from resort_sim.types import round_half_up


def ease_out_cubic(t: float) -> float:
    return 1 - (1 - t) ** 3


class MoneyDisplay:
    """Shown balance that eases towards the real one.

    Each ``retarget`` restarts the animation from the currently shown value.
    """

    def __init__(self, value: float, duration: float = 0.4) -> None:
        if duration <= 0:
            raise ValueError(f"duration must be > 0, got {duration}")
        self._duration = duration
        self._start = float(value)
        self._target = float(value)
        self._elapsed = duration
        self.value = round_half_up(value)

    @property
    def target(self) -> float:
        return self._target

    @property
    def bumped(self) -> bool:
        """True while the counter is still moving."""
        return self._elapsed < self._duration

    def retarget(self, value: float) -> None:
        if value == self._target:
            return
        self._start = float(self.value)
        self._target = float(value)
        self._elapsed = 0.0

    def advance(self, dt: float) -> int:
        if self._elapsed >= self._duration:
            return self.value
        self._elapsed = min(self._elapsed + dt, self._duration)
        t = self._elapsed / self._duration
        self.value = round_half_up(self._start + (self._target - self._start) * ease_out_cubic(t))
        return self.value

    def snap(self, value: float) -> None:
        self._start = self._target = float(value)
        self._elapsed = self._duration
        self.value = round_half_up(value)
