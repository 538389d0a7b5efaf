"""Onboarding steps shown until the first powered villa exists."""
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Callable, Sequence

from resort_sim.footprint import BuildingInstance

_Check = Callable[[Sequence[BuildingInstance]], bool]


@dataclass(frozen=True)
class TutorialStep:
    id: str
    text: str
    done: _Check


@dataclass(frozen=True)
class TutorialProgress:
    completed: tuple[bool, ...]
    index: int
    all_done: bool
    message: str


FINISHED_MESSAGE = "Nice. Now expand. Guests are picky and your electricity is probably illegal."


def _has(item_id: str) -> _Check:
    return lambda buildings: any(b.id == item_id for b in buildings)


def _generator_near_villa(radius: float) -> _Check:
    def check(buildings: Sequence[BuildingInstance]) -> bool:
        villa = next((b for b in buildings if b.id == "villa"), None)
        if villa is None:
            return False
        return any(
            math.hypot(villa.gx - g.gx, villa.gz - g.gz) <= radius
            for g in buildings if g.id == "generator"
        )
    return check


STEPS: tuple[TutorialStep, ...] = (
    TutorialStep("reception", "Your Reception is open. Guests will start arriving.", _has("reception")),
    TutorialStep("villa", "Build a Villa (the money-maker).", _has("villa")),
    TutorialStep("gen", "Build a Generator within 6 tiles of the Villa.", _generator_near_villa(6)),
)


def tutorial_progress(
    buildings: Sequence[BuildingInstance],
    steps: Sequence[TutorialStep] = STEPS,
) -> TutorialProgress:
    completed = tuple(step.done(buildings) for step in steps)
    all_done = all(completed)
    index = len(steps) - 1 if all_done else completed.index(False)
    message = FINISHED_MESSAGE if all_done else steps[index].text
    return TutorialProgress(completed=completed, index=index, all_done=all_done, message=message)
