"""Sunny Isle - headless resort-sim smoke run.

Builds a small resort with a scripted sequence of commands, then lets the
clock run for two simulated minutes and reports what happened.

Run:
    python run.py [tuning.toml]
"""
from __future__ import annotations

import logging
import sys
from collections import Counter

from resort_sim import (
    DragRoadTo,
    EndRoadDrag,
    PlaceBuilding,
    ResortConfig,
    Simulation,
    StartRoadDrag,
    load_config,
)

DT = 0.1
SECONDS = 120

BUILD_ORDER = [
    PlaceBuilding("reception", -4, 2),
    PlaceBuilding("generator", 3, -2),
    PlaceBuilding("villa", 0, 0),
    StartRoadDrag(-1, -1),
    DragRoadTo(6, -1),
    EndRoadDrag(),
    PlaceBuilding("flower_bed", 5, 0),
    PlaceBuilding("palm", 7, 0),
]


def main() -> None:
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")
    config = load_config(sys.argv[1]) if len(sys.argv) > 1 else ResortConfig()
    sim = Simulation(config=config, seed=2024)

    print("=" * 60)
    print("  SUNNY ISLE - resort-sim headless run")
    print("=" * 60)
    print()

    sim.seed_palms()
    for cmd in BUILD_ORDER:
        result = sim.apply(cmd)
        status = "ok" if result.accepted else result.reason.message
        print(f"  {type(cmd).__name__:14s} {status}")

    counts: Counter[str] = Counter()
    for _ in range(int(SECONDS / DT)):
        for event in sim.advance(DT):
            counts[event.name] += 1
        if sim.bankrupt:
            break

    progress = sim.tutorial()
    print()
    print(f"  Money:      {sim.money:.0f}")
    print(f"  Level:      {sim.progression.level} ({sim.progression.xp}/{sim.progression.xp_to_next} xp)")
    print(f"  Net/sec:    {sim.economy.total}")
    print(f"  Happiness:  {sim.happiness}")
    print(f"  Guests out: {len(sim.guests)}")
    print(f"  Tutorial:   {progress.message}")
    print()
    print("  Events:")
    for name, n in sorted(counts.items()):
        print(f"    {name:18s} {n}")

    print()
    ok = counts["guest_spawned"] > 0 and counts["income"] > 0 and not sim.bankrupt
    print("  SMOKE RUN PASSED" if ok else "  SMOKE RUN FAILED")
    print()


if __name__ == "__main__":
    main()
