"""Shared type aliases, rejection reasons and errors for the resort simulation."""

from __future__ import annotations

import math
from enum import Enum

Cell = tuple[int, int]
CellKey = str
Uid = str


class Reason(str, Enum):
    """Why a command was refused.

    The first six members are the placement taxonomy, reported in the order
    placement checks run.  The rest are command-level refusals.
    """

    OUT_OF_BOUNDS = "OutOfBounds"
    UNBUILDABLE = "Unbuildable"
    TILE_OCCUPIED = "TileOccupied"
    SPACING_VIOLATION = "SpacingViolation"
    LEVEL_LOCKED = "LevelLocked"
    INSUFFICIENT_FUNDS = "InsufficientFunds"
    UNKNOWN_BUILDING = "UnknownBuilding"
    NOT_MOVABLE = "NotMovable"
    BANKRUPT = "Bankrupt"

    @property
    def message(self) -> str:
        return _MESSAGES[self]


_MESSAGES: dict[Reason, str] = {
    Reason.OUT_OF_BOUNDS: "Can't build there.",
    Reason.UNBUILDABLE: "Can't build there.",
    Reason.TILE_OCCUPIED: "Tile already occupied.",
    Reason.SPACING_VIOLATION: "Leave space between palms.",
    Reason.LEVEL_LOCKED: "Unlocks at a higher level.",
    Reason.INSUFFICIENT_FUNDS: "Not enough coins!",
    Reason.UNKNOWN_BUILDING: "Nothing there.",
    Reason.NOT_MOVABLE: "That can't be moved.",
    Reason.BANKRUPT: "Your hotel went bankrupt.",
}


class UnknownItemError(KeyError):
    """Raised when a catalog id is not defined."""

    def __init__(self, item_id: str) -> None:
        self.item_id = item_id
        super().__init__(f"Unknown catalog item {item_id!r}")


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves towards +inf.

    >>> round_half_up(2.5), round_half_up(-2.5)
    (3, -2)
    """
    return math.floor(value + 0.5)
