"""Rider model for the fantasy MotoGP engine.

Riders are league-scoped exclusive resources: the same rider may appear
in rosters of different leagues but in at most one team per league.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class Category(str, Enum):
    """Championship class a rider competes in."""

    MOTOGP = "MOTOGP"
    MOTO2 = "MOTO2"
    MOTO3 = "MOTO3"


class RiderType(str, Enum):
    """Contract status of a rider for the current season."""

    OFFICIAL = "OFFICIAL"
    REPLACEMENT = "REPLACEMENT"
    WILDCARD = "WILDCARD"
    TEST_RIDER = "TEST_RIDER"


@dataclass(frozen=True)
class Rider:
    """Immutable representation of a rider in the season catalogue.

    Attributes:
        rider_id: Unique rider identifier.
        name: Display name.
        category: Class the rider races in.
        value: Budget cost of drafting the rider (>= 0).
        rider_type: Contract status; only ``OFFICIAL`` riders are draftable.
        is_active: Whether the rider currently races.  Updated by the
            periodic catalogue sync together with ``value``.
    """

    rider_id: str
    name: str
    category: Category
    value: int
    rider_type: RiderType = RiderType.OFFICIAL
    is_active: bool = True

    def __post_init__(self) -> None:
        """Validate rider parameters."""
        if not self.rider_id:
            raise ValueError("rider_id must not be empty.")
        if not isinstance(self.category, Category):
            raise ValueError(f"Unknown category {self.category!r}.")
        if self.value < 0:
            raise ValueError("value must be >= 0.")

    @property
    def is_draftable(self) -> bool:
        return self.rider_type is RiderType.OFFICIAL
