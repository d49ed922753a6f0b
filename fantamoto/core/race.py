"""Race calendar and official result models."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum


class SessionType(str, Enum):
    """Scored session within a race weekend."""

    RACE = "RACE"
    SPRINT = "SPRINT"


class ResultStatus(str, Enum):
    """Classification status of a rider in a session."""

    FINISHED = "FINISHED"
    DNF = "DNF"
    DNS = "DNS"
    DSQ = "DSQ"


@dataclass(frozen=True)
class Race:
    """A round of the season calendar.

    Attributes:
        race_id: Unique race identifier.
        season: Championship year the race belongs to.
        round: 1-based round number within the season.
        gp_date: Start of the main race (timezone-aware).
        sprint_date: Start of the sprint race, when the weekend has one.
        name: Display name of the Grand Prix.
    """

    race_id: str
    season: int
    round: int
    gp_date: datetime
    sprint_date: datetime | None = None
    name: str = ""

    def __post_init__(self) -> None:
        """Validate race parameters."""
        if not self.race_id:
            raise ValueError("race_id must not be empty.")
        if self.round < 1:
            raise ValueError("round must be >= 1.")
        if self.gp_date.tzinfo is None:
            raise ValueError(f"Race {self.race_id}: gp_date must be timezone-aware.")
        if self.sprint_date is not None and self.sprint_date.tzinfo is None:
            raise ValueError(
                f"Race {self.race_id}: sprint_date must be timezone-aware."
            )

    @property
    def sessions(self) -> tuple[SessionType, ...]:
        """Sessions held on this weekend."""
        if self.sprint_date is not None:
            return (SessionType.SPRINT, SessionType.RACE)
        return (SessionType.RACE,)

    def sort_key(self) -> tuple[int, datetime, int]:
        return (self.season, self.gp_date, self.round)


@dataclass(frozen=True)
class RaceResult:
    """Official classification of one rider in one session.

    ``position`` is ``None`` for riders who did not finish.  A ``FINISHED``
    row always carries a position.
    """

    race_id: str
    rider_id: str
    status: ResultStatus
    position: int | None = None
    session: SessionType = SessionType.RACE

    def __post_init__(self) -> None:
        """Validate result parameters."""
        if self.status is ResultStatus.FINISHED:
            if self.position is None:
                raise ValueError(
                    f"FINISHED result for rider {self.rider_id} needs a position."
                )
        if self.position is not None and self.position < 1:
            raise ValueError("position must be >= 1.")
