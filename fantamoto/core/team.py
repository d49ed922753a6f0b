"""Fantasy team, roster and lineup models.

A team holds a season-long roster of up to nine riders.  For each race it
may submit a lineup: six of those riders with a predicted finishing
position each, and optionally one captain.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime


@dataclass(frozen=True)
class Team:
    """A user's fantasy team inside one league.

    Attributes:
        team_id: Unique team identifier.
        league_id: League the team belongs to.
        owner_id: Identifier of the owning user.
        created_at: Creation timestamp; final standings tie-breaker.
        roster: Drafted rider identifiers (order is not significant).
        name: Display name.
    """

    team_id: str
    league_id: str
    owner_id: str
    created_at: datetime
    roster: tuple[str, ...] = ()
    name: str = ""

    def __post_init__(self) -> None:
        """Validate team parameters."""
        if not self.team_id:
            raise ValueError("team_id must not be empty.")
        if not self.league_id:
            raise ValueError(f"Team '{self.team_id}' must belong to a league.")
        if not self.owner_id:
            raise ValueError(f"Team '{self.team_id}' must have an owner.")

    def with_roster(self, rider_ids: tuple[str, ...] | list[str]) -> Team:
        """Return a copy of this team holding *rider_ids* as its roster."""
        return replace(self, roster=tuple(rider_ids))


@dataclass(frozen=True)
class LineupEntry:
    """One active rider of a lineup with its position prediction."""

    rider_id: str
    predicted_position: int | None
    is_captain: bool = False


@dataclass(frozen=True)
class Lineup:
    """The race-specific active selection of a team.

    Attributes:
        team_id: Owning team.
        race_id: Race the lineup was submitted for.
        entries: Selected riders with their predictions.
        submitted_at: Server time of the accepted submission.
    """

    team_id: str
    race_id: str
    entries: tuple[LineupEntry, ...] = field(default_factory=tuple)
    submitted_at: datetime | None = None

    @property
    def rider_ids(self) -> tuple[str, ...]:
        return tuple(e.rider_id for e in self.entries)

    @property
    def captain_id(self) -> str | None:
        for entry in self.entries:
            if entry.is_captain:
                return entry.rider_id
        return None

    def __repr__(self) -> str:
        return (
            f"Lineup(team_id={self.team_id!r}, race_id={self.race_id!r}, "
            f"riders=[{', '.join(self.rider_ids)}])"
        )
