"""League and scoring-rule models for the fantasy MotoGP engine.

A league fixes the budget cap, the roster category quotas and the
parameters that drive scoring.  Scoring parameters are explicit values
rather than constants so that every league can pin down its own
non-finisher penalty and field sizes.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Mapping

from fantamoto.core.race import SessionType
from fantamoto.core.rider import Category

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

ROSTER_QUOTA: int = 3  # riders per category in a complete roster
LINEUP_QUOTA: int = 2  # active riders per category in a race lineup

DEFAULT_MAX_FIELD_SIZE: Mapping[Category, int] = MappingProxyType(
    {Category.MOTOGP: 30, Category.MOTO2: 35, Category.MOTO3: 40}
)
# Legacy sentinel used for non-finishers.
DEFAULT_DNF_PENALTY: int = 99
DEFAULT_CAPTAIN_MULTIPLIER: int = 2


class NoLineupPolicy(str, Enum):
    """What happens to a team with neither a lineup nor a fallback."""

    SKIP = "skip"  # no TeamScore for that race
    MAX_PENALTY = "max_penalty"  # every lineup slot scores the penalty


def worst_finished_score(max_field_size: int) -> int:
    """Return the worst non-captain score a finisher can get.

    Last place with the furthest possible prediction:
    ``N + |1 - N| = 2N - 1``.
    """
    return 2 * max_field_size - 1


# ---------------------------------------------------------------------------
# Scoring rules
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ScoringRules:
    """Scoring parameters of a league.

    Attributes:
        captain_multiplier: Factor applied to the captain's points.
        max_field_size: Largest legal predicted position per category.
        dnf_penalty: Points scored by a DNF/DNS/DSQ rider per category.
        session_dnf_penalty: Optional per-session overrides of
            ``dnf_penalty``, keyed by session then category.
        scored_sessions: Sessions whose results count toward the race score.
        no_lineup_policy: Treatment of teams with no lineup and no fallback.
    """

    captain_multiplier: int = DEFAULT_CAPTAIN_MULTIPLIER
    max_field_size: Mapping[Category, int] = field(
        default_factory=lambda: dict(DEFAULT_MAX_FIELD_SIZE)
    )
    dnf_penalty: Mapping[Category, int] = field(
        default_factory=lambda: {c: DEFAULT_DNF_PENALTY for c in Category}
    )
    session_dnf_penalty: Mapping[SessionType, Mapping[Category, int]] = field(
        default_factory=dict
    )
    scored_sessions: tuple[SessionType, ...] = (SessionType.RACE,)
    no_lineup_policy: NoLineupPolicy = NoLineupPolicy.SKIP

    def __post_init__(self) -> None:
        """Validate scoring parameters.

        The non-finisher penalty must be at least the worst score of a
        classified finisher so that retiring never pays off.
        """
        if self.captain_multiplier < 1:
            raise ValueError("captain_multiplier must be >= 1.")
        if not self.scored_sessions:
            raise ValueError("scored_sessions must not be empty.")
        for category in Category:
            if category not in self.max_field_size:
                raise ValueError(f"max_field_size missing category {category.value}.")
            if self.max_field_size[category] < 1:
                raise ValueError(
                    f"max_field_size for {category.value} must be >= 1."
                )
            if category not in self.dnf_penalty:
                raise ValueError(f"dnf_penalty missing category {category.value}.")

        floors = {c: worst_finished_score(self.max_field_size[c]) for c in Category}
        tables = [("dnf_penalty", self.dnf_penalty)]
        tables.extend(
            (f"session_dnf_penalty[{s.value}]", t)
            for s, t in self.session_dnf_penalty.items()
        )
        for label, table in tables:
            for category, penalty in table.items():
                if penalty < floors[category]:
                    raise ValueError(
                        f"{label} for {category.value} is {penalty}, below the "
                        f"worst finishing score {floors[category]}."
                    )


# ---------------------------------------------------------------------------
# League
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class League:
    """A private competition grouping fantasy teams.

    Attributes:
        league_id: Unique league identifier.
        budget: Credit cap on the summed value of a roster.
        max_teams: Maximum number of teams that may join.
        teams_locked: When set, rosters can no longer be edited.
        rules: Scoring parameters.
        name: Display name.
    """

    league_id: str
    budget: int
    max_teams: int = 10
    teams_locked: bool = False
    rules: ScoringRules = field(default_factory=ScoringRules)
    name: str = ""

    def __post_init__(self) -> None:
        """Validate league parameters."""
        if not self.league_id:
            raise ValueError("league_id must not be empty.")
        if self.budget < 0:
            raise ValueError("budget must be >= 0.")
        if self.max_teams < 1:
            raise ValueError("max_teams must be >= 1.")
