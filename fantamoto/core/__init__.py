"""Core rule modules for the fantasy MotoGP engine."""

from fantamoto.core.errors import ErrorKind, RuleViolation, ValidationResult
from fantamoto.core.fallback import ResolvedLineup, resolve_lineup
from fantamoto.core.league import (
    LINEUP_QUOTA,
    ROSTER_QUOTA,
    League,
    NoLineupPolicy,
    ScoringRules,
    worst_finished_score,
)
from fantamoto.core.league_state import LeagueStore
from fantamoto.core.lineup import lineup_deadline, replace_lineup, validate_lineup
from fantamoto.core.race import Race, RaceResult, ResultStatus, SessionType
from fantamoto.core.rider import Category, Rider, RiderType
from fantamoto.core.roster import (
    category_counts,
    remaining_budget,
    roster_value,
    validate_roster,
)
from fantamoto.core.scoring import (
    RaceRecompute,
    RiderScore,
    ScoreOutcome,
    TeamScore,
    penalty_points,
    placeholder_points,
    recompute_race,
    score_rider,
    score_team_race,
)
from fantamoto.core.standings import Standing, Trend, aggregate_standings
from fantamoto.core.team import Lineup, LineupEntry, Team

__all__ = [
    "Category",
    "ErrorKind",
    "LINEUP_QUOTA",
    "League",
    "LeagueStore",
    "Lineup",
    "LineupEntry",
    "NoLineupPolicy",
    "ROSTER_QUOTA",
    "Race",
    "RaceRecompute",
    "RaceResult",
    "ResolvedLineup",
    "ResultStatus",
    "Rider",
    "RiderScore",
    "RiderType",
    "RuleViolation",
    "ScoreOutcome",
    "ScoringRules",
    "SessionType",
    "Standing",
    "Team",
    "TeamScore",
    "Trend",
    "ValidationResult",
    "aggregate_standings",
    "category_counts",
    "lineup_deadline",
    "penalty_points",
    "placeholder_points",
    "recompute_race",
    "remaining_budget",
    "replace_lineup",
    "resolve_lineup",
    "roster_value",
    "score_rider",
    "score_team_race",
    "validate_lineup",
    "validate_roster",
    "worst_finished_score",
]
