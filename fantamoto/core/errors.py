"""Structured business-rule violations returned by the validators.

Violations are values, not exceptions: every validator collects all of
them so that a client can show each problem at once.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from fantamoto.core.rider import Category


class ErrorKind(str, Enum):
    """Machine-readable kind of a rule violation."""

    # Roster composition
    BUDGET_EXCEEDED = "BudgetExceeded"
    CATEGORY_QUOTA_VIOLATION = "CategoryQuotaViolation"
    RIDER_NOT_OFFICIAL = "RiderNotOfficial"
    RIDER_ALREADY_CLAIMED = "RiderAlreadyClaimed"
    UNKNOWN_RIDER = "UnknownRider"
    DUPLICATE_RIDER = "DuplicateRider"
    ROSTER_LOCKED = "RosterLocked"
    LEAGUE_FULL = "LeagueFull"
    DUPLICATE_TEAM = "DuplicateTeam"

    # Lineup submission
    DEADLINE_PASSED = "DeadlinePassed"
    LINEUP_CATEGORY_COUNT_INVALID = "LineupCategoryCountInvalid"
    PREDICTION_OUT_OF_RANGE = "PredictionOutOfRange"
    RIDER_NOT_IN_ROSTER = "RiderNotInRoster"
    CAPTAIN_COUNT_INVALID = "CaptainCountInvalid"

    # Scoring
    MISSING_RESULT = "MissingResult"
    NO_FALLBACK_AVAILABLE = "NoFallbackAvailable"


@dataclass(frozen=True)
class RuleViolation:
    """A single violated rule.

    Attributes:
        kind: Machine-readable violation kind.
        message: Human-readable explanation.
        rider_id: Rider the violation refers to, if any.
        category: Category the violation refers to, if any.
    """

    kind: ErrorKind
    message: str
    rider_id: str | None = None
    category: Category | None = None


@dataclass(frozen=True)
class ValidationResult:
    """Outcome of a validation run.

    ``valid`` is true when no violation was found.  ``complete`` is only
    meaningful for rosters: a valid but partial draft reports
    ``complete=False``.
    """

    errors: tuple[RuleViolation, ...] = ()
    complete: bool = True

    @property
    def valid(self) -> bool:
        return not self.errors

    def kinds(self) -> list[ErrorKind]:
        """Return the violation kinds in reporting order."""
        return [e.kind for e in self.errors]

    def of_kind(self, kind: ErrorKind) -> list[RuleViolation]:
        return [e for e in self.errors if e.kind is kind]
