"""Race lineup rules.

A lineup activates two riders per category out of the three in the
roster and attaches a predicted finishing position to each.  It may be
(re)submitted until the race deadline: the sprint start when the weekend
has a sprint, the main race start otherwise.
"""

from __future__ import annotations

from collections import Counter
from datetime import datetime
from typing import Iterable, Mapping

from fantamoto.core.errors import ErrorKind, RuleViolation, ValidationResult
from fantamoto.core.league import LINEUP_QUOTA, ScoringRules
from fantamoto.core.race import Race
from fantamoto.core.rider import Category, Rider
from fantamoto.core.team import Lineup, LineupEntry, Team

LineupHistory = Mapping[tuple[str, str], Lineup]


def lineup_deadline(race: Race) -> datetime:
    """Return the submission deadline of *race*."""
    return race.sprint_date or race.gp_date


def validate_lineup(
    entries: Iterable[LineupEntry],
    team: Team,
    race: Race,
    now: datetime,
    riders: Mapping[str, Rider],
    rules: ScoringRules,
) -> ValidationResult:
    """Validate a lineup submission for *team* in *race*.

    Args:
        entries: Selected riders with their predictions.
        team: Submitting team; selections must come from its roster.
        race: Target race.
        now: Authoritative server time of the submission.
        riders: Rider catalogue keyed by rider id.
        rules: League scoring rules (legal prediction range per category).

    Returns:
        A :class:`ValidationResult` listing every violation found.

    Raises:
        ValueError: If *now* is not timezone-aware.
    """
    if now.tzinfo is None:
        raise ValueError("now must be timezone-aware.")

    selection = list(entries)
    errors: list[RuleViolation] = []

    deadline = lineup_deadline(race)
    if now > deadline:
        errors.append(
            RuleViolation(
                ErrorKind.DEADLINE_PASSED,
                f"The deadline for race {race.race_id} passed at "
                f"{deadline.isoformat()}.",
            )
        )

    roster = set(team.roster)
    seen: set[str] = set()
    selected: list[tuple[LineupEntry, Rider]] = []
    for entry in selection:
        if entry.rider_id in seen:
            errors.append(
                RuleViolation(
                    ErrorKind.DUPLICATE_RIDER,
                    f"Rider {entry.rider_id} is selected more than once.",
                    rider_id=entry.rider_id,
                )
            )
            continue
        seen.add(entry.rider_id)
        if entry.rider_id not in roster:
            errors.append(
                RuleViolation(
                    ErrorKind.RIDER_NOT_IN_ROSTER,
                    f"Rider {entry.rider_id} is not in the roster of team "
                    f"{team.team_id}.",
                    rider_id=entry.rider_id,
                )
            )
            continue
        rider = riders.get(entry.rider_id)
        if rider is None:
            errors.append(
                RuleViolation(
                    ErrorKind.UNKNOWN_RIDER,
                    f"Rider {entry.rider_id} not found.",
                    rider_id=entry.rider_id,
                )
            )
            continue
        selected.append((entry, rider))

    counts = Counter(rider.category for _, rider in selected)
    for category in Category:
        count = counts.get(category, 0)
        if count != LINEUP_QUOTA:
            errors.append(
                RuleViolation(
                    ErrorKind.LINEUP_CATEGORY_COUNT_INVALID,
                    f"{category.value} needs exactly {LINEUP_QUOTA} active "
                    f"riders, got {count}.",
                    category=category,
                )
            )

    for entry, rider in selected:
        limit = rules.max_field_size[rider.category]
        predicted = entry.predicted_position
        if (
            not isinstance(predicted, int)
            or isinstance(predicted, bool)
            or not 1 <= predicted <= limit
        ):
            errors.append(
                RuleViolation(
                    ErrorKind.PREDICTION_OUT_OF_RANGE,
                    f"Prediction for {rider.name or rider.rider_id} must be "
                    f"between 1 and {limit}, got {predicted}.",
                    rider_id=rider.rider_id,
                    category=rider.category,
                )
            )

    captains = sum(1 for e in selection if e.is_captain)
    if captains > 1:
        errors.append(
            RuleViolation(
                ErrorKind.CAPTAIN_COUNT_INVALID,
                f"At most one captain may be named, got {captains}.",
            )
        )

    return ValidationResult(errors=tuple(errors))


def replace_lineup(
    history: LineupHistory,
    lineup: Lineup,
) -> dict[tuple[str, str], Lineup]:
    """Return a new history with *lineup* stored for its (team, race).

    The previous lineup for the pair is dropped whole; entries are never
    merged, so stale predictions cannot survive a resubmission.
    """
    updated = dict(history)
    updated[(lineup.team_id, lineup.race_id)] = lineup
    return updated
