"""Roster composition rules.

A roster is checked against four independent rules:

* every rider must exist in the catalogue and be an ``OFFICIAL`` rider;
* no rider may already belong to another team of the same league;
* a complete roster holds exactly three riders per category, and no
  category may ever exceed three;
* the summed rider value must not exceed the league budget.

All rules are evaluated on every call and their violations accumulated,
so a draft screen can display every problem at once.
"""

from __future__ import annotations

from collections import Counter
from typing import Iterable, Mapping

from fantamoto.core.errors import ErrorKind, RuleViolation, ValidationResult
from fantamoto.core.league import ROSTER_QUOTA, League
from fantamoto.core.rider import Category, Rider


def validate_roster(
    rider_ids: Iterable[str],
    league: League,
    riders: Mapping[str, Rider],
    other_rosters: Iterable[Iterable[str]] = (),
    *,
    require_complete: bool = True,
) -> ValidationResult:
    """Validate a candidate roster for a team of *league*.

    Args:
        rider_ids: Candidate rider identifiers.
        league: League the team plays in.
        riders: Rider catalogue keyed by rider id.
        other_rosters: Current rosters of every *other* team in the
            league.  The editing team's own roster must be excluded.
        require_complete: When true, categories below quota are reported
            as ``CategoryQuotaViolation``.  When false (drafting in
            progress) they only mark the result as incomplete.

    Returns:
        A :class:`ValidationResult`; ``complete`` is true only when every
        category holds exactly its quota.
    """
    candidate = list(rider_ids)
    errors: list[RuleViolation] = []

    # -- Duplicates ----------------------------------------------------------
    seen: set[str] = set()
    unique: list[str] = []
    for rider_id in candidate:
        if rider_id in seen:
            errors.append(
                RuleViolation(
                    ErrorKind.DUPLICATE_RIDER,
                    f"Rider {rider_id} is selected more than once.",
                    rider_id=rider_id,
                )
            )
            continue
        seen.add(rider_id)
        unique.append(rider_id)

    # -- Catalogue and eligibility -------------------------------------------
    known: list[Rider] = []
    for rider_id in unique:
        rider = riders.get(rider_id)
        if rider is None:
            errors.append(
                RuleViolation(
                    ErrorKind.UNKNOWN_RIDER,
                    f"Rider {rider_id} not found.",
                    rider_id=rider_id,
                )
            )
            continue
        known.append(rider)
        if not rider.is_draftable:
            errors.append(
                RuleViolation(
                    ErrorKind.RIDER_NOT_OFFICIAL,
                    f"{rider.name or rider_id} is a {rider.rider_type.value} "
                    f"rider and cannot be drafted.",
                    rider_id=rider_id,
                    category=rider.category,
                )
            )

    # -- League exclusivity ----------------------------------------------------
    claimed: set[str] = set()
    for roster in other_rosters:
        claimed.update(roster)
    for rider in known:
        if rider.rider_id in claimed:
            errors.append(
                RuleViolation(
                    ErrorKind.RIDER_ALREADY_CLAIMED,
                    f"{rider.name or rider.rider_id} already belongs to another "
                    f"team in this league.",
                    rider_id=rider.rider_id,
                    category=rider.category,
                )
            )

    # -- Category quotas -------------------------------------------------------
    counts = category_counts(known)
    complete = True
    for category in Category:
        count = counts.get(category, 0)
        if count == ROSTER_QUOTA:
            continue
        complete = False
        if count > ROSTER_QUOTA or require_complete:
            errors.append(
                RuleViolation(
                    ErrorKind.CATEGORY_QUOTA_VIOLATION,
                    f"{category.value} needs exactly {ROSTER_QUOTA} riders, "
                    f"got {count}.",
                    category=category,
                )
            )

    # -- Budget ----------------------------------------------------------------
    total = sum(r.value for r in known)
    if total > league.budget:
        errors.append(
            RuleViolation(
                ErrorKind.BUDGET_EXCEEDED,
                f"Budget exceeded: {total} > {league.budget}.",
            )
        )

    return ValidationResult(errors=tuple(errors), complete=complete)


def category_counts(riders: Iterable[Rider]) -> dict[Category, int]:
    """Return the number of riders per category (every category present)."""
    counter = Counter(r.category for r in riders)
    return {c: counter.get(c, 0) for c in Category}


def roster_value(rider_ids: Iterable[str], riders: Mapping[str, Rider]) -> int:
    """Return the summed value of the known riders in *rider_ids*."""
    return sum(riders[r].value for r in set(rider_ids) if r in riders)


def remaining_budget(
    rider_ids: Iterable[str],
    league: League,
    riders: Mapping[str, Rider],
) -> int:
    """Return the credits left after drafting *rider_ids* (may be negative)."""
    return league.budget - roster_value(rider_ids, riders)
