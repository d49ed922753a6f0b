"""Tests for roster composition rules: eligibility, exclusivity, quotas, budget."""

import pytest

from fantamoto.core.errors import ErrorKind
from fantamoto.core.league import League
from fantamoto.core.rider import Category, Rider, RiderType
from fantamoto.core.roster import (
    category_counts,
    remaining_budget,
    roster_value,
    validate_roster,
)

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

_PREFIX: dict[Category, str] = {
    Category.MOTOGP: "gp",
    Category.MOTO2: "m2",
    Category.MOTO3: "m3",
}


def _catalogue(per_category: int = 5, value: int = 50) -> dict[str, Rider]:
    """Return ``per_category`` official riders per class, ids like ``gp1``."""
    riders: dict[str, Rider] = {}
    for category, prefix in _PREFIX.items():
        for i in range(1, per_category + 1):
            rider = Rider(
                rider_id=f"{prefix}{i}",
                name=f"{prefix.upper()} Rider {i}",
                category=category,
                value=value,
            )
            riders[rider.rider_id] = rider
    return riders


def _roster(gp: int = 3, m2: int = 3, m3: int = 3) -> list[str]:
    return (
        [f"gp{i}" for i in range(1, gp + 1)]
        + [f"m2{i}" for i in range(1, m2 + 1)]
        + [f"m3{i}" for i in range(1, m3 + 1)]
    )


def _league(budget: int = 1000) -> League:
    return League(league_id="L1", budget=budget)


# ---------------------------------------------------------------------------
# Tests
# ---------------------------------------------------------------------------


def test_complete_roster_is_valid_and_complete() -> None:
    """Three official riders per category within budget pass every rule."""
    result = validate_roster(_roster(), _league(), _catalogue())
    assert result.valid
    assert result.complete
    assert result.errors == ()


def test_quota_violation_reports_each_offending_category() -> None:
    """4 MOTOGP + 2 MOTO3 yields exactly one violation for each class."""
    result = validate_roster(_roster(gp=4, m2=3, m3=2), _league(), _catalogue())
    assert not result.valid
    assert result.kinds() == [
        ErrorKind.CATEGORY_QUOTA_VIOLATION,
        ErrorKind.CATEGORY_QUOTA_VIOLATION,
    ]
    categories = {e.category for e in result.errors}
    assert categories == {Category.MOTOGP, Category.MOTO3}
    assert not result.of_kind(ErrorKind.BUDGET_EXCEEDED)


def test_budget_exceeded() -> None:
    """A roster worth more than the league budget is rejected."""
    result = validate_roster(_roster(), _league(budget=400), _catalogue(value=50))
    assert result.kinds() == [ErrorKind.BUDGET_EXCEEDED]
    assert "450 > 400" in result.errors[0].message


def test_budget_exactly_at_cap_is_accepted() -> None:
    result = validate_roster(_roster(), _league(budget=450), _catalogue(value=50))
    assert result.valid


def test_accepted_rosters_respect_budget() -> None:
    """Whenever a roster is accepted, its value never exceeds the budget."""
    riders = _catalogue()
    riders["gp1"] = Rider("gp1", "Expensive", Category.MOTOGP, value=300)
    for budget in range(400, 800, 25):
        league = _league(budget)
        result = validate_roster(_roster(), league, riders)
        if result.valid:
            assert roster_value(_roster(), riders) <= league.budget


def test_non_official_rider_rejected() -> None:
    """Replacement, wildcard and test riders cannot be drafted."""
    riders = _catalogue()
    riders["gp2"] = Rider("gp2", "Wildcard", Category.MOTOGP, 50, RiderType.WILDCARD)
    riders["m32"] = Rider("m32", "Tester", Category.MOTO3, 50, RiderType.TEST_RIDER)
    result = validate_roster(_roster(), _league(), riders)
    violations = result.of_kind(ErrorKind.RIDER_NOT_OFFICIAL)
    assert {v.rider_id for v in violations} == {"gp2", "m32"}


def test_rider_claimed_by_other_team_rejected() -> None:
    """Riders are exclusive within a league."""
    result = validate_roster(
        _roster(),
        _league(),
        _catalogue(),
        other_rosters=[["gp1", "m21"], ["gp5"]],
    )
    violations = result.of_kind(ErrorKind.RIDER_ALREADY_CLAIMED)
    assert {v.rider_id for v in violations} == {"gp1", "m21"}


def test_all_violations_are_accumulated() -> None:
    """Every rule runs even when an earlier one already failed."""
    riders = _catalogue(value=100)
    riders["gp1"] = Rider("gp1", "Sub", Category.MOTOGP, 100, RiderType.REPLACEMENT)
    result = validate_roster(
        _roster(gp=4),
        _league(budget=500),
        riders,
        other_rosters=[["m21"]],
    )
    kinds = set(result.kinds())
    assert kinds == {
        ErrorKind.RIDER_NOT_OFFICIAL,
        ErrorKind.RIDER_ALREADY_CLAIMED,
        ErrorKind.CATEGORY_QUOTA_VIOLATION,
        ErrorKind.BUDGET_EXCEEDED,
    }


def test_partial_roster_reports_incomplete() -> None:
    """While drafting, missing riders do not make the roster invalid."""
    result = validate_roster(
        ["gp1", "m21"], _league(), _catalogue(), require_complete=False
    )
    assert result.valid
    assert not result.complete


def test_partial_roster_over_quota_is_invalid() -> None:
    """Exceeding a quota is invalid even for a partial draft."""
    result = validate_roster(
        _roster(gp=4, m2=0, m3=0), _league(), _catalogue(), require_complete=False
    )
    assert not result.valid
    assert [e.category for e in result.errors] == [Category.MOTOGP]


def test_partial_roster_rejected_when_completion_required() -> None:
    result = validate_roster(["gp1", "m21"], _league(), _catalogue())
    assert len(result.of_kind(ErrorKind.CATEGORY_QUOTA_VIOLATION)) == 3


def test_unknown_and_duplicate_riders() -> None:
    result = validate_roster(_roster() + ["gp1", "nobody"], _league(), _catalogue())
    assert [e.rider_id for e in result.of_kind(ErrorKind.DUPLICATE_RIDER)] == ["gp1"]
    assert [e.rider_id for e in result.of_kind(ErrorKind.UNKNOWN_RIDER)] == ["nobody"]
    # Duplicates are not double counted against the quota.
    assert not result.of_kind(ErrorKind.CATEGORY_QUOTA_VIOLATION)


def test_complete_rosters_have_exact_quota() -> None:
    """Any roster reported complete holds exactly 3 riders per category."""
    riders = _catalogue()
    for gp in range(0, 5):
        for m3 in range(0, 5):
            ids = _roster(gp=gp, m2=3, m3=m3)
            result = validate_roster(ids, _league(), riders, require_complete=False)
            if result.complete:
                counts = category_counts(riders[r] for r in ids)
                assert counts == {
                    Category.MOTOGP: 3,
                    Category.MOTO2: 3,
                    Category.MOTO3: 3,
                }


def test_remaining_budget() -> None:
    riders = _catalogue(value=40)
    assert remaining_budget(_roster(), _league(budget=400), riders) == 40
    assert remaining_budget([], _league(budget=400), riders) == 400


def test_rider_rejects_negative_value() -> None:
    with pytest.raises(ValueError, match="value"):
        Rider("x", "X", Category.MOTO2, value=-1)
