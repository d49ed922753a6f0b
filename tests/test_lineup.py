"""Tests for race lineup rules: deadline, sub-quota, predictions, full replace."""

from datetime import datetime, timedelta, timezone

import pytest

from fantamoto.core.errors import ErrorKind
from fantamoto.core.league import ScoringRules
from fantamoto.core.lineup import lineup_deadline, replace_lineup, validate_lineup
from fantamoto.core.race import Race
from fantamoto.core.rider import Category, Rider
from fantamoto.core.team import Lineup, LineupEntry, Team

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

_GP = datetime(2025, 4, 27, 12, 0, tzinfo=timezone.utc)
_SPRINT = datetime(2025, 4, 26, 13, 0, tzinfo=timezone.utc)


def _catalogue() -> dict[str, Rider]:
    riders: dict[str, Rider] = {}
    for category, prefix in (
        (Category.MOTOGP, "gp"),
        (Category.MOTO2, "m2"),
        (Category.MOTO3, "m3"),
    ):
        for i in range(1, 5):
            riders[f"{prefix}{i}"] = Rider(f"{prefix}{i}", "", category, 50)
    return riders


def _team() -> Team:
    roster = ("gp1", "gp2", "gp3", "m21", "m22", "m23", "m31", "m32", "m33")
    return Team(
        team_id="T1",
        league_id="L1",
        owner_id="u1",
        created_at=datetime(2025, 1, 1, tzinfo=timezone.utc),
        roster=roster,
    )


def _race(sprint: bool = True) -> Race:
    return Race(
        race_id="2025-spa",
        season=2025,
        round=5,
        gp_date=_GP,
        sprint_date=_SPRINT if sprint else None,
    )


def _entries(
    ids: tuple[str, ...] = ("gp1", "gp2", "m21", "m22", "m31", "m32"),
    prediction: int = 5,
) -> list[LineupEntry]:
    return [LineupEntry(rider_id=r, predicted_position=prediction) for r in ids]


def _validate(entries, now=_SPRINT - timedelta(hours=1), race=None):
    return validate_lineup(
        entries, _team(), race or _race(), now, _catalogue(), ScoringRules()
    )


# ---------------------------------------------------------------------------
# Tests
# ---------------------------------------------------------------------------


def test_valid_lineup() -> None:
    result = _validate(_entries())
    assert result.valid
    assert result.errors == ()


def test_deadline_is_sprint_when_present() -> None:
    assert lineup_deadline(_race(sprint=True)) == _SPRINT
    assert lineup_deadline(_race(sprint=False)) == _GP


def test_submission_after_sprint_start_rejected() -> None:
    """The sprint start closes submissions even though the GP is later."""
    result = _validate(_entries(), now=_SPRINT + timedelta(seconds=1))
    assert result.kinds() == [ErrorKind.DEADLINE_PASSED]


def test_submission_at_deadline_accepted() -> None:
    assert _validate(_entries(), now=_SPRINT).valid


def test_race_without_sprint_uses_gp_date() -> None:
    race = _race(sprint=False)
    assert _validate(_entries(), now=_SPRINT + timedelta(hours=2), race=race).valid
    late = _validate(_entries(), now=_GP + timedelta(minutes=1), race=race)
    assert late.kinds() == [ErrorKind.DEADLINE_PASSED]


def test_naive_clock_rejected() -> None:
    with pytest.raises(ValueError, match="timezone-aware"):
        _validate(_entries(), now=datetime(2025, 4, 1))


def test_category_count_errors_per_category() -> None:
    """Three MOTOGP riders and one MOTO2 rider break two sub-quotas."""
    result = _validate(_entries(("gp1", "gp2", "gp3", "m21", "m31", "m32")))
    violations = result.of_kind(ErrorKind.LINEUP_CATEGORY_COUNT_INVALID)
    assert {v.category for v in violations} == {Category.MOTOGP, Category.MOTO2}
    assert len(result.errors) == 2


def test_full_roster_is_not_a_valid_lineup() -> None:
    """All nine riders exceed the 2-per-category sub-quota."""
    ids = ("gp1", "gp2", "gp3", "m21", "m22", "m23", "m31", "m32", "m33")
    result = _validate(_entries(ids))
    assert len(result.of_kind(ErrorKind.LINEUP_CATEGORY_COUNT_INVALID)) == 3


def test_prediction_range_per_category() -> None:
    """MOTOGP allows 1..30 and MOTO2 allows 1..35 by default."""
    entries = [
        LineupEntry("gp1", 0),
        LineupEntry("gp2", 31),
        LineupEntry("m21", 35),
        LineupEntry("m22", 36),
        LineupEntry("m31", None),
        LineupEntry("m32", 40),
    ]
    result = _validate(entries)
    bad = {v.rider_id for v in result.of_kind(ErrorKind.PREDICTION_OUT_OF_RANGE)}
    assert bad == {"gp1", "gp2", "m22", "m31"}
    assert result.kinds() == [ErrorKind.PREDICTION_OUT_OF_RANGE] * 4


def test_non_integer_prediction_reported() -> None:
    """Predictions read as text or floats are reported, not compared."""
    entries = _entries()
    entries[0] = LineupEntry("gp1", "3")
    entries[1] = LineupEntry("gp2", 4.0)
    entries[2] = LineupEntry("m21", True)
    result = _validate(entries)
    bad = {v.rider_id for v in result.of_kind(ErrorKind.PREDICTION_OUT_OF_RANGE)}
    assert bad == {"gp1", "gp2", "m21"}
    assert result.kinds() == [ErrorKind.PREDICTION_OUT_OF_RANGE] * 3


def test_configured_field_size_is_honoured() -> None:
    rules = ScoringRules(
        max_field_size={Category.MOTOGP: 22, Category.MOTO2: 30, Category.MOTO3: 30},
    )
    result = validate_lineup(
        _entries(prediction=25),
        _team(),
        _race(),
        _SPRINT - timedelta(hours=1),
        _catalogue(),
        rules,
    )
    bad = {v.rider_id for v in result.of_kind(ErrorKind.PREDICTION_OUT_OF_RANGE)}
    assert bad == {"gp1", "gp2"}


def test_rider_outside_roster_rejected() -> None:
    result = _validate(_entries(("gp1", "gp4", "m21", "m22", "m31", "m32")))
    assert [v.rider_id for v in result.of_kind(ErrorKind.RIDER_NOT_IN_ROSTER)] == [
        "gp4"
    ]
    # gp4 does not count toward the MOTOGP sub-quota.
    assert [v.category for v in result.of_kind(ErrorKind.LINEUP_CATEGORY_COUNT_INVALID)] == [
        Category.MOTOGP
    ]


def test_single_captain_allowed_two_rejected() -> None:
    entries = _entries()
    one = [LineupEntry("gp1", 5, is_captain=True)] + entries[1:]
    assert _validate(one).valid
    two = one[:1] + [LineupEntry("gp2", 5, is_captain=True)] + entries[2:]
    assert _validate(two).kinds() == [ErrorKind.CAPTAIN_COUNT_INVALID]


def test_replace_lineup_is_full_replace() -> None:
    """Resubmitting drops every entry of the previous lineup for the pair."""
    old = Lineup("T1", "R1", tuple(_entries(prediction=3)))
    other = Lineup("T2", "R1", tuple(_entries(prediction=7)))
    history = {("T1", "R1"): old, ("T2", "R1"): other}

    new = Lineup("T1", "R1", (LineupEntry("gp3", 1), LineupEntry("gp1", 2)))
    updated = replace_lineup(history, new)

    assert updated[("T1", "R1")] is new
    assert updated[("T1", "R1")].rider_ids == ("gp3", "gp1")
    assert updated[("T2", "R1")] is other
    # The input mapping is left as it was.
    assert history[("T1", "R1")] is old
