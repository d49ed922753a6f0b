"""Tests for fallback lineup resolution within a season."""

from datetime import datetime, timedelta, timezone

from fantamoto.core.fallback import resolve_lineup
from fantamoto.core.race import Race
from fantamoto.core.team import Lineup, LineupEntry, Team

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

_START = datetime(2025, 3, 2, 13, tzinfo=timezone.utc)


def _season(season: int = 2025, rounds: int = 6) -> list[Race]:
    start = _START.replace(year=season)
    return [
        Race(
            race_id=f"{season}-R{i}",
            season=season,
            round=i,
            gp_date=start + timedelta(weeks=2 * (i - 1)),
        )
        for i in range(1, rounds + 1)
    ]


def _team(team_id: str = "T1") -> Team:
    return Team(team_id, "L1", f"u-{team_id}", created_at=_START)


def _lineup(team_id: str, race_id: str, prediction: int = 4) -> Lineup:
    return Lineup(
        team_id,
        race_id,
        (LineupEntry("gp1", prediction), LineupEntry("m21", prediction + 1)),
    )


# ---------------------------------------------------------------------------
# Tests
# ---------------------------------------------------------------------------


def test_explicit_lineup_wins() -> None:
    races = _season()
    explicit = _lineup("T1", "2025-R5")
    history = {
        ("T1", "2025-R3"): _lineup("T1", "2025-R3"),
        ("T1", "2025-R5"): explicit,
    }
    resolved = resolve_lineup(_team(), races[4], history, races)
    assert resolved.lineup is explicit
    assert not resolved.is_fallback


def test_falls_back_to_most_recent_prior_lineup() -> None:
    """No lineup for race 5, lineups for races 1 and 3: race 3 is used verbatim."""
    races = _season()
    r3 = _lineup("T1", "2025-R3", prediction=9)
    history = {
        ("T1", "2025-R1"): _lineup("T1", "2025-R1"),
        ("T1", "2025-R3"): r3,
    }
    resolved = resolve_lineup(_team(), races[4], history, races)
    assert resolved.lineup is r3
    assert resolved.is_fallback
    assert resolved.source_race_id == "2025-R3"


def test_later_lineups_are_not_used() -> None:
    races = _season()
    history = {("T1", "2025-R6"): _lineup("T1", "2025-R6")}
    assert resolve_lineup(_team(), races[4], history, races) is None


def test_previous_season_is_not_used() -> None:
    calendar = _season(2024) + _season(2025)
    history = {("T1", "2024-R6"): _lineup("T1", "2024-R6")}
    target = calendar[6]  # 2025 round 1
    assert target.race_id == "2025-R1"
    assert resolve_lineup(_team(), target, history, calendar) is None


def test_other_teams_lineups_are_ignored() -> None:
    races = _season()
    history = {("T2", "2025-R2"): _lineup("T2", "2025-R2")}
    assert resolve_lineup(_team("T1"), races[3], history, races) is None


def test_order_follows_calendar_not_insertion() -> None:
    races = _season()
    history = {
        ("T1", "2025-R4"): _lineup("T1", "2025-R4"),
        ("T1", "2025-R2"): _lineup("T1", "2025-R2"),
    }
    resolved = resolve_lineup(_team(), races[5], history, races)
    assert resolved.source_race_id == "2025-R4"


def test_resolution_does_not_modify_history() -> None:
    races = _season()
    history = {("T1", "2025-R1"): _lineup("T1", "2025-R1")}
    before = dict(history)
    resolve_lineup(_team(), races[2], history, races)
    assert history == before
    assert ("T1", "2025-R3") not in history
