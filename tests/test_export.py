"""Tests for the DataFrame exports of scores and standings."""

from datetime import datetime, timezone

from fantamoto.core.race import Race, ResultStatus, SessionType
from fantamoto.core.rider import Category
from fantamoto.core.scoring import RiderScore, TeamScore
from fantamoto.core.standings import aggregate_standings
from fantamoto.core.team import Team
from fantamoto.export import (
    RIDER_SCORE_COLUMNS,
    rider_scores_to_frame,
    standings_to_frame,
    team_scores_to_frame,
)

_T0 = datetime(2025, 1, 1, tzinfo=timezone.utc)


def _scores() -> list[TeamScore]:
    finished = RiderScore(
        rider_id="gp1",
        session=SessionType.RACE,
        category=Category.MOTOGP,
        predicted_position=3,
        actual_position=5,
        status=ResultStatus.FINISHED,
        base_points=7,
        multiplier=2,
        points=14,
    )
    crashed = RiderScore(
        rider_id="gp2",
        session=SessionType.RACE,
        category=Category.MOTOGP,
        predicted_position=4,
        actual_position=None,
        status=ResultStatus.DNF,
        base_points=99,
        multiplier=1,
        points=99,
    )
    return [
        TeamScore("a", "R1", 2025, 113, (finished, crashed)),
        TeamScore("b", "R1", 2025, 120, is_fallback=True, source_race_id="R0"),
    ]


def test_standings_frame() -> None:
    races = [Race("R1", 2025, 1, _T0)]
    teams = [Team("a", "L", "u1", _T0, name="A"), Team("b", "L", "u2", _T0, name="B")]
    df = standings_to_frame(aggregate_standings(_scores(), teams, races, 2025))
    assert list(df.index) == [1, 2]
    assert list(df["team_id"]) == ["a", "b"]
    assert df.loc[1, "trend"] == "stable"
    assert df.loc[2, "gap_to_previous"] == 7
    assert str(df["gap_to_previous"].dtype) == "Int64"


def test_team_scores_frame() -> None:
    df = team_scores_to_frame(_scores())
    assert list(df["points"]) == [113, 120]
    assert list(df["is_fallback"]) == [False, True]
    assert df.loc[1, "source_race_id"] == "R0"


def test_rider_scores_frame() -> None:
    df = rider_scores_to_frame(_scores())
    assert list(df.columns) == RIDER_SCORE_COLUMNS
    assert len(df) == 2
    assert df.loc[0, "points"] == 14
    assert df.loc[1, "status"] == "DNF"
    assert df["actual_position"].isna().tolist() == [False, True]


def test_empty_frames_keep_columns() -> None:
    assert list(rider_scores_to_frame([]).columns) == RIDER_SCORE_COLUMNS
    assert standings_to_frame([]).empty
