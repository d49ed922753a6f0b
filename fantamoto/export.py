"""DataFrame views of derived scores and standings for batch output."""

from __future__ import annotations

from typing import Iterable

import pandas as pd

from fantamoto.core.scoring import TeamScore
from fantamoto.core.standings import Standing

STANDINGS_COLUMNS: list[str] = [
    "rank",
    "team_id",
    "team_name",
    "total_points",
    "last_race_points",
    "previous_rank",
    "trend",
    "rank_change",
    "gap_to_previous",
    "gap_to_next",
    "races_scored",
]

RIDER_SCORE_COLUMNS: list[str] = [
    "team_id",
    "race_id",
    "rider_id",
    "session",
    "category",
    "predicted_position",
    "actual_position",
    "status",
    "base_points",
    "multiplier",
    "points",
    "is_fallback",
]


def standings_to_frame(standings: Iterable[Standing]) -> pd.DataFrame:
    """Return the standings as a DataFrame indexed by rank."""
    rows = [
        {
            "rank": s.rank,
            "team_id": s.team_id,
            "team_name": s.team_name,
            "total_points": s.total_points,
            "last_race_points": s.last_race_points,
            "previous_rank": s.previous_rank,
            "trend": s.trend.value,
            "rank_change": s.rank_change,
            "gap_to_previous": s.gap_to_previous,
            "gap_to_next": s.gap_to_next,
            "races_scored": s.races_scored,
        }
        for s in standings
    ]
    df = pd.DataFrame(rows, columns=STANDINGS_COLUMNS)
    # Nullable integers keep the ``None`` gaps as <NA> instead of floats.
    for column in ("last_race_points", "previous_rank", "gap_to_previous", "gap_to_next"):
        df[column] = df[column].astype("Int64")
    return df.set_index("rank")


def team_scores_to_frame(scores: Iterable[TeamScore]) -> pd.DataFrame:
    """Return one row per (team, race) with total and provenance flags."""
    rows = [
        {
            "team_id": s.team_id,
            "race_id": s.race_id,
            "season": s.season,
            "points": s.points,
            "is_fallback": s.is_fallback,
            "source_race_id": s.source_race_id,
            "is_placeholder": s.is_placeholder,
        }
        for s in scores
    ]
    return pd.DataFrame(
        rows,
        columns=[
            "team_id",
            "race_id",
            "season",
            "points",
            "is_fallback",
            "source_race_id",
            "is_placeholder",
        ],
    )


def rider_scores_to_frame(scores: Iterable[TeamScore]) -> pd.DataFrame:
    """Return the per-rider breakdown of *scores*, one row per rider and session."""
    rows = [
        {
            "team_id": s.team_id,
            "race_id": s.race_id,
            "rider_id": rs.rider_id,
            "session": rs.session.value,
            "category": rs.category.value,
            "predicted_position": rs.predicted_position,
            "actual_position": rs.actual_position,
            "status": rs.status.value,
            "base_points": rs.base_points,
            "multiplier": rs.multiplier,
            "points": rs.points,
            "is_fallback": s.is_fallback,
        }
        for s in scores
        for rs in s.rider_scores
    ]
    df = pd.DataFrame(rows, columns=RIDER_SCORE_COLUMNS)
    df["actual_position"] = df["actual_position"].astype("Int64")
    return df
