"""Season standings aggregation.

Standings are fully derived from the TeamScores of a season.  Teams are
ranked by ascending total points; ties go to the team that scored fewer
points in the most recent scored race, then to the team created first.
Trends compare the current rank with the rank the team held before the
most recent race was scored.
"""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Iterable

from fantamoto.core.race import Race
from fantamoto.core.scoring import TeamScore
from fantamoto.core.team import Team

_NO_SCORE: float = float("inf")


class Trend(str, Enum):
    """Rank movement caused by the most recent race."""

    UP = "up"
    DOWN = "down"
    STABLE = "stable"


@dataclass(frozen=True)
class Standing:
    """One row of the season standings.

    Attributes:
        rank: 1-based position; every team gets a distinct rank.
        team_id: Ranked team.
        team_name: Display name of the team.
        total_points: Season total (lower is better).
        last_race_points: Points in the most recent scored race, if any.
        previous_rank: Rank before the most recent race, if one existed.
        trend: Movement relative to ``previous_rank``.
        rank_change: ``previous_rank - rank`` (positive means climbing).
        gap_to_previous: Points behind the team ranked just above.
        gap_to_next: Points ahead of the team ranked just below.
        races_scored: Number of races with a TeamScore for the team.
    """

    rank: int
    team_id: str
    team_name: str
    total_points: int
    last_race_points: int | None
    previous_rank: int | None
    trend: Trend
    rank_change: int
    gap_to_previous: int | None
    gap_to_next: int | None
    races_scored: int


def _rank(
    teams: list[Team],
    points: dict[str, dict[str, int]],
    race_ids: list[str],
) -> list[tuple[Team, int]]:
    """Order *teams* by the scores of *race_ids* and return (team, total).

    Teams without any score in *race_ids* are ranked after every scored
    team, since a zero total would otherwise lead a lower-is-better table.
    """
    latest = race_ids[-1] if race_ids else None

    def total(team: Team) -> int:
        return sum(points[team.team_id].get(r, 0) for r in race_ids)

    def key(team: Team) -> tuple[bool, int, float, datetime, str]:
        scored = any(r in points[team.team_id] for r in race_ids)
        last = points[team.team_id].get(latest, _NO_SCORE) if latest else _NO_SCORE
        return (not scored, total(team), last, team.created_at, team.team_id)

    ordered = sorted(teams, key=key)
    return [(team, total(team)) for team in ordered]


def aggregate_standings(
    team_scores: Iterable[TeamScore],
    teams: Iterable[Team],
    races: Iterable[Race],
    season: int,
) -> list[Standing]:
    """Build the standings of *season*.

    Args:
        team_scores: TeamScores of the league; scores of other seasons or
            of races missing from *races* are ignored.  When a (team,
            race) pair appears more than once the last row wins.
        teams: Teams of the league.  Teams without any score are listed
            last with a total of zero and no gaps.
        races: Calendar used to order races within the season.
        season: Season to aggregate.

    Returns:
        Standings ordered by rank.
    """
    team_list = list(teams)
    calendar = sorted(
        (r for r in races if r.season == season),
        key=lambda r: r.sort_key(),
    )
    season_race_ids = {r.race_id for r in calendar}

    points: dict[str, dict[str, int]] = defaultdict(dict)
    for score in team_scores:
        if score.season != season or score.race_id not in season_race_ids:
            continue
        points[score.team_id][score.race_id] = score.points

    scored_races = [
        r.race_id
        for r in calendar
        if any(r.race_id in per_team for per_team in points.values())
    ]

    current = _rank(team_list, points, scored_races)
    previous_ranks: dict[str, int] = {}
    if len(scored_races) > 1:
        before = _rank(team_list, points, scored_races[:-1])
        previous_ranks = {team.team_id: i for i, (team, _) in enumerate(before, 1)}

    latest = scored_races[-1] if scored_races else None
    n_scored = sum(1 for team in team_list if points[team.team_id])
    standings: list[Standing] = []
    for idx, (team, total) in enumerate(current):
        rank = idx + 1
        previous_rank = previous_ranks.get(team.team_id)
        if previous_rank is None or previous_rank == rank:
            trend = Trend.STABLE
        elif rank < previous_rank:
            trend = Trend.UP
        else:
            trend = Trend.DOWN

        # Scored teams occupy the first ``n_scored`` ranks.
        gap_to_previous: int | None = None
        gap_to_next: int | None = None
        if idx < n_scored:
            if idx > 0:
                gap_to_previous = total - current[idx - 1][1]
            if idx + 1 < n_scored:
                gap_to_next = current[idx + 1][1] - total

        standings.append(
            Standing(
                rank=rank,
                team_id=team.team_id,
                team_name=team.name,
                total_points=total,
                last_race_points=points[team.team_id].get(latest) if latest else None,
                previous_rank=previous_rank,
                trend=trend,
                rank_change=(previous_rank - rank) if previous_rank else 0,
                gap_to_previous=gap_to_previous,
                gap_to_next=gap_to_next,
                races_scored=len(points[team.team_id]),
            )
        )
    return standings
