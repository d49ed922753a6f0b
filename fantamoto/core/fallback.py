"""Fallback lineup resolution.

When a team did not submit a lineup for a race, its most recent earlier
lineup of the same season is carried over.  The carried-over lineup is
only used for scoring: stored lineups are never copied or modified.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Mapping

from fantamoto.core.race import Race
from fantamoto.core.team import Lineup, Team


@dataclass(frozen=True)
class ResolvedLineup:
    """A lineup chosen for scoring a race.

    Attributes:
        lineup: The lineup to score, exactly as stored.
        is_fallback: True when the lineup was submitted for an earlier race.
        source_race_id: Race the lineup was originally submitted for.
    """

    lineup: Lineup
    is_fallback: bool

    @property
    def source_race_id(self) -> str:
        return self.lineup.race_id


def resolve_lineup(
    team: Team,
    race: Race,
    history: Mapping[tuple[str, str], Lineup],
    races: Iterable[Race],
) -> ResolvedLineup | None:
    """Return the lineup *team* plays in *race*, or ``None``.

    Args:
        team: Team being scored.
        race: Target race.
        history: Stored lineups keyed by ``(team_id, race_id)``.
        races: Season calendar(s) used to order the team's past lineups.
            Lineups for races not in *races* are ignored.

    Returns:
        The explicit lineup for *race* if one exists, otherwise the lineup
        of the latest race of the same season strictly before *race*.
        ``None`` when the team never submitted a lineup earlier that season.
    """
    explicit = history.get((team.team_id, race.race_id))
    if explicit is not None:
        return ResolvedLineup(lineup=explicit, is_fallback=False)

    calendar = {r.race_id: r for r in races}
    target_key = race.sort_key()
    best: tuple[Race, Lineup] | None = None
    for (team_id, race_id), lineup in history.items():
        if team_id != team.team_id:
            continue
        previous = calendar.get(race_id)
        if previous is None or previous.season != race.season:
            continue
        if previous.sort_key() >= target_key:
            continue
        if best is None or previous.sort_key() > best[0].sort_key():
            best = (previous, lineup)

    if best is None:
        return None
    return ResolvedLineup(lineup=best[1], is_fallback=True)
