"""CLI entrypoint for the fantasy MotoGP scoring engine."""

from __future__ import annotations

import logging
import sys
from datetime import timedelta

from fantamoto import __version__
from fantamoto.config import load_calendar, load_league
from fantamoto.core.league_state import LeagueStore
from fantamoto.core.race import RaceResult, ResultStatus, SessionType
from fantamoto.core.rider import Category, Rider
from fantamoto.core.team import LineupEntry

_TEAMS: tuple[str, ...] = ("Desmo Dreamers", "Blue Riders", "Orange Army")


def _demo_riders() -> list[Rider]:
    """Return nine riders per category with descending values."""
    riders: list[Rider] = []
    for category in Category:
        for i in range(1, 10):
            riders.append(
                Rider(
                    rider_id=f"{category.value}-{i:02d}",
                    name=f"{category.value.title()} Rider {i}",
                    category=category,
                    value=120 - i * 10,
                )
            )
    return riders


def main() -> None:
    """Run a demonstration season over the first three calendar rounds."""
    logging.basicConfig(level=logging.WARNING)
    print(f"Fantasy MotoGP Engine v{__version__}")
    print("=" * 56)

    league = load_league()
    calendar = load_calendar()
    races = calendar[:3]
    print(f"\nLeague : {league.name} (budget {league.budget})")
    print(f"Season : {calendar[0].season}, {len(calendar)} rounds loaded")

    # Freeze the clock just before the first deadline.
    now = [races[0].sprint_date - timedelta(hours=1)]
    store = LeagueStore(league, calendar, _demo_riders(), clock=lambda: now[0])

    # -- Teams and rosters -----------------------------------------------------
    for t, name in enumerate(_TEAMS):
        team_id = f"team-{t + 1}"
        store.create_team(team_id, owner_id=f"user-{t + 1}", name=name)
        roster = [
            f"{c.value}-{t * 3 + k:02d}" for c in Category for k in range(1, 4)
        ]
        result = store.set_roster(team_id, roster)
        print(f"  {name:<16s} roster valid={result.valid}")

    # -- Lineups, results and scores ---------------------------------------------
    for rnd, race in enumerate(races):
        now[0] = race.sprint_date - timedelta(hours=1)
        for team in store.teams:
            # The third team only submits for the opening round.
            if team.team_id == "team-3" and rnd > 0:
                continue
            entries = []
            for c in Category:
                active = [r for r in team.roster if r.startswith(c.value)][:2]
                for k, rider_id in enumerate(active):
                    entries.append(
                        LineupEntry(
                            rider_id=rider_id,
                            predicted_position=int(rider_id[-2:]) + rnd,
                            is_captain=(c is Category.MOTOGP and k == 0),
                        )
                    )
            store.submit_lineup(team.team_id, race.race_id, entries)

        rows = []
        for c in Category:
            ids = [r for r in store.riders if r.startswith(c.value)]
            order = ids[rnd:] + ids[:rnd]
            for pos, rider_id in enumerate(order, start=1):
                status = ResultStatus.DNF if pos == 9 else ResultStatus.FINISHED
                rows.append(
                    RaceResult(
                        race_id=race.race_id,
                        rider_id=rider_id,
                        status=status,
                        position=pos if status is ResultStatus.FINISHED else None,
                    )
                )
        recompute = store.ingest_results(race.race_id, SessionType.RACE, rows)
        print(f"\nR{race.round:02d} {race.name}")
        for score in recompute.scores:
            flag = " (fallback)" if score.is_fallback else ""
            print(f"  {score.team_id:<8s} {score.points:4d} pts{flag}")

    # -- Standings -------------------------------------------------------------
    print("\nStandings")
    print("-" * 56)
    for row in store.standings(calendar[0].season):
        gap = "-" if row.gap_to_previous is None else f"+{row.gap_to_previous}"
        print(
            f"  {row.rank:2d}. {row.team_name:<16s} {row.total_points:5d} pts  "
            f"gap {gap:>5s}  {row.trend.value}"
        )


if __name__ == "__main__":
    sys.exit(main() or 0)
