#!/usr/bin/env python
"""Batch recomputation of TeamScores and season standings.

This script is the scheduled entry point run after results ingestion:

1. Load the league rules and season calendar from ``data/``.
2. Load the rider catalogue CSV and the teams file (rosters and lineups).
3. For every race with a results CSV in the results directory, replace
   its results and recompute every TeamScore of the race.
4. Write standings and the per-rider breakdown to the output directory.

Results files are named ``<race_id>.csv`` (RACE session) or
``<race_id>_sprint.csv`` (SPRINT session).

Usage
-----
::

    python scripts/recompute_standings.py --riders riders.csv \\
        --teams teams.yaml --results-dir results/ --output-dir out/
"""

from __future__ import annotations

import argparse
import logging
import os
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

import yaml

# Ensure the project root is on the import path.
_project_root = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if _project_root not in sys.path:
    sys.path.insert(0, _project_root)

from fantamoto.config import load_calendar, load_league, parse_timestamp  # noqa: E402
from fantamoto.core.league_state import LeagueStore  # noqa: E402
from fantamoto.core.race import SessionType  # noqa: E402
from fantamoto.core.team import LineupEntry  # noqa: E402
from fantamoto.data_ingestion.results_loader import (  # noqa: E402
    load_results_csv,
    load_riders_csv,
)
from fantamoto.export import (  # noqa: E402
    rider_scores_to_frame,
    standings_to_frame,
    team_scores_to_frame,
)

logger = logging.getLogger("recompute_standings")


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("--league", type=Path, default=None, help="League rules YAML")
    parser.add_argument("--calendar", type=Path, default=None, help="Calendar YAML")
    parser.add_argument("--riders", type=Path, required=True, help="Rider catalogue CSV")
    parser.add_argument("--teams", type=Path, required=True, help="Teams YAML")
    parser.add_argument("--results-dir", type=Path, required=True)
    parser.add_argument("--output-dir", type=Path, default=Path("results"))
    return parser.parse_args(argv)


class _ReplayClock:
    """Clock pinned to the timestamp of the record being replayed."""

    def __init__(self) -> None:
        self.now: datetime = datetime.now(timezone.utc)

    def __call__(self) -> datetime:
        return self.now


def _load_teams(store: LeagueStore, clock: _ReplayClock, path: Path) -> None:
    """Create teams, rosters and lineups from a teams YAML file.

    Lineups are replayed with *clock* pinned to each lineup's
    ``submitted_at`` so the deadline rule applies as at submission.
    """
    with open(path, encoding="utf-8") as fh:
        data: dict[str, Any] = yaml.safe_load(fh) or {}

    for entry in data.get("teams") or []:
        team_id = str(entry["team_id"])
        store.create_team(
            team_id,
            owner_id=str(entry["owner_id"]),
            name=str(entry.get("name", "")),
            created_at=parse_timestamp(entry["created_at"], f"{team_id} created_at"),
        )
        result = store.set_roster(team_id, [str(r) for r in entry.get("roster") or []])
        if not result.valid:
            logger.warning("Roster of %s rejected: %s", team_id, result.kinds())

        for lineup in entry.get("lineups") or []:
            race_id = str(lineup["race_id"])
            submitted = parse_timestamp(
                lineup["submitted_at"], f"{team_id}/{race_id} submitted_at"
            )
            clock.now = submitted
            result = store.submit_lineup(
                team_id,
                race_id,
                [
                    LineupEntry(
                        rider_id=str(r["rider_id"]),
                        predicted_position=r.get("predicted_position"),
                        is_captain=bool(r.get("captain", False)),
                    )
                    for r in lineup.get("riders") or []
                ],
            )
            if not result.valid:
                logger.warning(
                    "Lineup of %s for %s rejected: %s", team_id, race_id, result.kinds()
                )


# ---------------------------------------------------------------------------
# Main pipeline
# ---------------------------------------------------------------------------


def main(argv: list[str] | None = None) -> None:
    """Recompute all scores and write the standings."""
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")
    args = _parse_args(argv)

    print("=" * 60)
    print("STANDINGS RECOMPUTATION")
    print("=" * 60)

    league = load_league(args.league)
    calendar = load_calendar(args.calendar)
    riders = load_riders_csv(args.riders)
    print(f"[1/4] League {league.league_id}: {len(calendar)} races, {len(riders)} riders")

    clock = _ReplayClock()
    store = LeagueStore(league, calendar, riders, clock=clock)
    _load_teams(store, clock, args.teams)
    print(f"[2/4] {len(store.teams)} teams loaded")

    print("[3/4] Ingesting results")
    known = list(store.riders)
    for race in store.races:
        for session, suffix in ((SessionType.SPRINT, "_sprint"), (SessionType.RACE, "")):
            path = args.results_dir / f"{race.race_id}{suffix}.csv"
            if not path.exists():
                continue
            rows = load_results_csv(path, race.race_id, session, known_riders=known)
            outcome = store.ingest_results(race.race_id, session, rows)
            print(
                f"      {race.race_id} {session.value}: {len(outcome.scores)} scored, "
                f"{len(outcome.deferred)} deferred"
            )

    print("[4/4] Writing output")
    os.makedirs(args.output_dir, exist_ok=True)
    season = calendar[0].season if calendar else 0
    standings = standings_to_frame(store.standings(season))
    standings.to_csv(args.output_dir / "standings.csv")
    team_scores_to_frame(store.team_scores()).to_csv(
        args.output_dir / "team_scores.csv", index=False
    )
    rider_scores_to_frame(store.team_scores()).to_csv(
        args.output_dir / "rider_scores.csv", index=False
    )
    print()
    print(standings.to_string())
    print()
    print("Recomputation complete.")


if __name__ == "__main__":
    main()
