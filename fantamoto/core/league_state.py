"""In-memory league store wiring the rule modules together.

The store owns the mutable state of one league: teams and their rosters,
lineup history, official results and derived TeamScores.  Every write
runs under a single re-entrant lock so that

* "validate then commit" of a roster cannot race with another roster
  write claiming the same rider;
* replacing a session's results and recomputing the race's TeamScores
  happens as one step, and readers never observe a half-written race.

Deadlines are checked against the store's clock at write time, never
against a client-supplied timestamp.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import replace
from datetime import datetime, timezone
from typing import Callable, Iterable

from fantamoto.core.errors import ErrorKind, RuleViolation, ValidationResult
from fantamoto.core.fallback import ResolvedLineup, resolve_lineup
from fantamoto.core.league import League
from fantamoto.core.lineup import lineup_deadline, replace_lineup, validate_lineup
from fantamoto.core.race import Race, RaceResult, SessionType
from fantamoto.core.rider import Rider
from fantamoto.core.roster import validate_roster
from fantamoto.core.scoring import RaceRecompute, TeamScore, recompute_race
from fantamoto.core.standings import Standing, aggregate_standings
from fantamoto.core.team import Lineup, LineupEntry, Team

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class LeagueStore:
    """Mutable state of a single league.

    Attributes:
        league: League configuration.
    """

    def __init__(
        self,
        league: League,
        races: Iterable[Race],
        riders: Iterable[Rider] = (),
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self.league: League = league
        self._races: dict[str, Race] = {r.race_id: r for r in races}
        self._riders: dict[str, Rider] = {r.rider_id: r for r in riders}
        self._clock: Callable[[], datetime] = clock or _utcnow
        self._lock = threading.RLock()
        self._teams: dict[str, Team] = {}
        self._lineups: dict[tuple[str, str], Lineup] = {}
        self._results: dict[tuple[str, SessionType], tuple[RaceResult, ...]] = {}
        self._scores: dict[str, tuple[TeamScore, ...]] = {}

    # -- Read access -----------------------------------------------------------

    @property
    def teams(self) -> list[Team]:
        with self._lock:
            return list(self._teams.values())

    @property
    def races(self) -> list[Race]:
        return sorted(self._races.values(), key=lambda r: r.sort_key())

    @property
    def riders(self) -> dict[str, Rider]:
        with self._lock:
            return dict(self._riders)

    def team(self, team_id: str) -> Team:
        with self._lock:
            return self._teams[team_id]

    def race(self, race_id: str) -> Race:
        return self._races[race_id]

    def lineup(self, team_id: str, race_id: str) -> Lineup | None:
        """Return the lineup explicitly submitted for (team, race)."""
        with self._lock:
            return self._lineups.get((team_id, race_id))

    def resolved_lineup(self, team_id: str, race_id: str) -> ResolvedLineup | None:
        """Return the lineup that would score (team, race), fallback included."""
        with self._lock:
            return resolve_lineup(
                self._teams[team_id],
                self._races[race_id],
                self._lineups,
                self._races.values(),
            )

    def results(self, race_id: str) -> list[RaceResult]:
        with self._lock:
            rows: list[RaceResult] = []
            for (rid, _), session_rows in self._results.items():
                if rid == race_id:
                    rows.extend(session_rows)
            return rows

    def team_scores(self, race_id: str | None = None) -> list[TeamScore]:
        """Return stored TeamScores, optionally for a single race."""
        with self._lock:
            if race_id is not None:
                return list(self._scores.get(race_id, ()))
            return [s for scores in self._scores.values() for s in scores]

    def standings(self, season: int) -> list[Standing]:
        """Return the standings of *season*, derived from stored scores."""
        with self._lock:
            return aggregate_standings(
                self.team_scores(), self._teams.values(), self._races.values(), season
            )

    def set_teams_locked(self, locked: bool) -> None:
        """Open or close roster editing for the league."""
        with self._lock:
            self.league = replace(self.league, teams_locked=locked)
            logger.info(
                "Rosters of league %s %s",
                self.league.league_id,
                "locked" if locked else "unlocked",
            )

    # -- Catalogue ---------------------------------------------------------------

    def register_rider(self, rider: Rider) -> None:
        """Add *rider* to the catalogue or replace its synced attributes."""
        with self._lock:
            self._riders[rider.rider_id] = rider

    # -- Teams and rosters -----------------------------------------------------

    def create_team(
        self,
        team_id: str,
        owner_id: str,
        name: str = "",
        created_at: datetime | None = None,
    ) -> ValidationResult:
        """Create an empty team for *owner_id*.

        Raises:
            ValueError: If *team_id* is already taken.
        """
        with self._lock:
            if team_id in self._teams:
                raise ValueError(f"Team '{team_id}' already exists.")
            errors: list[RuleViolation] = []
            if len(self._teams) >= self.league.max_teams:
                errors.append(
                    RuleViolation(
                        ErrorKind.LEAGUE_FULL,
                        f"League {self.league.league_id} already has "
                        f"{self.league.max_teams} teams.",
                    )
                )
            if any(t.owner_id == owner_id for t in self._teams.values()):
                errors.append(
                    RuleViolation(
                        ErrorKind.DUPLICATE_TEAM,
                        f"User {owner_id} already has a team in this league.",
                    )
                )
            result = ValidationResult(errors=tuple(errors))
            if not result.valid:
                logger.info("Team %s rejected: %s", team_id, result.kinds())
                return result

            self._teams[team_id] = Team(
                team_id=team_id,
                league_id=self.league.league_id,
                owner_id=owner_id,
                created_at=created_at or self._clock(),
                name=name,
            )
            logger.info("Team %s created for user %s", team_id, owner_id)
            return result

    def set_roster(
        self,
        team_id: str,
        rider_ids: Iterable[str],
        *,
        require_complete: bool = True,
    ) -> ValidationResult:
        """Validate and store a new roster for *team_id*.

        The exclusivity check and the write happen under the same lock.
        Lineups of races still open for submission that select a rider
        outside the new roster are dropped in the same step.
        """
        candidate = list(rider_ids)
        with self._lock:
            team = self._teams[team_id]
            if self.league.teams_locked:
                result = ValidationResult(
                    errors=(
                        RuleViolation(
                            ErrorKind.ROSTER_LOCKED,
                            f"Rosters of league {self.league.league_id} are locked.",
                        ),
                    ),
                    complete=False,
                )
                logger.info("Roster of %s rejected: league locked", team_id)
                return result

            others = [t.roster for t in self._teams.values() if t.team_id != team_id]
            result = validate_roster(
                candidate,
                self.league,
                self._riders,
                others,
                require_complete=require_complete,
            )
            if not result.valid:
                logger.info("Roster of %s rejected: %s", team_id, result.kinds())
                return result

            self._teams[team_id] = team.with_roster(candidate)
            logger.info(
                "Roster of %s stored (%d riders, complete=%s)",
                team_id,
                len(candidate),
                result.complete,
            )
            self._drop_stale_lineups(team_id, set(candidate))
            return result

    def _drop_stale_lineups(self, team_id: str, roster: set[str]) -> None:
        """Remove open lineups of *team_id* that select riders outside *roster*.

        Lineups of races whose deadline has passed are kept, since they
        were legal when the race locked.
        """
        now = self._clock()
        stale = [
            key
            for key, lineup in self._lineups.items()
            if key[0] == team_id
            and now <= lineup_deadline(self._races[key[1]])
            and not set(lineup.rider_ids) <= roster
        ]
        if not stale:
            return
        self._lineups = {k: v for k, v in self._lineups.items() if k not in stale}
        logger.info(
            "Dropped %d open lineup(s) of %s after roster change: %s",
            len(stale),
            team_id,
            [race_id for _, race_id in stale],
        )

    # -- Lineups ---------------------------------------------------------------

    def submit_lineup(
        self,
        team_id: str,
        race_id: str,
        entries: Iterable[LineupEntry],
    ) -> ValidationResult:
        """Validate and store the lineup of *team_id* for *race_id*.

        A successful submission replaces any earlier lineup for the pair.
        """
        selection = tuple(entries)
        with self._lock:
            team = self._teams[team_id]
            race = self._races[race_id]
            now = self._clock()
            result = validate_lineup(
                selection, team, race, now, self._riders, self.league.rules
            )
            if not result.valid:
                logger.info(
                    "Lineup of %s for %s rejected: %s",
                    team_id,
                    race_id,
                    result.kinds(),
                )
                return result

            lineup = Lineup(
                team_id=team_id,
                race_id=race_id,
                entries=selection,
                submitted_at=now,
            )
            self._lineups = replace_lineup(self._lineups, lineup)
            logger.info("Lineup of %s for %s stored", team_id, race_id)
            return result

    # -- Results and scoring -----------------------------------------------------

    def ingest_results(
        self,
        race_id: str,
        session: SessionType,
        rows: Iterable[RaceResult],
    ) -> RaceRecompute:
        """Replace the results of one session and recompute the race.

        Raises:
            KeyError: If *race_id* is not on the calendar.
            ValueError: If a row belongs to another race or session.
        """
        race = self._races[race_id]
        snapshot = tuple(rows)
        for row in snapshot:
            if row.race_id != race_id or row.session is not session:
                raise ValueError(
                    f"Result for rider {row.rider_id} belongs to "
                    f"{row.race_id}/{row.session.value}, not "
                    f"{race_id}/{session.value}."
                )

        with self._lock:
            self._results[(race_id, session)] = snapshot
            logger.info(
                "Stored %d %s results for race %s",
                len(snapshot),
                session.value,
                race.race_id,
            )
            return self._recompute_locked(race)

    def recompute(self, race_id: str) -> RaceRecompute:
        """Recompute every TeamScore of *race_id* from stored data."""
        with self._lock:
            return self._recompute_locked(self._races[race_id])

    def _recompute_locked(self, race: Race) -> RaceRecompute:
        outcome = recompute_race(
            race,
            self._teams.values(),
            self._lineups,
            self._races.values(),
            self.results(race.race_id),
            self._riders,
            self.league.rules,
        )
        self._scores[race.race_id] = outcome.scores
        logger.info(
            "Recomputed race %s: %d team scores, %d deferred",
            race.race_id,
            len(outcome.scores),
            len(outcome.deferred),
        )
        return outcome

    # -- Season reset ------------------------------------------------------------

    def reset_season(self) -> None:
        """Clear rosters, lineup history and TeamScores of the league.

        League, team and owner identities are kept.  Official results are
        not league data and are left untouched.
        """
        with self._lock:
            self._teams = {
                team_id: team.with_roster(()) for team_id, team in self._teams.items()
            }
            self._lineups = {}
            self._scores = {}
            logger.info(
                "Season reset for league %s (%d teams kept)",
                self.league.league_id,
                len(self._teams),
            )
