"""Inverted fantasy scoring: lower points are better.

A classified rider costs its finishing position plus the distance between
predicted and actual position::

    points = actual + |predicted - actual|

so a perfect prediction costs exactly the finishing position.  Riders who
do not finish (DNF, DNS, DSQ) cost the league's non-finisher penalty.  The
captain's points are multiplied (doubled by default), which makes a bad
captain pick expensive.

Scores are always derived from the stored lineup (or fallback) and the
current result set, never from an earlier score, so recomputing a race
any number of times yields the same TeamScores.
"""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass
from typing import Iterable, Mapping

from fantamoto.core.errors import ErrorKind, RuleViolation
from fantamoto.core.fallback import ResolvedLineup, resolve_lineup
from fantamoto.core.league import LINEUP_QUOTA, NoLineupPolicy, ScoringRules
from fantamoto.core.race import Race, RaceResult, ResultStatus, SessionType
from fantamoto.core.rider import Category, Rider
from fantamoto.core.team import Lineup, LineupEntry, Team

# ---------------------------------------------------------------------------
# Result containers
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class RiderScore:
    """Score breakdown of one lineup rider in one session."""

    rider_id: str
    session: SessionType
    category: Category
    predicted_position: int
    actual_position: int | None
    status: ResultStatus
    base_points: int
    multiplier: int
    points: int

    @property
    def is_captain(self) -> bool:
        return self.multiplier > 1


@dataclass(frozen=True)
class TeamScore:
    """Points of a team for one race.

    Attributes:
        team_id: Scored team.
        race_id: Scored race.
        season: Season of the race.
        points: Sum of every rider score of every scored session.
        rider_scores: Per-rider, per-session breakdown.
        is_fallback: True when the lineup was carried over from an
            earlier race.
        source_race_id: Race the scored lineup was submitted for, or
            ``None`` for a placeholder score.
        is_placeholder: True when the team had no lineup at all and the
            league charges the maximum penalty instead.
    """

    team_id: str
    race_id: str
    season: int
    points: int
    rider_scores: tuple[RiderScore, ...] = ()
    is_fallback: bool = False
    source_race_id: str | None = None
    is_placeholder: bool = False


@dataclass(frozen=True)
class ScoreOutcome:
    """Either a TeamScore or the reasons the team is not yet scoreable."""

    team_id: str
    race_id: str
    score: TeamScore | None = None
    errors: tuple[RuleViolation, ...] = ()

    @property
    def scoreable(self) -> bool:
        return self.score is not None


@dataclass(frozen=True)
class RaceRecompute:
    """Full set of derived scores for one race.

    Attributes:
        race_id: Recomputed race.
        scores: TeamScores to store, replacing every earlier row of the race.
        deferred: Teams without a score, with the reason.
    """

    race_id: str
    scores: tuple[TeamScore, ...]
    deferred: tuple[ScoreOutcome, ...] = ()


# ---------------------------------------------------------------------------
# Rider scoring
# ---------------------------------------------------------------------------


def penalty_points(
    rules: ScoringRules,
    category: Category,
    session: SessionType = SessionType.RACE,
) -> int:
    """Return the non-finisher penalty for *category* in *session*."""
    override = rules.session_dnf_penalty.get(session)
    if override is not None and category in override:
        return override[category]
    return rules.dnf_penalty[category]


def score_rider(
    entry: LineupEntry,
    result: RaceResult,
    category: Category,
    rules: ScoringRules,
    session: SessionType = SessionType.RACE,
) -> RiderScore:
    """Score one lineup rider against its official result.

    Args:
        entry: Lineup entry holding the prediction and captain flag.
        result: Official result of the rider in *session*.
        category: Category of the rider.
        rules: League scoring rules.
        session: Session being scored.

    Returns:
        The rider's :class:`RiderScore`.

    Raises:
        ValueError: If the entry carries no prediction or refers to a
            different rider than *result*.
    """
    if entry.predicted_position is None:
        raise ValueError(f"Rider {entry.rider_id} has no predicted position.")
    if entry.rider_id != result.rider_id:
        raise ValueError(
            f"Result for {result.rider_id} cannot score entry {entry.rider_id}."
        )

    if result.status is ResultStatus.FINISHED and result.position is not None:
        actual = result.position
        base = actual + abs(entry.predicted_position - actual)
    else:
        base = penalty_points(rules, category, session)

    multiplier = rules.captain_multiplier if entry.is_captain else 1
    return RiderScore(
        rider_id=entry.rider_id,
        session=session,
        category=category,
        predicted_position=entry.predicted_position,
        actual_position=result.position,
        status=result.status,
        base_points=base,
        multiplier=multiplier,
        points=base * multiplier,
    )


def placeholder_points(
    rules: ScoringRules,
    sessions: Iterable[SessionType],
) -> int:
    """Return the score charged to a team with no lineup at all."""
    return sum(
        LINEUP_QUOTA * penalty_points(rules, category, session)
        for session in sessions
        for category in Category
    )


# ---------------------------------------------------------------------------
# Team scoring
# ---------------------------------------------------------------------------


def _scored_sessions(race: Race, rules: ScoringRules) -> list[SessionType]:
    return [s for s in rules.scored_sessions if s in race.sessions]


def _index_results(
    race: Race,
    results: Iterable[RaceResult],
) -> dict[SessionType, dict[str, RaceResult]]:
    indexed: dict[SessionType, dict[str, RaceResult]] = defaultdict(dict)
    for result in results:
        if result.race_id == race.race_id:
            indexed[result.session][result.rider_id] = result
    return indexed


def score_team_race(
    team: Team,
    race: Race,
    resolved: ResolvedLineup | None,
    results: Iterable[RaceResult],
    riders: Mapping[str, Rider],
    rules: ScoringRules,
) -> ScoreOutcome:
    """Score *team* in *race*.

    Args:
        team: Team being scored.
        race: Race being scored.
        resolved: Lineup from :func:`resolve_lineup`, or ``None``.
        results: Official results; rows of other races are ignored.
        riders: Rider catalogue keyed by rider id.
        rules: League scoring rules.

    Returns:
        A :class:`ScoreOutcome`.  It carries no score when a scored
        session has no results yet, when a lineup rider has no result
        (``MissingResult``), or when the team has no lineup and the league
        skips such teams (``NoFallbackAvailable``).
    """
    sessions = _scored_sessions(race, rules)
    indexed = _index_results(race, results)

    pending = [s for s in sessions if not indexed.get(s)]
    if pending:
        return ScoreOutcome(
            team_id=team.team_id,
            race_id=race.race_id,
            errors=tuple(
                RuleViolation(
                    ErrorKind.MISSING_RESULT,
                    f"No {s.value} results ingested for race {race.race_id}.",
                )
                for s in pending
            ),
        )

    if resolved is None:
        if rules.no_lineup_policy is NoLineupPolicy.MAX_PENALTY:
            score = TeamScore(
                team_id=team.team_id,
                race_id=race.race_id,
                season=race.season,
                points=placeholder_points(rules, sessions),
                is_placeholder=True,
            )
            return ScoreOutcome(team.team_id, race.race_id, score=score)
        return ScoreOutcome(
            team_id=team.team_id,
            race_id=race.race_id,
            errors=(
                RuleViolation(
                    ErrorKind.NO_FALLBACK_AVAILABLE,
                    f"Team {team.team_id} has no lineup for race {race.race_id} "
                    f"or any earlier race of season {race.season}.",
                ),
            ),
        )

    lineup: Lineup = resolved.lineup
    missing: list[RuleViolation] = []
    rider_scores: list[RiderScore] = []
    for session in sessions:
        session_results = indexed[session]
        for entry in lineup.entries:
            result = session_results.get(entry.rider_id)
            if result is None:
                missing.append(
                    RuleViolation(
                        ErrorKind.MISSING_RESULT,
                        f"No {session.value} result for rider {entry.rider_id} "
                        f"in race {race.race_id}.",
                        rider_id=entry.rider_id,
                    )
                )
                continue
            category = riders[entry.rider_id].category
            rider_scores.append(score_rider(entry, result, category, rules, session))

    if missing:
        return ScoreOutcome(team.team_id, race.race_id, errors=tuple(missing))

    score = TeamScore(
        team_id=team.team_id,
        race_id=race.race_id,
        season=race.season,
        points=sum(rs.points for rs in rider_scores),
        rider_scores=tuple(rider_scores),
        is_fallback=resolved.is_fallback,
        source_race_id=resolved.source_race_id,
    )
    return ScoreOutcome(team.team_id, race.race_id, score=score)


def recompute_race(
    race: Race,
    teams: Iterable[Team],
    history: Mapping[tuple[str, str], Lineup],
    races: Iterable[Race],
    results: Iterable[RaceResult],
    riders: Mapping[str, Rider],
    rules: ScoringRules,
) -> RaceRecompute:
    """Derive every TeamScore of *race* from lineups and results.

    Args:
        race: Race to recompute.
        teams: Teams of the league.
        history: Stored lineups keyed by ``(team_id, race_id)``.
        races: Season calendar, used for fallback resolution.
        results: Current official results of *race*.
        riders: Rider catalogue keyed by rider id.
        rules: League scoring rules.

    Returns:
        A :class:`RaceRecompute` whose ``scores`` replace all stored
        TeamScores of the race.
    """
    calendar = list(races)
    snapshot = [r for r in results if r.race_id == race.race_id]

    scores: list[TeamScore] = []
    deferred: list[ScoreOutcome] = []
    for team in teams:
        resolved = resolve_lineup(team, race, history, calendar)
        outcome = score_team_race(team, race, resolved, snapshot, riders, rules)
        if outcome.score is not None:
            scores.append(outcome.score)
        else:
            deferred.append(outcome)

    return RaceRecompute(
        race_id=race.race_id,
        scores=tuple(scores),
        deferred=tuple(deferred),
    )
