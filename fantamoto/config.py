"""Configuration loaders for the fantasy MotoGP engine.

League parameters and the season calendar are stored as YAML under the
project ``data/`` directory.  Every loader accepts an optional path
override and validates its input, naming the offending entry in the
error message.
"""

from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path
from typing import Any

import yaml

from fantamoto.core.league import (
    DEFAULT_CAPTAIN_MULTIPLIER,
    DEFAULT_DNF_PENALTY,
    DEFAULT_MAX_FIELD_SIZE,
    League,
    NoLineupPolicy,
    ScoringRules,
)
from fantamoto.core.race import Race, SessionType
from fantamoto.core.rider import Category

DATA_DIR: Path = Path(__file__).resolve().parent.parent / "data"
LEAGUE_PATH: Path = DATA_DIR / "league_rules.yaml"
CALENDAR_PATH: Path = DATA_DIR / "calendar_2025.yaml"

_REQUIRED_RACE_FIELDS: tuple[str, ...] = ("race_id", "round", "gp_date")


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _read_yaml(path: Path) -> dict[str, Any]:
    if not path.exists():
        raise FileNotFoundError(f"Configuration file not found: {path}")
    with open(path, encoding="utf-8") as fh:
        data = yaml.safe_load(fh)
    if not isinstance(data, dict):
        raise ValueError(f"{path} must contain a mapping at the top level.")
    return data


def _category_table(
    raw: dict[str, Any] | None,
    label: str,
    default: dict[Category, int] | None = None,
) -> dict[Category, int]:
    """Parse a ``{CATEGORY: int}`` mapping, filling gaps from *default*."""
    table: dict[Category, int] = dict(default or {})
    for key, value in (raw or {}).items():
        try:
            category = Category(str(key).upper())
        except ValueError:
            raise ValueError(f"{label}: unknown category '{key}'") from None
        if not isinstance(value, int) or isinstance(value, bool):
            raise ValueError(
                f"{label}: value for {category.value} must be an integer, "
                f"got {type(value).__name__}"
            )
        table[category] = value
    return table


def parse_timestamp(value: Any, label: str) -> datetime:
    """Parse an ISO-8601 timestamp; naive values are read as UTC."""
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str):
        try:
            parsed = datetime.fromisoformat(value)
        except ValueError:
            raise ValueError(f"{label}: invalid timestamp '{value}'") from None
    else:
        raise ValueError(f"{label}: expected a timestamp, got {type(value).__name__}")
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


# ---------------------------------------------------------------------------
# Loaders
# ---------------------------------------------------------------------------


def parse_scoring_rules(raw: dict[str, Any] | None) -> ScoringRules:
    """Build :class:`ScoringRules` from a parsed YAML mapping.

    Missing keys fall back to the engine defaults.

    Raises:
        ValueError: On unknown categories, sessions or policies, or when
            the resulting rules are inconsistent.
    """
    raw = raw or {}
    default_penalty = raw.get("default_dnf_penalty", DEFAULT_DNF_PENALTY)

    session_overrides: dict[SessionType, dict[Category, int]] = {}
    for key, table in (raw.get("session_dnf_penalty") or {}).items():
        try:
            session = SessionType(str(key).upper())
        except ValueError:
            raise ValueError(f"session_dnf_penalty: unknown session '{key}'") from None
        session_overrides[session] = _category_table(
            table, f"session_dnf_penalty.{session.value}"
        )

    sessions_raw = raw.get("scored_sessions", [SessionType.RACE.value])
    try:
        sessions = tuple(SessionType(str(s).upper()) for s in sessions_raw)
    except ValueError:
        raise ValueError(f"scored_sessions: invalid value {sessions_raw!r}") from None

    policy_raw = raw.get("no_lineup_policy", NoLineupPolicy.SKIP.value)
    try:
        policy = NoLineupPolicy(str(policy_raw).lower())
    except ValueError:
        raise ValueError(f"no_lineup_policy: invalid value '{policy_raw}'") from None

    return ScoringRules(
        captain_multiplier=int(
            raw.get("captain_multiplier", DEFAULT_CAPTAIN_MULTIPLIER)
        ),
        max_field_size=_category_table(
            raw.get("max_field_size"), "max_field_size", dict(DEFAULT_MAX_FIELD_SIZE)
        ),
        dnf_penalty=_category_table(
            raw.get("dnf_penalty"),
            "dnf_penalty",
            {c: default_penalty for c in Category},
        ),
        session_dnf_penalty=session_overrides,
        scored_sessions=sessions,
        no_lineup_policy=policy,
    )


def load_scoring_rules(path: Path | None = None) -> ScoringRules:
    """Load the ``scoring`` section of a league rules file.

    Args:
        path: Optional override for the league rules file path.

    Returns:
        The parsed :class:`ScoringRules`.

    Raises:
        FileNotFoundError: If the file does not exist.
        ValueError: If the scoring section is invalid.
    """
    data = _read_yaml(path or LEAGUE_PATH)
    return parse_scoring_rules(data.get("scoring"))


def load_league(path: Path | None = None) -> League:
    """Load a league definition, scoring rules included.

    Raises:
        FileNotFoundError: If the file does not exist.
        ValueError: If required fields are missing or invalid.
    """
    league_path = path or LEAGUE_PATH
    data = _read_yaml(league_path)
    for field_name in ("league_id", "budget"):
        if field_name not in data:
            raise ValueError(
                f"League file {league_path} is missing required field '{field_name}'"
            )
    return League(
        league_id=str(data["league_id"]),
        budget=int(data["budget"]),
        max_teams=int(data.get("max_teams", 10)),
        teams_locked=bool(data.get("teams_locked", False)),
        rules=parse_scoring_rules(data.get("scoring")),
        name=str(data.get("name", "")),
    )


def load_calendar(path: Path | None = None) -> list[Race]:
    """Load a season calendar.

    Each entry is validated and converted into a :class:`Race`.  The
    season is taken from the file's top-level ``season`` key.

    Args:
        path: Optional override for the calendar file path.

    Returns:
        Races ordered by round.

    Raises:
        FileNotFoundError: If the calendar file does not exist.
        ValueError: If any race entry is missing fields or is invalid.
    """
    calendar_path = path or CALENDAR_PATH
    data = _read_yaml(calendar_path)
    if "season" not in data:
        raise ValueError(f"Calendar {calendar_path} is missing 'season'")
    season = int(data["season"])

    races: list[Race] = []
    for idx, entry in enumerate(data.get("races") or []):
        label = f"Race entry {idx} ({entry.get('name', '<unknown>')})"
        for field_name in _REQUIRED_RACE_FIELDS:
            if field_name not in entry:
                raise ValueError(f"{label} is missing required field '{field_name}'")
        sprint_raw = entry.get("sprint_date")
        races.append(
            Race(
                race_id=str(entry["race_id"]),
                season=season,
                round=int(entry["round"]),
                gp_date=parse_timestamp(entry["gp_date"], f"{label} gp_date"),
                sprint_date=(
                    parse_timestamp(sprint_raw, f"{label} sprint_date")
                    if sprint_raw is not None
                    else None
                ),
                name=str(entry.get("name", "")),
            )
        )

    ids = [r.race_id for r in races]
    if len(set(ids)) != len(ids):
        raise ValueError(f"Calendar {calendar_path} contains duplicate race ids")
    return sorted(races, key=lambda r: r.round)
