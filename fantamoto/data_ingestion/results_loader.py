"""Tabular loaders for official results and the rider catalogue.

Result tables arrive from the external race-data feed or from manual
admin uploads.  This module normalises them into :class:`RaceResult`
rows before they are handed to :meth:`LeagueStore.ingest_results`:

1. Blank positions become ``None``.
2. A blank status means FINISHED when a position is present and DNF
   otherwise.
3. A FINISHED row without a position is downgraded to DNF.
4. Rows with an unknown status or an unknown rider are dropped with a
   warning.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable

import pandas as pd

from fantamoto.core.race import RaceResult, ResultStatus, SessionType
from fantamoto.core.rider import Category, Rider, RiderType

logger = logging.getLogger(__name__)

_STATUS_ALIASES: dict[str, ResultStatus] = {
    "RET": ResultStatus.DNF,
    "NC": ResultStatus.DNF,
    "DQ": ResultStatus.DSQ,
    "OK": ResultStatus.FINISHED,
}

_RESULT_COLUMNS: tuple[str, ...] = ("rider_id", "position", "status")
_RIDER_COLUMNS: tuple[str, ...] = ("rider_id", "name", "category", "value")


def _require_columns(df: pd.DataFrame, columns: Iterable[str], label: str) -> None:
    missing = [c for c in columns if c not in df.columns]
    if missing:
        raise ValueError(f"{label} is missing required columns: {', '.join(missing)}")


def _parse_position(raw: object) -> int | None:
    if raw is None or pd.isna(raw):
        return None
    value = pd.to_numeric(raw, errors="coerce")
    if pd.isna(value) or float(value) != int(value) or int(value) < 1:
        return None
    return int(value)


def _parse_status(raw: object, position: int | None) -> ResultStatus | None:
    if raw is None or pd.isna(raw) or not str(raw).strip():
        return ResultStatus.FINISHED if position is not None else ResultStatus.DNF
    text = str(raw).strip().upper()
    if text in _STATUS_ALIASES:
        return _STATUS_ALIASES[text]
    try:
        return ResultStatus(text)
    except ValueError:
        return None


def _parse_flag(raw: object) -> bool:
    """Parse a boolean cell; blank cells default to true."""
    if raw is None or pd.isna(raw):
        return True
    if isinstance(raw, str):
        text = raw.strip().lower()
        return not text or text in ("1", "true", "yes", "y")
    return bool(raw)


# ---------------------------------------------------------------------------
# Results
# ---------------------------------------------------------------------------


def normalise_results(
    df: pd.DataFrame,
    race_id: str,
    session: SessionType = SessionType.RACE,
    known_riders: Iterable[str] | None = None,
) -> list[RaceResult]:
    """Convert a results table into :class:`RaceResult` rows.

    Args:
        df: Table with columns ``rider_id``, ``position`` and ``status``,
            and optionally ``session`` (overrides *session* per row).
        race_id: Race the results belong to.
        session: Session used for rows without a ``session`` value.
        known_riders: When given, rows for other riders are dropped.

    Returns:
        Normalised results; for duplicated (rider, session) rows the last
        one wins.

    Raises:
        ValueError: If a required column is missing.
    """
    _require_columns(df, _RESULT_COLUMNS, "Results table")
    catalogue = set(known_riders) if known_riders is not None else None
    has_session = "session" in df.columns

    rows: dict[tuple[str, SessionType], RaceResult] = {}
    for record in df.to_dict(orient="records"):
        rider_raw = record.get("rider_id")
        if rider_raw is None or pd.isna(rider_raw) or not str(rider_raw).strip():
            logger.warning("Skipping result row without rider_id: %s", record)
            continue
        rider_id = str(rider_raw).strip()
        if catalogue is not None and rider_id not in catalogue:
            logger.warning("Rider not found in catalogue: %s", rider_id)
            continue

        row_session = session
        if has_session and not pd.isna(record.get("session")):
            try:
                row_session = SessionType(str(record["session"]).strip().upper())
            except ValueError:
                logger.warning(
                    "Unknown session %r for rider %s", record["session"], rider_id
                )
                continue

        position = _parse_position(record.get("position"))
        status = _parse_status(record.get("status"), position)
        if status is None:
            logger.warning(
                "Unknown status %r for rider %s", record.get("status"), rider_id
            )
            continue
        if status is ResultStatus.FINISHED and position is None:
            logger.warning("FINISHED without position for %s, recorded as DNF", rider_id)
            status = ResultStatus.DNF
        if status is not ResultStatus.FINISHED:
            position = None

        key = (rider_id, row_session)
        if key in rows:
            logger.warning(
                "Duplicate %s result for rider %s; keeping the last row",
                row_session.value,
                rider_id,
            )
        rows[key] = RaceResult(
            race_id=race_id,
            rider_id=rider_id,
            status=status,
            position=position,
            session=row_session,
        )

    return list(rows.values())


def load_results_csv(
    path: Path | str,
    race_id: str,
    session: SessionType = SessionType.RACE,
    known_riders: Iterable[str] | None = None,
) -> list[RaceResult]:
    """Read a results CSV file and normalise it.

    Raises:
        FileNotFoundError: If the file does not exist.
    """
    csv_path = Path(path)
    if not csv_path.exists():
        raise FileNotFoundError(f"Results file not found: {csv_path}")
    df = pd.read_csv(csv_path, dtype={"rider_id": str})
    return normalise_results(df, race_id, session, known_riders)


# ---------------------------------------------------------------------------
# Rider catalogue
# ---------------------------------------------------------------------------


def normalise_riders(df: pd.DataFrame) -> list[Rider]:
    """Convert a rider catalogue table into :class:`Rider` objects.

    Args:
        df: Table with columns ``rider_id``, ``name``, ``category`` and
            ``value``, and optionally ``rider_type`` and ``is_active``.

    Raises:
        ValueError: If a required column is missing or a row is invalid.
    """
    _require_columns(df, _RIDER_COLUMNS, "Rider table")
    riders: list[Rider] = []
    for idx, record in enumerate(df.to_dict(orient="records")):
        rider_type = record.get("rider_type")
        is_active = record.get("is_active")
        try:
            riders.append(
                Rider(
                    rider_id=str(record["rider_id"]).strip(),
                    name=str(record["name"]),
                    category=Category(str(record["category"]).strip().upper()),
                    value=int(record["value"]),
                    rider_type=(
                        RiderType(str(rider_type).strip().upper())
                        if rider_type is not None and not pd.isna(rider_type)
                        else RiderType.OFFICIAL
                    ),
                    is_active=_parse_flag(is_active),
                )
            )
        except ValueError as exc:
            raise ValueError(f"Rider row {idx}: {exc}") from exc
    return riders


def load_riders_csv(path: Path | str) -> list[Rider]:
    """Read a rider catalogue CSV file.

    Raises:
        FileNotFoundError: If the file does not exist.
    """
    csv_path = Path(path)
    if not csv_path.exists():
        raise FileNotFoundError(f"Rider file not found: {csv_path}")
    return normalise_riders(pd.read_csv(csv_path, dtype={"rider_id": str}))
