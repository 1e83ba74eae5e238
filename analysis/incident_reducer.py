"""NYC Shootings Analysis: Incident Reducer

Turns raw incident rows into typed IncidentRecords and aggregates them into
one YearBoroughCounts per (year, borough).  Rows with an unparseable date,
an unknown borough or an unreadable murder flag are dropped and counted;
they never abort the run.
"""

import logging
from collections import defaultdict
from datetime import date, datetime
from typing import Iterable

from config import COL_BOROUGH, COL_DATE, COL_MURDER_FLAG
from errors import MalformedRecord
from models import Borough, IncidentRecord, ReductionStats, YearBoroughCounts

logger = logging.getLogger("shootings.reducer")

_TRUE_FLAGS = {"true", "t", "y", "yes", "1"}
_FALSE_FLAGS = {"false", "f", "n", "no", "0"}


def parse_occurrence_date(raw: str) -> date | None:
    """Parse an ``MM/DD/YYYY`` date; anything else yields None."""
    if not raw or not raw.strip():
        return None
    raw = raw.strip().strip('"')
    try:
        return datetime.strptime(raw, "%m/%d/%Y").date()
    except ValueError:
        return None


def parse_murder_flag(raw) -> bool | None:
    if isinstance(raw, bool):
        return raw
    value = str(raw or "").strip().lower()
    if value in _TRUE_FLAGS:
        return True
    if value in _FALSE_FLAGS:
        return False
    return None


def parse_incident(row: dict) -> IncidentRecord:
    """Build an IncidentRecord from a raw row, or raise MalformedRecord."""
    occurred = parse_occurrence_date(row.get(COL_DATE, ""))
    if occurred is None:
        raise MalformedRecord("bad_date", row)

    borough = Borough.parse(row.get(COL_BOROUGH, ""))
    if borough is None:
        raise MalformedRecord("bad_borough", row)

    is_murder = parse_murder_flag(row.get(COL_MURDER_FLAG, ""))
    if is_murder is None:
        raise MalformedRecord("bad_flag", row)

    return IncidentRecord(occurrence_date=occurred, borough=borough, is_murder=is_murder)


def parse_incidents(rows: Iterable[dict]) -> tuple[list[IncidentRecord], ReductionStats]:
    """Parse every row, dropping malformed ones. Returns (records, stats)."""
    records: list[IncidentRecord] = []
    dropped: dict[str, int] = defaultdict(int)
    n_read = 0

    for row in rows:
        n_read += 1
        try:
            records.append(parse_incident(row))
        except MalformedRecord as e:
            dropped[e.reason] += 1
            logger.debug(f"Dropping incident row ({e.reason}): {row.get(COL_DATE)!r} {row.get(COL_BOROUGH)!r}")

    stats = ReductionStats(
        rows_read=n_read,
        rows_kept=len(records),
        bad_date=dropped["bad_date"],
        bad_borough=dropped["bad_borough"],
        bad_flag=dropped["bad_flag"],
    )
    if stats.rows_dropped:
        logger.warning(
            f"Dropped {stats.rows_dropped:,} of {n_read:,} incident rows "
            f"(bad_date={stats.bad_date}, bad_borough={stats.bad_borough}, bad_flag={stats.bad_flag})"
        )
    else:
        logger.info(f"Parsed {n_read:,} incident rows, none dropped")
    return records, stats


def reduce_incidents(records: Iterable[IncidentRecord]) -> list[YearBoroughCounts]:
    """Group by (year, borough, is_murder) and pivot the flag into two counts.

    Output is sorted by (year, borough); each (year, borough) appears once.
    """
    counts: dict[tuple[int, Borough, bool], int] = defaultdict(int)
    for rec in records:
        counts[(rec.year, rec.borough, rec.is_murder)] += 1

    keys = sorted({(year, borough) for year, borough, _ in counts}, key=lambda k: (k[0], k[1].value))
    return [
        YearBoroughCounts(
            year=year,
            borough=borough,
            shooting_count=counts.get((year, borough, False), 0),
            murder_count=counts.get((year, borough, True), 0),
        )
        for year, borough in keys
    ]
