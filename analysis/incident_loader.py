"""NYC Shootings Analysis: Incident Loader

Fetches the NYPD Shooting Incident (Historic) CSV, either from NYC Open Data
or from a local snapshot written by scripts/download_sources.py, and streams
its rows as dicts with UPPERCASE-normalised column names.

Columns beyond OCCUR_DATE, BORO and STATISTICAL_MURDER_FLAG (coordinates,
jurisdiction codes, location descriptors, perpetrator/victim fields) are
carried through untouched and ignored by the reducer.
"""

import csv
import io
import logging
from pathlib import Path
from typing import Iterator

import httpx

from config import HTTP_TIMEOUT, REQUIRED_INCIDENT_COLUMNS
from errors import SourceUnavailable

logger = logging.getLogger("shootings.loader")


def _is_url(source: str) -> bool:
    return source.lower().startswith(("http://", "https://"))


def fetch_incident_csv(url: str, client: httpx.Client | None = None,
                       timeout: float = HTTP_TIMEOUT) -> str:
    """Download the incident CSV in a single request. No retry."""
    logger.info(f"Fetching shooting incidents from {url}")
    try:
        if client is None:
            with httpx.Client(timeout=timeout, follow_redirects=True) as owned:
                r = owned.get(url)
        else:
            r = client.get(url)
        r.raise_for_status()
    except httpx.HTTPStatusError as e:
        raise SourceUnavailable(url, f"HTTP {e.response.status_code}") from e
    except httpx.HTTPError as e:
        raise SourceUnavailable(url, str(e) or type(e).__name__) from e

    text = r.text
    logger.info(f"Fetched {len(text) / 1024:.0f} KB of incident data")
    return text


def read_incident_file(path: str | Path) -> str:
    """Read a locally stored incident CSV."""
    try:
        with open(path, "r", encoding="utf-8", errors="replace", newline="") as f:
            return f.read()
    except OSError as e:
        raise SourceUnavailable(str(path), e.strerror or str(e)) from e


def iter_incident_rows(text: str, source: str = "<memory>") -> Iterator[dict]:
    """Stream CSV rows with UPPERCASE-normalised column names.

    Raises SourceUnavailable if the header lacks a required column.
    """
    reader = csv.DictReader(io.StringIO(text))
    header = [(h or "").strip().upper() for h in (reader.fieldnames or [])]
    missing = [c for c in REQUIRED_INCIDENT_COLUMNS if c not in header]
    if missing:
        raise SourceUnavailable(source, f"missing column(s): {', '.join(missing)}")

    for row in reader:
        yield {(k or "").strip().upper(): (v or "") for k, v in row.items()}


def load_incident_rows(source: str, client: httpx.Client | None = None,
                       timeout: float = HTTP_TIMEOUT) -> list[dict]:
    """Load raw incident rows from a URL or a local file path."""
    if _is_url(source):
        text = fetch_incident_csv(source, client=client, timeout=timeout)
    else:
        logger.info(f"Reading shooting incidents from {source}")
        text = read_incident_file(source)

    rows = list(iter_incident_rows(text, source))
    logger.info(f"Loaded {len(rows):,} incident rows")
    return rows
