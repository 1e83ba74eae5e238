"""NYC Shootings Analysis: Population Loader

Reads the "New York City Population by Borough, 1950 - 2040" table: one row
per borough plus an ``NYC Total`` row, one column per decade year.  Only the
configured sample-year columns are kept, and the citywide total is excluded
before anything downstream sees it.
"""

import csv
import logging
import math
from collections import defaultdict
from pathlib import Path
from typing import Iterable

from config import POPULATION_BOROUGH_COLUMN, POPULATION_TOTAL_LABEL, SAMPLE_YEARS
from errors import SourceUnavailable
from models import Borough, PopulationSample

logger = logging.getLogger("shootings.population")


def _parse_count(raw: str) -> int | None:
    """Parse '2,465,326' / '2465326' / '2465326.0'; blank, junk, negative or non-finite is None."""
    value = (raw or "").strip().replace(",", "")
    if not value:
        return None
    try:
        count = float(value)
    except ValueError:
        return None
    if not math.isfinite(count) or count < 0:
        return None
    return int(round(count))


def parse_population_table(rows: Iterable[dict], sample_years: Iterable[int] = SAMPLE_YEARS,
                           source: str = "<memory>") -> tuple[list[PopulationSample], set[Borough]]:
    """Turn wide borough/decade rows into sparse PopulationSamples.

    Also returns every borough that has a row, so a borough whose cells are
    all blank is still known to the interpolator.
    """
    samples: list[PopulationSample] = []
    seen: set[Borough] = set()
    years = list(sample_years)
    header_checked = False

    for row in rows:
        row = {(k or "").strip(): v for k, v in row.items()}
        if not header_checked:
            if POPULATION_BOROUGH_COLUMN not in row:
                raise SourceUnavailable(source, f"missing column: {POPULATION_BOROUGH_COLUMN}")
            missing = [str(y) for y in years if str(y) not in row]
            if missing:
                raise SourceUnavailable(source, f"missing year column(s): {', '.join(missing)}")
            header_checked = True

        label = " ".join((row.get(POPULATION_BOROUGH_COLUMN) or "").split())
        if label.upper() == POPULATION_TOTAL_LABEL:
            continue
        borough = Borough.parse(label)
        if borough is None:
            logger.warning(f"Skipping population row with unknown borough {label!r}")
            continue

        seen.add(borough)
        for year in years:
            population = _parse_count(row.get(str(year), ""))
            if population is None:
                logger.warning(f"No {year} population for {borough.value}")
                continue
            samples.append(PopulationSample(borough=borough, year=year, population=population))

    return samples, seen


def parse_population_rows(rows: Iterable[dict], sample_years: Iterable[int] = SAMPLE_YEARS,
                          source: str = "<memory>") -> list[PopulationSample]:
    return parse_population_table(rows, sample_years, source)[0]


def read_population_table(path: str | Path,
                          sample_years: Iterable[int] = SAMPLE_YEARS) -> tuple[list[PopulationSample], set[Borough]]:
    """Read the borough population CSV from disk: (samples, boroughs with a row)."""
    try:
        with open(path, "r", encoding="utf-8-sig", newline="") as f:
            samples, seen = parse_population_table(csv.DictReader(f), sample_years, source=str(path))
    except OSError as e:
        raise SourceUnavailable(str(path), e.strerror or str(e)) from e
    if not samples:
        raise SourceUnavailable(str(path), "no borough population rows")

    logger.info(f"Loaded {len(samples)} population samples for {len(seen)} boroughs from {Path(path).name}")
    return samples, seen


def read_population_csv(path: str | Path, sample_years: Iterable[int] = SAMPLE_YEARS) -> list[PopulationSample]:
    """Read the borough population CSV from disk."""
    return read_population_table(path, sample_years)[0]


def samples_by_borough(samples: Iterable[PopulationSample]) -> dict[Borough, list[PopulationSample]]:
    grouped: dict[Borough, list[PopulationSample]] = defaultdict(list)
    for s in samples:
        grouped[s.borough].append(s)
    return dict(grouped)
