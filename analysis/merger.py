"""NYC Shootings Analysis: Merger

Left-joins per-(year, borough) incident counts with interpolated population
and computes murders per 100,000 residents.  Only (year, borough) pairs that
appear in the incident data produce rows.  A pair with no population (or a
population of 0) keeps ``population``/``homicide_rate`` as None instead of
failing the run.
"""

import logging
from collections import defaultdict
from typing import Iterable

from config import RATE_PER
from errors import UnknownBorough
from models import AnnualPopulation, Borough, MergedRow, YearBoroughCounts

logger = logging.getLogger("shootings.merger")


def homicide_rate(murders: int, population: int | None) -> float | None:
    """Murders per 100k residents; None when population is missing or zero."""
    if not population or population <= 0:
        return None
    return murders / population * RATE_PER


def _join_key(year, borough) -> tuple[int, Borough | None]:
    return int(year), Borough.parse(borough)


def merge_counts_with_population(counts: Iterable[YearBoroughCounts],
                                 population: Iterable[AnnualPopulation]) -> list[MergedRow]:
    """Left join ``counts`` ⋈ ``population`` on (year, borough)."""
    pop_lookup: dict[tuple[int, Borough | None], int] = {}
    for p in population:
        pop_lookup[_join_key(p.year, p.borough)] = p.population

    merged: list[MergedRow] = []
    unmatched: list[tuple[int, str]] = []
    for c in counts:
        key = _join_key(c.year, c.borough)
        pop = pop_lookup.get(key)
        if pop is None:
            unmatched.append((c.year, c.borough.value))
        merged.append(MergedRow(
            year=c.year,
            borough=c.borough,
            shooting_count=c.shooting_count,
            murder_count=c.murder_count,
            population=pop,
            homicide_rate=homicide_rate(c.murder_count, pop),
        ))

    if unmatched:
        years = sorted({y for y, _ in unmatched})
        logger.warning(
            f"{len(unmatched)} (year, borough) pair(s) have no population estimate; "
            f"homicide rate left missing for years {years}"
        )
    logger.info(f"Merged {len(merged)} borough-year rows")
    return merged


def model_inputs(rows: Iterable[MergedRow], borough: Borough | str | None = None) -> list[tuple[float, int]]:
    """(homicide_rate, population) pairs with both values present.

    Restricted to one borough when ``borough`` is given.
    """
    wanted = Borough.parse(borough) if borough is not None else None
    if borough is not None and wanted is None:
        raise UnknownBorough(str(borough))
    return [
        (r.homicide_rate, r.population)
        for r in rows
        if r.homicide_rate is not None
        and r.population is not None
        and (wanted is None or r.borough == wanted)
    ]


def citywide_by_year(rows: Iterable[MergedRow]) -> list[dict]:
    """Per-year citywide totals with the resulting citywide homicide rate.

    Population is summed only over boroughs that have an estimate, so a year
    with any borough missing population gets ``population=None``.
    """
    totals: dict[int, dict] = defaultdict(lambda: {
        "shootings": 0, "murders": 0, "population": 0, "complete": True,
    })
    for r in rows:
        t = totals[r.year]
        t["shootings"] += r.shooting_count
        t["murders"] += r.murder_count
        if r.population is None:
            t["complete"] = False
        else:
            t["population"] += r.population

    result = []
    for year in sorted(totals):
        t = totals[year]
        pop = t["population"] if t["complete"] else None
        result.append({
            "year": year,
            "shootings": t["shootings"],
            "murders": t["murders"],
            "population": pop,
            "homicide_rate": homicide_rate(t["murders"], pop),
        })
    return result
