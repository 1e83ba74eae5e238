"""NYC Shootings Analysis: Population Interpolator

Expands the sparse decade samples (2000, 2010, 2020, 2030) into one
population estimate per borough per year.

Piecewise-linear between knots; outside the sampled range the nearest
boundary sample is returned unchanged (constant extrapolation, which is
what ``numpy.interp`` does by default).  Estimates are rounded half-to-even
(``numpy.rint``), so 0.5 → 0 and 1.5 → 2.
"""

import logging
from typing import Iterable

import numpy as np

from config import YEAR_RANGE
from errors import ConflictingSamples, InsufficientSamples
from models import AnnualPopulation, Borough, PopulationSample
from population_loader import samples_by_borough

logger = logging.getLogger("shootings.interpolator")


def _knots(borough: Borough, samples: Iterable[PopulationSample]) -> tuple[np.ndarray, np.ndarray]:
    """Sorted, de-duplicated (years, populations) arrays for one borough."""
    by_year: dict[int, int] = {}
    for s in samples:
        if s.year in by_year and by_year[s.year] != s.population:
            raise ConflictingSamples(borough.value, s.year)
        by_year[s.year] = s.population

    if len(by_year) < 2:
        raise InsufficientSamples(borough.value, len(by_year))

    years = sorted(by_year)
    return (
        np.array(years, dtype=float),
        np.array([by_year[y] for y in years], dtype=float),
    )


def interpolate_borough(borough: Borough, samples: Iterable[PopulationSample],
                        years: Iterable[int]) -> list[AnnualPopulation]:
    """Interpolated populations for one borough at each of ``years``."""
    xp, fp = _knots(borough, samples)
    query = np.array(list(years), dtype=float)
    estimates = np.rint(np.interp(query, xp, fp))
    return [
        AnnualPopulation(borough=borough, year=int(y), population=int(p))
        for y, p in zip(query, estimates)
    ]


def interpolate_population(samples: Iterable[PopulationSample],
                           year_range: tuple[int, int] = YEAR_RANGE,
                           boroughs: Iterable[Borough] = ()) -> list[AnnualPopulation]:
    """One AnnualPopulation per (borough, year) for every borough in ``samples``
    or ``boroughs``.

    Raises InsufficientSamples naming the first borough with fewer than two
    distinct sample years. A borough listed in ``boroughs`` with no samples at
    all counts as zero.
    """
    start, end = year_range
    years = range(start, end + 1)
    grouped = samples_by_borough(samples)
    wanted = set(grouped) | set(boroughs)

    result: list[AnnualPopulation] = []
    for borough in sorted(wanted, key=lambda b: b.value):
        result.extend(interpolate_borough(borough, grouped.get(borough, []), years))

    logger.info(f"Interpolated population for {len(wanted)} boroughs over {start}-{end} ({len(result)} rows)")
    return result
