"""NYC Shootings Analysis: Pipeline

Incident Loader → Incident Reducer ┐
                                   ├→ Merger → charts + regressions
Population Loader → Interpolator ──┘

Each stage is a pure function of the previous stage's output; nothing is
mutated in place.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path

import httpx

from config import Settings
from incident_loader import load_incident_rows
from incident_reducer import parse_incidents, reduce_incidents
from merger import merge_counts_with_population
from models import (
    AnnualPopulation, MergedRow, PopulationSample,
    ReductionStats, RegressionSummary, YearBoroughCounts,
)
from population_interpolator import interpolate_population
from population_loader import read_population_table
from regression import fit_population_on_rate
from reporting import plot_all

logger = logging.getLogger("shootings.pipeline")


@dataclass(frozen=True)
class AnalysisResult:
    counts: list[YearBoroughCounts]
    samples: list[PopulationSample]
    population: list[AnnualPopulation]
    merged: list[MergedRow]
    stats: ReductionStats
    regressions: list[RegressionSummary] = field(default_factory=list)
    figures: list[Path] = field(default_factory=list)


def run_pipeline(settings: Settings, client: httpx.Client | None = None) -> AnalysisResult:
    """Load both sources, reduce, interpolate and merge. No charts, no models."""
    rows = load_incident_rows(settings.shootings_source, client=client, timeout=settings.http_timeout)
    records, stats = parse_incidents(rows)
    counts = reduce_incidents(records)
    logger.info(f"Reduced {stats.rows_kept:,} incidents to {len(counts)} borough-year counts")

    samples, listed = read_population_table(settings.population_source, settings.sample_years)
    # Every borough with incidents or a population row must be interpolable
    required = listed | {c.borough for c in counts}
    population = interpolate_population(samples, settings.year_range, required)

    merged = merge_counts_with_population(counts, population)
    return AnalysisResult(counts=counts, samples=samples, population=population,
                          merged=merged, stats=stats)


def run_analysis(settings: Settings, client: httpx.Client | None = None,
                 plots: bool = True) -> AnalysisResult:
    """Full run: pipeline, both regressions and (optionally) the three charts."""
    base = run_pipeline(settings, client=client)

    regressions = [
        fit_population_on_rate(base.merged),
        fit_population_on_rate(base.merged, settings.regression_borough),
    ]
    figures = plot_all(base.merged, settings.figures_dir) if plots else []

    return AnalysisResult(
        counts=base.counts, samples=base.samples, population=base.population,
        merged=base.merged, stats=base.stats,
        regressions=regressions, figures=figures,
    )
