"""NYC Shootings Analysis: Charts & text report

Three line charts (population, murders, homicide rate), each with one line per
borough over year, plus console renderings of the merged table and the
regression summaries.
"""

import csv
import logging
from collections import defaultdict
from pathlib import Path
from typing import Iterable

import matplotlib

matplotlib.use("Agg")
import matplotlib.pyplot as plt  # noqa: E402

from models import MergedRow, RegressionSummary  # noqa: E402

logger = logging.getLogger("shootings.report")


def _series(rows: Iterable[MergedRow], field: str) -> dict[str, tuple[list[int], list[float]]]:
    """borough → (years, values), skipping rows where ``field`` is missing."""
    points: dict[str, list[tuple[int, float]]] = defaultdict(list)
    for r in rows:
        value = getattr(r, field)
        if value is None:
            continue
        points[r.borough.display_name].append((r.year, value))

    series = {}
    for name in sorted(points):
        pts = sorted(points[name])
        series[name] = ([p[0] for p in pts], [p[1] for p in pts])
    return series


def _line_chart(rows: Iterable[MergedRow], field: str, ylabel: str, title: str,
                out_path: Path) -> Path:
    fig, ax = plt.subplots(figsize=(12, 5))
    for name, (years, values) in _series(rows, field).items():
        ax.plot(years, values, marker="o", linestyle="-", label=name)

    ax.set_xlabel("Year")
    ax.set_ylabel(ylabel)
    ax.set_title(title)
    ax.grid(True)
    ax.legend(title="Borough")
    fig.tight_layout()

    out_path.parent.mkdir(parents=True, exist_ok=True)
    fig.savefig(out_path, dpi=120)
    plt.close(fig)
    logger.info(f"Wrote {out_path}")
    return out_path


def plot_population(rows: list[MergedRow], figures_dir: str | Path) -> Path:
    return _line_chart(rows, "population", "Population", "Population by Year",
                       Path(figures_dir) / "population_by_year.png")


def plot_murders(rows: list[MergedRow], figures_dir: str | Path) -> Path:
    return _line_chart(rows, "murder_count", "Murders", "Shooting Murders by Year",
                       Path(figures_dir) / "murders_by_year.png")


def plot_homicide_rate(rows: list[MergedRow], figures_dir: str | Path) -> Path:
    return _line_chart(rows, "homicide_rate", "Murders per 100,000 residents",
                       "Homicide Rate by Year", Path(figures_dir) / "homicide_rate_by_year.png")


def plot_all(rows: list[MergedRow], figures_dir: str | Path) -> list[Path]:
    return [
        plot_population(rows, figures_dir),
        plot_murders(rows, figures_dir),
        plot_homicide_rate(rows, figures_dir),
    ]


# ── Text output ──────────────────────────────────────────────────


def _fmt(value, fmt: str) -> str:
    return "NA" if value is None else format(value, fmt)


def render_table(rows: Iterable[MergedRow]) -> str:
    lines = [f"{'Year':>4}  {'Borough':<14}{'Shootings':>10}{'Murders':>9}{'Population':>13}{'Rate/100k':>11}"]
    lines.append("-" * len(lines[0]))
    for r in rows:
        lines.append(
            f"{r.year:>4}  {r.borough.display_name:<14}{r.shooting_count:>10}{r.murder_count:>9}"
            f"{_fmt(r.population, ',d'):>13}{_fmt(r.homicide_rate, '.3f'):>11}"
        )
    return "\n".join(lines)


def render_citywide(totals: Iterable[dict]) -> str:
    """Render ``merger.citywide_by_year`` output."""
    lines = [f"{'Year':>4}  {'Shootings':>10}{'Murders':>9}{'Population':>13}{'Rate/100k':>11}"]
    lines.append("-" * len(lines[0]))
    for t in totals:
        lines.append(
            f"{t['year']:>4}  {t['shootings']:>10}{t['murders']:>9}"
            f"{_fmt(t['population'], ',d'):>13}{_fmt(t['homicide_rate'], '.3f'):>11}"
        )
    return "\n".join(lines)


def render_population(population: Iterable) -> str:
    lines = [f"{'Year':>4}  {'Borough':<14}{'Population':>13}", "-" * 31]
    for p in population:
        lines.append(f"{p.year:>4}  {p.borough.display_name:<14}{p.population:>13,d}")
    return "\n".join(lines)


def render_regression(summary: RegressionSummary) -> str:
    return "\n".join([
        "=" * 70,
        f"  {summary.label}",
        "=" * 70,
        f"  Observations:      {summary.n_obs}",
        f"  Intercept:         {summary.intercept:,.2f}",
        f"  Slope:             {summary.slope:,.2f}",
        f"  Slope p-value:     {summary.slope_p_value:.4g}",
        f"  R-squared:         {summary.r_squared:.4f}",
    ])


def export_merged_csv(rows: Iterable[MergedRow], path: str | Path) -> Path:
    """Write the merged table as CSV; missing values are empty cells."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    fields = ["year", "borough", "shooting_count", "murder_count", "population", "homicide_rate"]
    with open(path, "w", newline="") as f:
        writer = csv.DictWriter(f, fieldnames=fields)
        writer.writeheader()
        for r in rows:
            record = r.model_dump(mode="json")
            writer.writerow({k: ("" if record[k] is None else record[k]) for k in fields})
    logger.info(f"Exported merged table to {path}")
    return path
