"""NYC Shootings Analysis: command-line entry point

Usage:
  python analysis/main.py                                # full analysis (same as `run`)
  python analysis/main.py run --borough "staten island"  # single-borough regression target
  python analysis/main.py run --no-plots --export out/merged.csv
  python analysis/main.py run --shootings datasets/nypd_shooting_incidents.csv
  python analysis/main.py table                          # merged table only
  python analysis/main.py population                     # interpolated population only
"""

import argparse
import logging
import sys

from config import LOG_LEVEL, Settings
from errors import AnalysisError
from merger import citywide_by_year
from models import Borough
from pipeline import run_analysis, run_pipeline
from population_interpolator import interpolate_population
from population_loader import read_population_table
from reporting import (
    export_merged_csv, render_citywide, render_population, render_regression, render_table,
)

logger = logging.getLogger("shootings")


def _borough_arg(value: str) -> str:
    borough = Borough.parse(value)
    if borough is None:
        choices = ", ".join(b.value for b in Borough)
        raise argparse.ArgumentTypeError(f"unknown borough {value!r} (choose from {choices})")
    return borough.value


def _settings(args) -> Settings:
    return Settings.from_env(
        shootings_source=getattr(args, "shootings", None),
        population_source=getattr(args, "population", None),
        figures_dir=getattr(args, "figures_dir", None),
        regression_borough=getattr(args, "borough", None),
    )


def cmd_run(args):
    result = run_analysis(_settings(args), plots=not args.no_plots)

    print(render_table(result.merged))
    print()
    print(render_citywide(citywide_by_year(result.merged)))
    for summary in result.regressions:
        print()
        print(render_regression(summary))
        if args.verbose:
            print(summary.summary_text)

    if result.figures:
        print("\nCharts:")
        for path in result.figures:
            print(f"  {path}")
    if args.export:
        export_merged_csv(result.merged, args.export)


def cmd_table(args):
    result = run_pipeline(_settings(args))
    print(render_table(result.merged))
    if args.export:
        export_merged_csv(result.merged, args.export)


def cmd_population(args):
    settings = _settings(args)
    samples, listed = read_population_table(settings.population_source, settings.sample_years)
    print(render_population(interpolate_population(samples, settings.year_range, listed)))


def _add_source_args(p: argparse.ArgumentParser):
    p.add_argument("--shootings", help="Incident CSV URL or local path")
    p.add_argument("--population", help="Borough population CSV path")


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(
        description="NYC shooting homicide rate vs. borough population",
    )
    parser.add_argument("--log-level", default=LOG_LEVEL, help="Logging level (default: %(default)s)")
    sub = parser.add_subparsers(dest="command")

    p_run = sub.add_parser("run", help="Full analysis: table, regressions, charts")
    _add_source_args(p_run)
    p_run.add_argument("--borough", type=_borough_arg, help="Borough for the single-borough regression")
    p_run.add_argument("--figures-dir", help="Where to write the PNG charts")
    p_run.add_argument("--no-plots", action="store_true", help="Skip chart rendering")
    p_run.add_argument("--export", help="Also write the merged table to this CSV path")
    p_run.add_argument("-v", "--verbose", action="store_true", help="Print full OLS summaries")
    p_run.set_defaults(func=cmd_run)

    p_tab = sub.add_parser("table", help="Print the merged borough-year table")
    _add_source_args(p_tab)
    p_tab.add_argument("--export", help="Also write the table to this CSV path")
    p_tab.set_defaults(func=cmd_table)

    p_pop = sub.add_parser("population", help="Print the interpolated population table")
    p_pop.add_argument("--population", help="Borough population CSV path")
    p_pop.set_defaults(func=cmd_population)

    args = parser.parse_args(argv)
    if not args.command:
        args = parser.parse_args([*(argv if argv is not None else sys.argv[1:]), "run"])

    logging.basicConfig(
        level=args.log_level.upper(),
        format="%(asctime)s [%(levelname)s] %(message)s",
        datefmt="%H:%M:%S",
    )

    try:
        args.func(args)
    except AnalysisError as e:
        logger.error(str(e))
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
