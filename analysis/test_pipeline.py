"""End-to-end tests: sources on disk → merged table → regressions → charts.

Run:  pytest analysis/test_pipeline.py
"""

import csv

import numpy as np
import pytest

import config
from config import Settings
from errors import InsufficientData, InsufficientSamples, SourceUnavailable, UnknownBorough
from main import main
from models import Borough, MergedRow
from pipeline import run_analysis, run_pipeline
from regression import fit_population_on_rate
from reporting import export_merged_csv, plot_all, render_regression, render_table

INCIDENT_HEADER = "INCIDENT_KEY,OCCUR_DATE,OCCUR_TIME,BORO,STATISTICAL_MURDER_FLAG,Latitude,Longitude\n"


def _write_incidents(path, rows):
    lines = [INCIDENT_HEADER]
    for i, (date_, boro, flag) in enumerate(rows):
        lines.append(f"{i},{date_},12:00:00,{boro},{flag},40.7,-73.9\n")
    path.write_text("".join(lines))
    return path


def _write_population(path, table):
    with open(path, "w", newline="") as f:
        writer = csv.writer(f)
        writer.writerow(["Age Group", "Borough", "2000", "2010", "2020", "2030"])
        writer.writerow(["Total Population", "NYC Total", "", "", "", ""])
        for borough, by_year in table.items():
            writer.writerow(["Total Population", f"    {borough}"] +
                            [by_year.get(y, "") for y in (2000, 2010, 2020, 2030)])
    return path


def _settings(tmp_path, incidents, population, **kw) -> Settings:
    return Settings(
        shootings_source=str(incidents),
        population_source=str(population),
        figures_dir=str(tmp_path / "figures"),
        **kw,
    )


# ═══════════════════════════════════════════════════════════════
# The Brooklyn 2015 scenario
# ═══════════════════════════════════════════════════════════════

def test_brooklyn_2015_midpoint(tmp_path):
    incidents = _write_incidents(tmp_path / "shootings.csv", [
        ("01/05/2015", "BROOKLYN", "true"),
        ("02/10/2015", "BROOKLYN", "false"),
    ])
    population = _write_population(tmp_path / "population.csv", {
        "Brooklyn": {2010: 2_500_000, 2020: 2_600_000},
    })

    result = run_pipeline(_settings(tmp_path, incidents, population))

    assert len(result.merged) == 1
    row = result.merged[0]
    assert (row.year, row.borough) == (2015, Borough.BROOKLYN)
    assert row.murder_count == 1
    assert row.shooting_count == 1
    assert row.population == 2_550_000
    assert row.homicide_rate == pytest.approx(1 / 2_550_000 * 100_000)
    assert round(row.homicide_rate, 4) == 0.0392


def test_bad_rows_do_not_abort(tmp_path):
    incidents = _write_incidents(tmp_path / "shootings.csv", [
        ("01/05/2015", "BROOKLYN", "true"),
        ("garbage", "BROOKLYN", "true"),
        ("01/06/2015", "ATLANTIS", "true"),
    ])
    population = _write_population(tmp_path / "population.csv", {
        "Brooklyn": {2010: 2_500_000, 2020: 2_600_000},
    })
    result = run_pipeline(_settings(tmp_path, incidents, population))

    assert result.stats.rows_dropped == 2
    assert result.merged[0].murder_count == 1


def test_borough_with_one_sample_aborts(tmp_path):
    incidents = _write_incidents(tmp_path / "shootings.csv", [("01/05/2015", "QUEENS", "true")])
    population = _write_population(tmp_path / "population.csv", {
        "Brooklyn": {2010: 2_500_000, 2020: 2_600_000},
        "Queens": {2010: 2_250_000},
    })
    with pytest.raises(InsufficientSamples, match="QUEENS"):
        run_pipeline(_settings(tmp_path, incidents, population))


def test_blank_population_row_aborts(tmp_path):
    incidents = _write_incidents(tmp_path / "shootings.csv", [("01/05/2015", "QUEENS", "true")])
    population = _write_population(tmp_path / "population.csv", {
        "Brooklyn": {2010: 2_500_000, 2020: 2_600_000},
        "Queens": {},
    })
    with pytest.raises(InsufficientSamples) as exc:
        run_pipeline(_settings(tmp_path, incidents, population))
    assert exc.value.borough == "QUEENS"
    assert exc.value.n_samples == 0


def test_incident_borough_missing_from_population_aborts(tmp_path):
    """No merged row may silently end up without a population."""
    incidents = _write_incidents(tmp_path / "shootings.csv", [
        ("01/05/2015", "BROOKLYN", "true"),
        ("01/05/2015", "BRONX", "false"),
    ])
    population = _write_population(tmp_path / "population.csv", {
        "Brooklyn": {2010: 2_500_000, 2020: 2_600_000},
    })
    with pytest.raises(InsufficientSamples, match="BRONX"):
        run_pipeline(_settings(tmp_path, incidents, population))


def test_missing_population_file_aborts(tmp_path):
    incidents = _write_incidents(tmp_path / "shootings.csv", [("01/05/2015", "QUEENS", "true")])
    with pytest.raises(SourceUnavailable):
        run_pipeline(_settings(tmp_path, incidents, tmp_path / "missing.csv"))


# ═══════════════════════════════════════════════════════════════
# Full analysis over a synthetic city
# ═══════════════════════════════════════════════════════════════

POPULATION = {
    "Bronx": {2000: 1_332_650, 2010: 1_385_108, 2020: 1_446_788, 2030: 1_518_998},
    "Brooklyn": {2000: 2_465_326, 2010: 2_552_911, 2020: 2_648_452, 2030: 2_754_009},
    "Manhattan": {2000: 1_537_195, 2010: 1_585_873, 2020: 1_638_281, 2030: 1_676_720},
    "Queens": {2000: 2_229_379, 2010: 2_250_002, 2020: 2_330_295, 2030: 2_373_551},
    "Staten Island": {2000: 443_728, 2010: 468_730, 2020: 487_155, 2030: 497_749},
}


def _synthetic_incidents(seed=7):
    rng = np.random.default_rng(seed)
    rows = []
    for year in range(2006, 2024):
        for boro in ("BRONX", "BROOKLYN", "MANHATTAN", "QUEENS", "STATEN ISLAND"):
            n_murders = int(rng.integers(1, 40))
            n_shootings = int(rng.integers(5, 120))
            rows += [(f"06/15/{year}", boro, "true")] * n_murders
            rows += [(f"07/04/{year}", boro, "false")] * n_shootings
    return rows


@pytest.fixture
def city(tmp_path):
    incidents = _write_incidents(tmp_path / "shootings.csv", _synthetic_incidents())
    population = _write_population(tmp_path / "population.csv", POPULATION)
    return _settings(tmp_path, incidents, population, regression_borough="brooklyn")


def test_run_analysis_produces_tables_models_and_charts(city):
    result = run_analysis(city)

    assert len(result.counts) == 18 * 5
    assert len(result.population) == 24 * 5
    assert len(result.merged) == 18 * 5
    assert all(r.homicide_rate is not None for r in result.merged)

    citywide, brooklyn = result.regressions
    assert citywide.n_obs == 90
    assert brooklyn.n_obs == 18
    assert "Brooklyn" in brooklyn.label
    assert 0.0 <= citywide.r_squared <= 1.0
    assert 0.0 <= brooklyn.slope_p_value <= 1.0

    assert len(result.figures) == 3
    for path in result.figures:
        assert path.exists() and path.stat().st_size > 0


def test_run_analysis_without_plots(city):
    result = run_analysis(city, plots=False)
    assert result.figures == []
    assert len(result.regressions) == 2


def test_cli_run_and_export(city, tmp_path, capsys):
    out_csv = tmp_path / "out" / "merged.csv"
    code = main([
        "run", "--no-plots",
        "--shootings", city.shootings_source,
        "--population", city.population_source,
        "--borough", "staten island",
        "--export", str(out_csv),
    ])
    assert code == 0
    printed = capsys.readouterr().out
    assert "Staten Island" in printed
    assert "R-squared" in printed

    with open(out_csv) as f:
        exported = list(csv.DictReader(f))
    assert len(exported) == 90
    assert exported[0]["borough"] == "BRONX"


def test_cli_reports_source_errors(tmp_path):
    code = main(["table", "--shootings", str(tmp_path / "nope.csv"),
                 "--population", str(tmp_path / "nope2.csv")])
    assert code == 1


def test_unknown_regression_borough_setting(city, monkeypatch):
    with pytest.raises(UnknownBorough):
        Settings(regression_borough="Hoboken")

    monkeypatch.setattr(config, "REGRESSION_BOROUGH", "Hoboken")
    code = main(["run", "--no-plots",
                 "--shootings", city.shootings_source,
                 "--population", city.population_source])
    assert code == 1


# ═══════════════════════════════════════════════════════════════
# Regression + reporting units
# ═══════════════════════════════════════════════════════════════

def _rows_on_a_line(n=20, seed=0, borough="QUEENS"):
    """population ≈ 2,000,000 + 50,000 × rate, with noise."""
    rng = np.random.default_rng(seed)
    rows = []
    for i in range(n):
        rate = 1.0 + i * 0.25
        pop = int(2_000_000 + 50_000 * rate + rng.normal(0, 5_000))
        murders = max(int(round(rate * pop / 100_000)), 1)
        rows.append(MergedRow(year=2000 + i, borough=borough, shooting_count=murders * 3,
                              murder_count=murders, population=pop, homicide_rate=rate))
    return rows


def test_regression_recovers_slope():
    summary = fit_population_on_rate(_rows_on_a_line())
    assert summary.n_obs == 20
    assert summary.slope == pytest.approx(50_000, rel=0.05)
    assert summary.intercept == pytest.approx(2_000_000, rel=0.01)
    assert summary.r_squared > 0.9
    assert summary.slope_p_value < 0.001
    assert "population" in summary.summary_text


def test_regression_single_borough_filters():
    rows = _rows_on_a_line(borough="QUEENS") + _rows_on_a_line(n=5, borough="BRONX")
    assert fit_population_on_rate(rows, "Queens").n_obs == 20
    assert fit_population_on_rate(rows, Borough.BRONX).n_obs == 5


def test_regression_needs_observations():
    rows = _rows_on_a_line(n=2)
    with pytest.raises(InsufficientData):
        fit_population_on_rate(rows)


def test_render_helpers():
    rows = _rows_on_a_line(n=3) + [MergedRow(year=2030, borough="BRONX", shooting_count=1, murder_count=0)]
    table = render_table(rows)
    assert "Queens" in table
    assert "NA" in table

    text = render_regression(fit_population_on_rate(_rows_on_a_line()))
    assert "Slope p-value" in text


def test_plot_all_and_export(tmp_path):
    rows = _rows_on_a_line(n=6) + _rows_on_a_line(n=6, borough="BRONX")
    paths = plot_all(rows, tmp_path / "figs")
    assert sorted(p.name for p in paths) == [
        "homicide_rate_by_year.png", "murders_by_year.png", "population_by_year.png",
    ]

    out = export_merged_csv(rows + [MergedRow(year=2031, borough="BRONX", shooting_count=0, murder_count=0)],
                            tmp_path / "merged.csv")
    with open(out) as f:
        last = list(csv.DictReader(f))[-1]
    assert last["population"] == ""
    assert last["homicide_rate"] == ""
