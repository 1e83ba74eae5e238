"""NYC Shootings Analysis: Configuration & Constants"""

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

from errors import UnknownBorough
from models import Borough

# Load .env from project root (one level up from analysis/)
_PROJECT_ROOT = Path(__file__).resolve().parent.parent
_env_path = _PROJECT_ROOT / ".env"
load_dotenv(_env_path)

DATASETS_DIR = _PROJECT_ROOT / "datasets"

# ── Sources ──
# NYPD Shooting Incident Data (Historic), NYC Open Data 833y-fsy8
SHOOTINGS_SOURCE = os.environ.get(
    "SHOOTINGS_SOURCE",
    "https://data.cityofnewyork.us/api/views/833y-fsy8/rows.csv?accessType=DOWNLOAD",
)
# New York City Population by Borough, 1950 - 2040, NYC Open Data xywu-7bv9
POPULATION_SOURCE_URL = os.environ.get(
    "POPULATION_SOURCE_URL",
    "https://data.cityofnewyork.us/api/views/xywu-7bv9/rows.csv?accessType=DOWNLOAD",
)
POPULATION_SOURCE = os.environ.get(
    "POPULATION_SOURCE",
    str(DATASETS_DIR / "nyc_population_by_borough.csv"),
)

# ── Output ──
FIGURES_DIR = os.environ.get("FIGURES_DIR", str(_PROJECT_ROOT / "figures"))
REGRESSION_BOROUGH = os.environ.get("REGRESSION_BOROUGH", "BROOKLYN")

# ── Runtime ──
HTTP_TIMEOUT = float(os.environ.get("HTTP_TIMEOUT", "120"))
LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")

# ── Analysis constants ──
YEAR_RANGE = (2000, 2023)                 # inclusive
SAMPLE_YEARS = (2000, 2010, 2020, 2030)   # decade columns in the population table
RATE_PER = 100_000

# Incident CSV columns the reducer depends on (UPPERCASE-normalised)
COL_DATE = "OCCUR_DATE"
COL_BOROUGH = "BORO"
COL_MURDER_FLAG = "STATISTICAL_MURDER_FLAG"
REQUIRED_INCIDENT_COLUMNS = (COL_DATE, COL_BOROUGH, COL_MURDER_FLAG)

# Population CSV
POPULATION_BOROUGH_COLUMN = "Borough"
POPULATION_TOTAL_LABEL = "NYC TOTAL"


@dataclass(frozen=True)
class Settings:
    """Everything a single run is parameterised by."""

    shootings_source: str = SHOOTINGS_SOURCE
    population_source: str = POPULATION_SOURCE
    figures_dir: str = FIGURES_DIR
    regression_borough: str = REGRESSION_BOROUGH
    http_timeout: float = HTTP_TIMEOUT
    year_range: tuple[int, int] = YEAR_RANGE
    sample_years: tuple[int, ...] = SAMPLE_YEARS

    def __post_init__(self):
        if Borough.parse(self.regression_borough) is None:
            raise UnknownBorough(self.regression_borough)

    @classmethod
    def from_env(cls, **overrides) -> "Settings":
        """Settings from the module constants, with ``None`` overrides ignored."""
        values = {
            "shootings_source": SHOOTINGS_SOURCE,
            "population_source": POPULATION_SOURCE,
            "figures_dir": FIGURES_DIR,
            "regression_borough": REGRESSION_BOROUGH,
            "http_timeout": HTTP_TIMEOUT,
        }
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)

    @property
    def years(self) -> range:
        start, end = self.year_range
        return range(start, end + 1)
