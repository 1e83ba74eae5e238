"""NYC Shootings Analysis: Pydantic Models"""

import re
from datetime import date
from enum import Enum
from typing import Annotated, Optional

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field


class Borough(str, Enum):
    MANHATTAN = "MANHATTAN"
    BRONX = "BRONX"
    BROOKLYN = "BROOKLYN"
    QUEENS = "QUEENS"
    STATEN_ISLAND = "STATEN ISLAND"

    @classmethod
    def parse(cls, label) -> Optional["Borough"]:
        """Normalise a free-form label ("  Staten  island") to a member, or None."""
        if isinstance(label, cls):
            return label
        if not isinstance(label, str):
            return None
        key = re.sub(r"\s+", " ", label).strip().upper()
        try:
            return cls(key)
        except ValueError:
            return None

    @property
    def display_name(self) -> str:
        return self.value.title()


def _coerce_borough(value):
    parsed = Borough.parse(value)
    if parsed is None:
        raise ValueError(f"unrecognised borough: {value!r}")
    return parsed


BoroughField = Annotated[Borough, BeforeValidator(_coerce_borough)]


class _Record(BaseModel):
    model_config = ConfigDict(frozen=True)


class IncidentRecord(_Record):
    occurrence_date: date
    borough: BoroughField
    is_murder: bool

    @property
    def year(self) -> int:
        return self.occurrence_date.year


class YearBoroughCounts(_Record):
    year: int
    borough: BoroughField
    shooting_count: int = Field(default=0, ge=0)  # non-murder shootings
    murder_count: int = Field(default=0, ge=0)

    @property
    def total(self) -> int:
        return self.shooting_count + self.murder_count


class PopulationSample(_Record):
    borough: BoroughField
    year: int
    population: int = Field(ge=0)


class AnnualPopulation(_Record):
    borough: BoroughField
    year: int
    population: int = Field(ge=0)


class MergedRow(_Record):
    year: int
    borough: BoroughField
    shooting_count: int = Field(ge=0)
    murder_count: int = Field(ge=0)
    population: int | None = None
    homicide_rate: float | None = None  # murders per 100k residents


class ReductionStats(_Record):
    rows_read: int = 0
    rows_kept: int = 0
    bad_date: int = 0
    bad_borough: int = 0
    bad_flag: int = 0

    @property
    def rows_dropped(self) -> int:
        return self.bad_date + self.bad_borough + self.bad_flag


class RegressionSummary(_Record):
    label: str
    n_obs: int
    intercept: float
    slope: float
    slope_p_value: float
    r_squared: float
    summary_text: str = ""
