"""NYC Shootings Analysis: OLS regressions

Fits ``population ~ homicide_rate`` (with intercept) over merged
borough-year rows, either pooled citywide or restricted to one borough.
"""

import logging
from typing import Iterable

import numpy as np
import statsmodels.api as sm

from errors import InsufficientData
from merger import model_inputs
from models import Borough, MergedRow, RegressionSummary

logger = logging.getLogger("shootings.regression")

MIN_OBSERVATIONS = 3


def fit_population_on_rate(rows: Iterable[MergedRow], borough: Borough | str | None = None) -> RegressionSummary:
    """OLS fit of population on homicide rate, citywide or for one borough."""
    pairs = model_inputs(rows, borough)
    label = "population ~ homicide_rate"
    label += f" ({Borough.parse(borough).display_name})" if borough is not None else " (citywide)"

    if len(pairs) < MIN_OBSERVATIONS:
        raise InsufficientData(label, len(pairs))

    rate = np.array([p[0] for p in pairs], dtype=float)
    population = np.array([p[1] for p in pairs], dtype=float)

    X = sm.add_constant(rate, has_constant="add")
    result = sm.OLS(population, X).fit()

    summary = RegressionSummary(
        label=label,
        n_obs=int(result.nobs),
        intercept=float(result.params[0]),
        slope=float(result.params[1]),
        slope_p_value=float(result.pvalues[1]),
        r_squared=float(result.rsquared),
        summary_text=str(result.summary(yname="population", xname=["const", "homicide_rate"])),
    )
    logger.info(
        f"{label}: slope={summary.slope:,.1f} p={summary.slope_p_value:.4g} "
        f"R²={summary.r_squared:.3f} (n={summary.n_obs})"
    )
    return summary
