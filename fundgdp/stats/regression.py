"""Provide the ordinary least-squares fit used by the report and resampling.

This module supports:
- the single-predictor GDP-change-on-funding fit with intercept,
- t-based significance of the slope and intercept, and
- mean squared prediction error of a fitted line on any table.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Dict

import numpy as np
import pandas as pd
from scipy.stats import t as student_t

from ..schema import COLUMNS


class FitError(ValueError):
    """Raised when a regression cannot be fitted to the supplied data."""


@dataclass(frozen=True, eq=False)
class RegressionModel:
    """Result of one OLS fit of ``y = intercept + slope * x``.

    Instances are never updated; every bootstrap or cross-validation
    iteration builds its own.
    """

    slope: float
    intercept: float
    se_slope: float
    se_intercept: float
    t_slope: float
    p_slope: float
    p_intercept: float
    r2: float
    residuals: np.ndarray
    fitted: np.ndarray
    n: int
    dof: int
    sigma2: float

    def predict(self, x) -> np.ndarray:
        """Predicted response for predictor values ``x``."""
        return self.intercept + self.slope * np.asarray(x, dtype=float)

    def as_dict(self) -> Dict[str, float]:
        return {
            "slope": self.slope,
            "intercept": self.intercept,
            "se_slope": self.se_slope,
            "se_intercept": self.se_intercept,
            "t_slope": self.t_slope,
            "p_slope": self.p_slope,
            "p_intercept": self.p_intercept,
            "r2": self.r2,
            "n": self.n,
            "dof": self.dof,
        }


def _two_sided_p(estimate: float, se: float, dof: int) -> tuple[float, float]:
    if dof <= 0 or not math.isfinite(se):
        return math.nan, math.nan
    if se > 0:
        t_stat = estimate / se
        return float(t_stat), float(2.0 * student_t.sf(abs(t_stat), dof))
    # Zero residual variance: the line passes through every point.
    if estimate != 0:
        return math.copysign(math.inf, estimate), 0.0
    return 0.0, 1.0


def linear_regression(x, y, min_points: int = 3) -> RegressionModel:
    """Fit an ordinary least-squares straight line to finite data pairs.

    Args:
        x (array-like): Predictor values.
        y (array-like): Response values.
        min_points (int, optional): Minimum number of finite pairs required.
            Defaults to ``3`` so the slope test has at least one degree of
            freedom.

    Returns:
        RegressionModel: Coefficients, standard errors, two-sided t-test
        p-values, R², residuals and fitted values.

    Raises:
        FitError: If there are fewer than ``min_points`` finite pairs or the
            predictor has zero variance.

    Note:
        A constant response is still fitted (slope 0) but its R² is NaN,
        because the total sum of squares is zero.
    """
    if min_points < 2:
        raise ValueError("min_points must be >= 2")

    x_arr = np.asarray(x, dtype=float)
    y_arr = np.asarray(y, dtype=float)
    if x_arr.shape != y_arr.shape:
        raise FitError(f"x and y lengths differ: {x_arr.shape} vs {y_arr.shape}")
    mask = np.isfinite(x_arr) & np.isfinite(y_arr)
    x_arr = x_arr[mask]
    y_arr = y_arr[mask]
    n = int(len(x_arr))
    if n < min_points:
        raise FitError(
            f"Insufficient data for regression: {n} rows, need at least {min_points}."
        )
    # Exact comparison; the mean of identical floats can drift off the value.
    if np.ptp(x_arr) == 0:
        raise FitError("Predictor has zero variance; slope is undefined.")

    xbar = float(np.mean(x_arr))
    ybar = float(np.mean(y_arr))
    ssxx = float(np.sum((x_arr - xbar) ** 2))
    ssxy = float(np.sum((x_arr - xbar) * (y_arr - ybar)))

    m = ssxy / ssxx
    b = ybar - m * xbar
    yhat = b + m * x_arr
    resid = y_arr - yhat

    sse = float(np.sum(resid**2))
    sst = float(np.sum((y_arr - ybar) ** 2))
    r2 = 1.0 - sse / sst if np.ptp(y_arr) > 0 and sst > 0 else math.nan

    dof = n - 2
    if dof > 0:
        sigma2 = sse / dof
        se_m = float(np.sqrt(sigma2 / ssxx))
        se_b = float(np.sqrt(sigma2 * (1.0 / n + (xbar**2) / ssxx)))
    else:
        sigma2 = math.nan
        se_m = math.nan
        se_b = math.nan

    yhat.setflags(write=False)
    resid.setflags(write=False)

    t_m, p_m = _two_sided_p(m, se_m, dof)
    _, p_b = _two_sided_p(b, se_b, dof)

    return RegressionModel(
        slope=float(m),
        intercept=float(b),
        se_slope=se_m,
        se_intercept=se_b,
        t_slope=t_m,
        p_slope=p_m,
        p_intercept=p_b,
        r2=float(r2),
        residuals=resid,
        fitted=yhat,
        n=n,
        dof=dof,
        sigma2=float(sigma2),
    )


def fit_model(
    table: pd.DataFrame,
    predictor: str = COLUMNS.commitment,
    response: str = COLUMNS.gdp_change,
    min_points: int = 3,
) -> RegressionModel:
    """Fit ``response ~ predictor`` on a table (GDP change on funding by default)."""
    missing = [c for c in (predictor, response) if c not in table.columns]
    if missing:
        raise FitError(f"Table is missing regression columns: {missing}")
    return linear_regression(
        table[predictor].to_numpy(dtype=float),
        table[response].to_numpy(dtype=float),
        min_points=min_points,
    )


def mean_squared_error(
    model: RegressionModel,
    table: pd.DataFrame,
    predictor: str = COLUMNS.commitment,
    response: str = COLUMNS.gdp_change,
) -> float:
    """Mean squared difference between ``model`` predictions and observed values.

    Raises:
        ValueError: If ``table`` has no rows.
    """
    if table.empty:
        raise ValueError("Cannot compute mean squared error on an empty table.")
    observed = table[response].to_numpy(dtype=float)
    predicted = model.predict(table[predictor].to_numpy(dtype=float))
    return float(np.mean((observed - predicted) ** 2))
