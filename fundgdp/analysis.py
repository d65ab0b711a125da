"""
Ontario research funding vs. GDP growth analysis.

This module runs the statistical part of the report for each outlier
variant of the analysis table:
- OLS fit of GDP percent change on total Ontario research commitment:
    gdpChange = b + m * ontarioCommitment
  Slope, intercept, their t-test p-values and R^2 are reported.
- 95% percentile bootstrap interval for the slope m (rows resampled with
  replacement). If the interval contains 0, a linear relationship is not
  supported at that level.
- 95% percentile intervals for mean squared error over repeated random
  train/test splits (P(train) = 0.6), evaluated in-sample on the train rows
  and out-of-sample on the test rows.

One generator, seeded from the configuration, is threaded through every
resampling call in a fixed order so the whole report is reproducible.
"""

from __future__ import annotations

import logging
from typing import Dict, List

import numpy as np
import pandas as pd

from .config import AnalysisConfig
from .data_processing import AnalysisTables
from .schema import COLUMNS
from .stats.regression import fit_model, mean_squared_error
from .stats.resampling import (
    TEST,
    TRAIN,
    bootstrap_mse_ci,
    bootstrap_slope_ci,
    make_rng,
)

logger = logging.getLogger(__name__)

VARIANT_ALL = "All years"
VARIANT_FILTERED = "Low outlier removed"


def describe_table(table: pd.DataFrame) -> pd.DataFrame:
    """Descriptive statistics of funding and GDP change, one row per column."""
    cols = [COLUMNS.commitment, COLUMNS.gdp_change]
    if table.empty:
        return pd.DataFrame(
            columns=["count", "mean", "std", "min", "25%", "50%", "75%", "max"]
        )
    return table[cols].describe().T


def analyze_table(
    table: pd.DataFrame,
    label: str,
    config: AnalysisConfig | None = None,
    rng: np.random.Generator | None = None,
) -> Dict:
    """Fit the model and compute the slope and MSE intervals for one table.

    Args:
        table: Analysis table (``d`` or ``dfilt``).
        label: Variant name used in reports.
        config: Iteration count, split probability and confidence level.
        rng: Generator shared across variants; seeded from ``config.seed``
            when omitted.

    Returns:
        dict: ``label``, ``n``, ``model`` (:class:`RegressionModel`),
        ``mse_in_sample`` (MSE of the full-table fit on itself), and the
        :class:`ResamplingInterval` entries ``slope_ci``, ``mse_train_ci``
        and ``mse_test_ci``.

    Raises:
        FitError: If the table itself cannot be fitted.
    """
    config = config or AnalysisConfig()
    rng = rng if rng is not None else make_rng(config.seed)

    model = fit_model(table)
    logger.info(
        "%s: slope=%.4g (p=%.3g), R2=%.3f, n=%d",
        label,
        model.slope,
        model.p_slope,
        model.r2,
        model.n,
    )

    slope_ci = bootstrap_slope_ci(
        table,
        iterations=config.iterations,
        seed=rng,
        level=config.confidence_level,
    )
    mse_train_ci = bootstrap_mse_ci(
        table,
        iterations=config.iterations,
        train_prob=config.train_prob,
        seed=rng,
        evaluate=TRAIN,
        level=config.confidence_level,
    )
    mse_test_ci = bootstrap_mse_ci(
        table,
        iterations=config.iterations,
        train_prob=config.train_prob,
        seed=rng,
        evaluate=TEST,
        level=config.confidence_level,
    )

    return {
        "label": label,
        "n": int(len(table)),
        "table": table,
        "model": model,
        "mse_in_sample": mean_squared_error(model, table),
        "slope_ci": slope_ci,
        "mse_train_ci": mse_train_ci,
        "mse_test_ci": mse_test_ci,
    }


def run_analysis(
    tables: AnalysisTables, config: AnalysisConfig | None = None
) -> List[Dict]:
    """Analyze the full table and the low-outlier-trimmed table.

    Returns:
        list[dict]: One :func:`analyze_table` result per variant, full table
        first.
    """
    config = config or AnalysisConfig()
    rng = make_rng(config.seed)

    results = []
    for label, table in (
        (VARIANT_ALL, tables.joined),
        (VARIANT_FILTERED, tables.filtered),
    ):
        results.append(analyze_table(table, label, config=config, rng=rng))
    return results
