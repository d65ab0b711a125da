"""Bootstrap and repeated train/test resampling for the funding/GDP fit.

Both procedures draw from one explicit :class:`numpy.random.Generator` and
consume a fixed number of draws per iteration, so a given seed reproduces the
same interval exactly even when some iterations are skipped.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Iterator

import numpy as np
import pandas as pd

from ..schema import COLUMNS
from .regression import FitError, fit_model, mean_squared_error

logger = logging.getLogger(__name__)

TRAIN = "train"
TEST = "test"


class ResamplingError(ValueError):
    """Raised when a resampling procedure cannot produce an interval."""


@dataclass(frozen=True, eq=False)
class ResamplingInterval:
    """Percentile interval from a resampled statistic.

    ``estimates`` holds one value per iteration, NaN where the iteration was
    skipped. Unpacks as ``lower, upper = interval``.
    """

    lower: float
    upper: float
    level: float
    estimates: np.ndarray
    n_valid: int
    n_skipped: int

    def __iter__(self) -> Iterator[float]:
        yield self.lower
        yield self.upper

    @property
    def width(self) -> float:
        return self.upper - self.lower

    def contains(self, value: float) -> bool:
        """True when ``value`` lies inside the closed interval.

        For a slope interval, ``contains(0.0)`` means the hypothesis of no
        linear relationship cannot be rejected at ``level``.
        """
        return self.lower <= value <= self.upper


def make_rng(seed=None) -> np.random.Generator:
    """Return a generator for ``seed``; an existing Generator is passed through."""
    return np.random.default_rng(seed)


def _check_common(table: pd.DataFrame, iterations: int, level: float) -> None:
    if table.empty:
        raise ResamplingError("Cannot resample an empty table.")
    if int(iterations) < 1:
        raise ResamplingError(f"iterations must be >= 1, got {iterations}")
    if not 0.0 < level < 1.0:
        raise ResamplingError(f"level must be in (0, 1), got {level}")


def _percentile_interval(estimates: np.ndarray, level: float) -> ResamplingInterval:
    valid = estimates[np.isfinite(estimates)]
    n_skipped = int(len(estimates) - len(valid))
    if len(valid) == 0:
        raise ResamplingError("Every resampling iteration was skipped.")

    estimates.setflags(write=False)
    tail = 100.0 * (1.0 - level) / 2.0
    lower, upper = np.percentile(valid, [tail, 100.0 - tail])
    return ResamplingInterval(
        lower=float(lower),
        upper=float(upper),
        level=float(level),
        estimates=estimates,
        n_valid=int(len(valid)),
        n_skipped=n_skipped,
    )


def _resample_indices(n_rows: int, rng: np.random.Generator) -> np.ndarray:
    return rng.integers(0, n_rows, size=n_rows)


def bootstrap_resample(table: pd.DataFrame, rng: np.random.Generator) -> pd.DataFrame:
    """Draw ``len(table)`` rows from ``table`` with replacement.

    Duplicate rows are expected. The returned frame has a fresh index.
    """
    idx = _resample_indices(len(table), rng)
    return table.iloc[idx].reset_index(drop=True)


def bootstrap_slope_ci(
    table: pd.DataFrame,
    iterations: int = 1000,
    seed=None,
    level: float = 0.95,
    predictor: str = COLUMNS.commitment,
    response: str = COLUMNS.gdp_change,
) -> ResamplingInterval:
    """Percentile bootstrap confidence interval for the regression slope.

    Each iteration resamples the rows with replacement, refits OLS and
    records the slope. The bounds are the ``(1 - level) / 2`` and
    ``(1 + level) / 2`` percentiles of the recorded slopes (2.5 and 97.5 at
    the default level).

    Args:
        table: Analysis table with predictor and response columns.
        iterations: Number of bootstrap resamples.
        seed: Int, ``SeedSequence`` or an existing ``Generator``. The same
            seed and table give the same interval bit-for-bit.
        level: Confidence level.
        predictor, response: Column names for the fit.

    Returns:
        ResamplingInterval: Bounds plus the per-iteration slopes.

    Note:
        A resample whose predictor has zero variance (for example every draw
        hits the same row) cannot be fitted; it is recorded as NaN and left
        out of the percentiles.
    """
    _check_common(table, iterations, level)
    rng = make_rng(seed)
    columns = table[[predictor, response]]

    slopes = np.full(int(iterations), np.nan)
    for i in range(int(iterations)):
        sample = bootstrap_resample(columns, rng)
        try:
            slopes[i] = fit_model(sample, predictor, response).slope
        except FitError:
            continue

    interval = _percentile_interval(slopes, level)
    if interval.n_skipped:
        logger.warning(
            "Bootstrap slope: skipped %d of %d degenerate resamples",
            interval.n_skipped,
            iterations,
        )
    return interval


def partition_rows(
    n_rows: int, rng: np.random.Generator, train_prob: float = 0.6
) -> np.ndarray:
    """Label each row ``"train"`` or ``"test"`` by an independent Bernoulli draw.

    The realized split size varies between calls; only the per-row
    probability ``train_prob`` is fixed. Exactly ``n_rows`` uniforms are
    consumed from ``rng``.
    """
    if not 0.0 < train_prob < 1.0:
        raise ResamplingError(f"train_prob must be in (0, 1), got {train_prob}")
    return np.where(rng.random(int(n_rows)) < train_prob, TRAIN, TEST)


def bootstrap_mse_ci(
    table: pd.DataFrame,
    iterations: int = 1000,
    train_prob: float = 0.6,
    seed=None,
    evaluate: str = TEST,
    level: float = 0.95,
    predictor: str = COLUMNS.commitment,
    response: str = COLUMNS.gdp_change,
) -> ResamplingInterval:
    """Percentile interval of mean squared error over random train/test splits.

    Each iteration labels rows with :func:`partition_rows`, fits OLS on the
    train rows and computes the MSE of its predictions on either the train
    rows (``evaluate="train"``, in-sample) or the test rows
    (``evaluate="test"``, out-of-sample).

    Args:
        table: Analysis table with predictor and response columns.
        iterations: Number of random splits.
        train_prob: Per-row probability of landing in the train partition.
        seed: Int, ``SeedSequence`` or an existing ``Generator``.
        evaluate: ``"train"`` or ``"test"``.
        level: Confidence level.

    Returns:
        ResamplingInterval: Bounds plus the per-iteration MSE values.

    Raises:
        ResamplingError: On invalid arguments or when no split could be
            evaluated.

    Note:
        Splits whose train rows cannot be fitted (too few rows or a constant
        predictor) or whose evaluated partition is empty are skipped: the
        MSE is recorded as NaN and excluded from the percentiles.
    """
    _check_common(table, iterations, level)
    if evaluate not in (TRAIN, TEST):
        raise ResamplingError(f"evaluate must be 'train' or 'test', got {evaluate!r}")

    rng = make_rng(seed)
    columns = table[[predictor, response]]

    mse = np.full(int(iterations), np.nan)
    for i in range(int(iterations)):
        labels = partition_rows(len(columns), rng, train_prob=train_prob)
        train = labels == TRAIN
        scored = train if evaluate == TRAIN else ~train
        if not scored.any():
            continue
        try:
            model = fit_model(columns[train], predictor, response)
        except FitError:
            continue
        mse[i] = mean_squared_error(model, columns[scored], predictor, response)

    interval = _percentile_interval(mse, level)
    if interval.n_skipped:
        logger.warning(
            "Cross-validated MSE (%s): skipped %d of %d splits with an empty or unfittable partition",
            evaluate,
            interval.n_skipped,
            iterations,
        )
    return interval


def train_fraction(labels: np.ndarray) -> float:
    """Share of rows labelled ``"train"``."""
    labels = np.asarray(labels)
    if labels.size == 0:
        return math.nan
    return float(np.mean(labels == TRAIN))
