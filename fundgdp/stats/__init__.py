"""
Statistical utilities for the funding/GDP analysis.

This subpackage provides the regression fit and the resampling procedures
built on it. All functions operate on arrays or plain DataFrames; no input
parsing or plotting logic is included.

Modules:
    regression:
        Single-predictor ordinary least squares with intercept, t-test
        p-values, R² and mean squared prediction error.

    resampling:
        Percentile bootstrap interval for the slope and repeated random
        train/test splits for an interval on mean squared error. Every
        procedure takes an explicit seed or generator.

Design Principle:
    This subpackage has no dependencies on data_processing or plotting.
    It provides pure numerical utilities that can be independently tested.
"""

from .regression import (
    FitError,
    RegressionModel,
    fit_model,
    linear_regression,
    mean_squared_error,
)
from .resampling import (
    ResamplingError,
    ResamplingInterval,
    bootstrap_mse_ci,
    bootstrap_resample,
    bootstrap_slope_ci,
    make_rng,
    partition_rows,
    train_fraction,
)

__all__ = [
    "FitError",
    "RegressionModel",
    "fit_model",
    "linear_regression",
    "mean_squared_error",
    "ResamplingError",
    "ResamplingInterval",
    "bootstrap_mse_ci",
    "bootstrap_resample",
    "bootstrap_slope_ci",
    "make_rng",
    "partition_rows",
    "train_fraction",
]
