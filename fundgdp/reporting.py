"""Build summary tables and the console report from analysis results.

This module sits after the numerical analysis and turns the per-variant
result dicts into flat DataFrames for export and a readable printout.
"""

from __future__ import annotations

import math
from typing import Dict, Iterable, List

import numpy as np
import pandas as pd

INTERVAL_KINDS = (
    ("slope_ci", "Slope (bootstrap)"),
    ("mse_train_ci", "MSE in-sample (train)"),
    ("mse_test_ci", "MSE out-of-sample (test)"),
)


def format_number(value: float, sig: int = 4) -> str:
    """Format a value to ``sig`` significant figures, ``"n/a"`` when not finite."""
    value = float(value)
    if not math.isfinite(value):
        return "n/a"
    return f"{value:.{sig}g}"


def format_interval(lower: float, upper: float, sig: int = 4) -> str:
    """Render ``[lower, upper]`` with matching significant figures.

    Examples:
        >>> format_interval(-0.0123456, 0.5)
        '[-0.01235, 0.5]'
    """
    return f"[{format_number(lower, sig)}, {format_number(upper, sig)}]"


def model_summary_table(results: Iterable[Dict]) -> pd.DataFrame:
    """One row of fit statistics per analysis variant.

    Args:
        results: Output of :func:`fundgdp.analysis.run_analysis`.

    Returns:
        pandas.DataFrame: Columns ``Variant``, ``n``, ``Slope``,
        ``Slope SE``, ``Slope p-value``, ``Intercept``, ``Intercept p-value``,
        ``R2`` and ``MSE (full fit)``.
    """
    rows = []
    for res in results:
        model = res["model"]
        rows.append(
            {
                "Variant": res["label"],
                "n": int(res["n"]),
                "Slope": model.slope,
                "Slope SE": model.se_slope,
                "Slope p-value": model.p_slope,
                "Intercept": model.intercept,
                "Intercept p-value": model.p_intercept,
                "R2": model.r2,
                "MSE (full fit)": res.get("mse_in_sample", np.nan),
            }
        )
    return pd.DataFrame(rows)


def interval_table(results: Iterable[Dict]) -> pd.DataFrame:
    """One row per variant and interval kind.

    ``Contains 0`` is filled for the slope interval only; ``True`` there
    means no significant linear relationship at the interval's level.
    """
    rows = []
    for res in results:
        for key, kind in INTERVAL_KINDS:
            interval = res.get(key)
            if interval is None:
                continue
            rows.append(
                {
                    "Variant": res["label"],
                    "Interval": kind,
                    "Level": interval.level,
                    "Lower": interval.lower,
                    "Upper": interval.upper,
                    "Valid iterations": interval.n_valid,
                    "Skipped iterations": interval.n_skipped,
                    "Contains 0": interval.contains(0.0) if key == "slope_ci" else None,
                }
            )
    return pd.DataFrame(rows)


def interpret_slope_interval(interval) -> str:
    """Plain-language reading of a slope interval."""
    pct = f"{100 * interval.level:.0f}%"
    if interval.contains(0.0):
        return (
            f"0 lies within the {pct} bootstrap interval; no linear relationship "
            "between funding and GDP change can be claimed."
        )
    return (
        f"0 lies outside the {pct} bootstrap interval; the slope differs from 0 "
        "at that level."
    )


def print_summary(results: List[Dict]) -> None:
    print("\nFunding vs. GDP change: model and resampling summary")
    if not results:
        print("  (no data)")
        return

    for res in results:
        model = res["model"]
        print(f" - {res['label']} (n={res['n']}):")
        print(
            f"     gdpChange = {format_number(model.intercept)} + "
            f"{format_number(model.slope)} * ontarioCommitment"
        )
        print(
            f"     slope p={format_number(model.p_slope, 3)} | "
            f"intercept p={format_number(model.p_intercept, 3)} | "
            f"R2={format_number(model.r2, 3)}"
        )
        for key, kind in INTERVAL_KINDS:
            interval = res.get(key)
            if interval is None:
                continue
            skipped = (
                f" ({interval.n_skipped} skipped)" if interval.n_skipped else ""
            )
            print(
                f"     {kind}: {format_interval(interval.lower, interval.upper)}{skipped}"
            )
        print(f"     {interpret_slope_interval(res['slope_ci'])}")
