"""Render descriptive and diagnostic figures for the funding/GDP report.

All plotting functions accept precomputed results and do not fit models or
resample; they only draw what ``fundgdp.analysis`` produced.
"""

from __future__ import annotations

import os
from typing import Dict, List

import matplotlib.pyplot as plt
import numpy as np
import pandas as pd
from matplotlib.figure import Figure

from .schema import COLUMNS

FIGURE_DPI = 300
FIGSIZE_SINGLE = (7.0, 4.2)
DATA_COLOR = "#004371"
LINE_COLOR = "#a50f15"
BAND_COLOR = "#f1c4c1"


def setup_plot_style() -> None:
    """Apply the project plotting style (serif text, no top/right spines)."""
    plt.rcParams.update(
        {
            "font.family": "serif",
            "font.size": 11,
            "axes.titlesize": 13,
            "axes.labelsize": 12,
            "axes.spines.top": False,
            "axes.spines.right": False,
            "legend.frameon": False,
            "savefig.dpi": FIGURE_DPI,
            "savefig.bbox": "tight",
            "savefig.pad_inches": 0.12,
        }
    )


def save_figure(fig: Figure, png_path: str) -> str:
    """Save ``fig`` as PNG, close it and return the path."""
    os.makedirs(os.path.dirname(png_path) or ".", exist_ok=True)
    fig.savefig(png_path, dpi=FIGURE_DPI)
    plt.close(fig)
    return png_path


def _require_keys(res: Dict, keys) -> None:
    missing = set(keys) - set(res.keys())
    if missing:
        raise KeyError(f"result dict missing required fields: {missing}")


def plot_regression_fits(results: List[Dict], output_dir: str = "output") -> str:
    """Scatter of GDP change against funding with the OLS line per variant.

    Args:
        results (list[dict]): Output of ``run_analysis``; each entry needs
            ``label``, ``table`` and ``model``.
        output_dir (str): Directory for ``regression_fits.png``.

    Returns:
        str: Path to the saved PNG file.

    Raises:
        KeyError: If a result lacks a required field.
    """
    for res in results:
        _require_keys(res, {"label", "table", "model"})

    setup_plot_style()
    n_panels = max(len(results), 1)
    fig, axes = plt.subplots(
        1,
        n_panels,
        figsize=(FIGSIZE_SINGLE[0] * n_panels * 0.75, FIGSIZE_SINGLE[1]),
        squeeze=False,
        sharey=True,
    )

    for ax, res in zip(axes[0], results):
        table = res["table"]
        model = res["model"]
        x = table[COLUMNS.commitment].to_numpy(dtype=float) / 1e6
        y = table[COLUMNS.gdp_change].to_numpy(dtype=float)
        ax.scatter(x, y, color=DATA_COLOR, s=28, zorder=3, label="Year")

        if len(x):
            grid = np.linspace(np.min(x), np.max(x), 100)
            ax.plot(
                grid,
                model.predict(grid * 1e6),
                color=LINE_COLOR,
                label=f"OLS (R$^2$={model.r2:.2f})",
            )
        for xi, yi, year in zip(x, y, table[COLUMNS.year]):
            ax.annotate(str(year), (xi, yi), fontsize=8, xytext=(3, 3), textcoords="offset points")

        ax.axhline(0.0, color="0.6", linewidth=0.8, linestyle=":")
        ax.set_title(f"{res['label']} (n={len(table)})")
        ax.set_xlabel("Ontario commitment (\\$ millions)")
        ax.legend(loc="best", fontsize=9)

    axes[0][0].set_ylabel("GDP change (%)")
    return save_figure(fig, os.path.join(output_dir, "regression_fits.png"))


def plot_bootstrap_slopes(results: List[Dict], output_dir: str = "output") -> str:
    """Histogram of bootstrap slopes with interval bounds and zero marked."""
    for res in results:
        _require_keys(res, {"label", "slope_ci"})

    setup_plot_style()
    n_panels = max(len(results), 1)
    fig, axes = plt.subplots(
        1,
        n_panels,
        figsize=(FIGSIZE_SINGLE[0] * n_panels * 0.75, FIGSIZE_SINGLE[1]),
        squeeze=False,
    )

    for ax, res in zip(axes[0], results):
        interval = res["slope_ci"]
        slopes = interval.estimates[np.isfinite(interval.estimates)]
        ax.hist(slopes, bins=40, color=DATA_COLOR, alpha=0.75)
        ax.axvspan(interval.lower, interval.upper, color=BAND_COLOR, alpha=0.5, zorder=0)
        ax.axvline(interval.lower, color=LINE_COLOR, linestyle="--", linewidth=1.2)
        ax.axvline(interval.upper, color=LINE_COLOR, linestyle="--", linewidth=1.2)
        ax.axvline(0.0, color="black", linewidth=1.0)
        ax.set_title(res["label"])
        ax.set_xlabel("Bootstrap slope (% GDP change per \\$)")
        ax.ticklabel_format(axis="x", style="sci", scilimits=(-3, 3))

    axes[0][0].set_ylabel("Count")
    return save_figure(fig, os.path.join(output_dir, "bootstrap_slopes.png"))


def plot_gdp_change_by_year(
    table: pd.DataFrame, filtered: pd.DataFrame, output_dir: str = "output"
) -> str:
    """GDP percent change by year, marking years removed by the low-outlier trim."""
    required = {COLUMNS.year, COLUMNS.gdp_change}
    missing = required - set(table.columns)
    if missing:
        raise KeyError(f"table missing required columns: {missing}")

    setup_plot_style()
    fig, ax = plt.subplots(figsize=FIGSIZE_SINGLE)

    kept = table[COLUMNS.year].isin(filtered[COLUMNS.year])
    ax.plot(table[COLUMNS.year], table[COLUMNS.gdp_change], color="0.5", linewidth=1.0)
    ax.scatter(
        table.loc[kept, COLUMNS.year],
        table.loc[kept, COLUMNS.gdp_change],
        color=DATA_COLOR,
        zorder=3,
        label="Kept",
    )
    if (~kept).any():
        ax.scatter(
            table.loc[~kept, COLUMNS.year],
            table.loc[~kept, COLUMNS.gdp_change],
            color=LINE_COLOR,
            marker="x",
            s=50,
            zorder=4,
            label="Removed (low outlier)",
        )
    ax.axhline(0.0, color="0.6", linewidth=0.8, linestyle=":")
    ax.set_xlabel("Year")
    ax.set_ylabel("GDP change (%)")
    ax.legend(loc="best")
    return save_figure(fig, os.path.join(output_dir, "gdp_change_by_year.png"))
