"""Tests for reporting-layer tables and console output."""

import numpy as np
import pandas as pd

from fundgdp.reporting import (
    format_interval,
    format_number,
    interpret_slope_interval,
    interval_table,
    model_summary_table,
    print_summary,
)
from fundgdp.stats.regression import fit_model
from fundgdp.stats.resampling import ResamplingInterval


def make_interval(lower, upper, skipped=0):
    estimates = np.linspace(lower, upper, 10)
    return ResamplingInterval(
        lower=lower,
        upper=upper,
        level=0.95,
        estimates=estimates,
        n_valid=10 - skipped,
        n_skipped=skipped,
    )


def make_results():
    table = pd.DataFrame(
        {"ontarioCommitment": [1.0, 2.0, 3.0, 4.0, 5.0], "gdpChange": [2.0, 4.0, 5.0, 4.0, 5.0]}
    )
    model = fit_model(table)
    return [
        {
            "label": "All years",
            "n": 5,
            "table": table,
            "model": model,
            "mse_in_sample": 0.48,
            "slope_ci": make_interval(-0.2, 1.4),
            "mse_train_ci": make_interval(0.05, 0.9),
            "mse_test_ci": make_interval(0.1, 4.0, skipped=3),
        }
    ]


def test_format_helpers():
    assert format_number(0.123456) == "0.1235"
    assert format_number(float("nan")) == "n/a"
    assert format_interval(-0.0123456, 0.5) == "[-0.01235, 0.5]"


def test_model_summary_table_columns():
    out = model_summary_table(make_results())
    assert list(out["Variant"]) == ["All years"]
    assert set(out.columns) >= {"Slope", "Slope p-value", "Intercept", "R2", "n"}
    assert np.isclose(out.loc[0, "Slope"], 0.6)
    assert np.isclose(out.loc[0, "R2"], 0.6)


def test_interval_table_marks_zero_for_slope_only():
    out = interval_table(make_results())
    assert len(out) == 3
    slope_row = out[out["Interval"] == "Slope (bootstrap)"].iloc[0]
    assert bool(slope_row["Contains 0"]) is True
    mse_rows = out[out["Interval"] != "Slope (bootstrap)"]
    assert mse_rows["Contains 0"].isna().all()
    assert int(out["Skipped iterations"].sum()) == 3


def test_interpretation_text():
    assert "no linear relationship" in interpret_slope_interval(make_interval(-1.0, 1.0))
    assert "outside" in interpret_slope_interval(make_interval(0.1, 1.0))


def test_print_summary(capsys):
    print_summary(make_results())
    text = capsys.readouterr().out
    assert "All years (n=5)" in text
    assert "Slope (bootstrap): [-0.2, 1.4]" in text
    assert "(3 skipped)" in text


def test_print_summary_empty(capsys):
    print_summary([])
    assert "(no data)" in capsys.readouterr().out
