import dataclasses

import numpy as np
import pandas as pd

from fundgdp.analysis import VARIANT_ALL, VARIANT_FILTERED, describe_table, run_analysis
from fundgdp.config import AnalysisConfig
from fundgdp.data_processing import AnalysisTables, filter_low_outliers


def make_tables(n=14, seed=3):
    rng = np.random.default_rng(seed)
    commitment = rng.uniform(5e6, 50e6, n)
    change = 1.0 + 2e-8 * commitment + rng.normal(0.0, 0.8, n)
    change[4] = -5.0
    joined = pd.DataFrame(
        {
            "year": np.arange(2008, 2008 + n),
            "ontarioCommitment": commitment,
            "gdpChange": change,
        }
    )
    return AnalysisTables(joined=joined, filtered=filter_low_outliers(joined))


def test_run_analysis_covers_both_variants():
    tables = make_tables()
    config = dataclasses.replace(AnalysisConfig(), iterations=200, seed=0)
    results = run_analysis(tables, config)

    assert [r["label"] for r in results] == [VARIANT_ALL, VARIANT_FILTERED]
    assert results[0]["n"] == len(tables.joined)
    assert results[1]["n"] == len(tables.filtered) == len(tables.joined) - 1
    for res in results:
        assert set(res) >= {
            "model",
            "mse_in_sample",
            "slope_ci",
            "mse_train_ci",
            "mse_test_ci",
        }
        assert res["slope_ci"].n_valid + res["slope_ci"].n_skipped == 200
        assert res["mse_in_sample"] >= 0


def test_run_analysis_reproducible_and_leaves_tables_untouched():
    tables = make_tables()
    before = tables.joined.copy()
    config = dataclasses.replace(AnalysisConfig(), iterations=150, seed=12)

    first = run_analysis(tables, config)
    second = run_analysis(tables, config)

    for a, b in zip(first, second):
        for key in ("slope_ci", "mse_train_ci", "mse_test_ci"):
            assert (a[key].lower, a[key].upper) == (b[key].lower, b[key].upper)
    pd.testing.assert_frame_equal(tables.joined, before)


def test_describe_table_rows():
    desc = describe_table(make_tables().joined)
    assert list(desc.index) == ["ontarioCommitment", "gdpChange"]
    assert desc.loc["gdpChange", "count"] == 14
