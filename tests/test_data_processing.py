import numpy as np
import pandas as pd
import pytest

from fundgdp.config import AnalysisConfig
from fundgdp.data_processing import (
    DataFormatError,
    aggregate_funding_by_year,
    compute_percent_change,
    filter_low_outliers,
    join_funding_gdp,
    load_funding_data,
    load_gdp_data,
    parse_currency,
    prepare_analysis_tables,
    reshape_gdp_wide_to_long,
    select_industry,
)

INDUSTRY_COL = "North American Industry Classification System (NAICS)"


def make_gdp_raw(values, industry="All industries [T001]"):
    row = {INDUSTRY_COL: industry}
    # Header text deliberately does not carry the year.
    for i, v in enumerate(values):
        row[f"Reference period {i + 1}"] = v
    other = {INDUSTRY_COL: "Construction [23]"}
    other.update({k: "1" for k in row if k != INDUSTRY_COL})
    return pd.DataFrame([other, row])


def test_parse_currency_strips_symbols():
    assert parse_currency("$1,234") == 1234.0
    assert parse_currency("  $12,345.50 ") == 12345.5
    assert parse_currency("987") == 987.0
    assert parse_currency(42) == 42.0


@pytest.mark.parametrize(
    "bad",
    ["$1,2x4", "", "  $ ", None, np.nan, "N/A", "inf", "$Infinity", "nan", "1e400", True, np.inf],
)
def test_parse_currency_fails_loudly(bad):
    with pytest.raises(DataFormatError):
        parse_currency(bad)


def test_parse_currency_error_names_value():
    with pytest.raises(ValueError, match="abc"):
        parse_currency("$abc")


def test_aggregate_funding_sums_projects_per_year():
    funding = pd.DataFrame(
        {
            "Approval Date": ["2010-03-01", "2010-11-15", "2011-06-30", "2012-01-05"],
            "Ontario Commitment": ["$1,000", "$2,500", "$400", "$10"],
        }
    )
    out = aggregate_funding_by_year(funding)
    assert list(out["year"]) == [2010, 2011, 2012]
    assert list(out["ontarioCommitment"]) == [3500.0, 400.0, 10.0]


def test_aggregate_funding_rejects_bad_date_and_amount():
    bad_date = pd.DataFrame(
        {"Approval Date": ["not a date"], "Ontario Commitment": ["$1"]}
    )
    with pytest.raises(DataFormatError):
        aggregate_funding_by_year(bad_date)

    bad_amount = pd.DataFrame(
        {"Approval Date": ["2010-01-01"], "Ontario Commitment": ["$1,0o0"]}
    )
    with pytest.raises(DataFormatError, match="1,0o0"):
        aggregate_funding_by_year(bad_amount)

    negative = pd.DataFrame(
        {"Approval Date": ["2010-01-01"], "Ontario Commitment": ["-5"]}
    )
    with pytest.raises(DataFormatError, match="Negative"):
        aggregate_funding_by_year(negative)


def test_aggregate_funding_requires_columns():
    with pytest.raises(DataFormatError, match="missing columns"):
        aggregate_funding_by_year(pd.DataFrame({"Date": ["2010-01-01"]}))


def test_select_industry_requires_exactly_one_row():
    gdp = make_gdp_raw(["100", "110"])
    assert len(select_industry(gdp, "All industries [T001]")) == 1
    with pytest.raises(DataFormatError):
        select_industry(gdp, "Mining [21]")


def test_reshape_uses_column_position_for_year():
    gdp = make_gdp_raw(["600,000", "610,000", "605,000"])
    row = select_industry(gdp, "All industries [T001]")
    long = reshape_gdp_wide_to_long(row, base_year=2007, first_data_column=1)
    assert list(long["year"]) == [2007, 2008, 2009]
    assert list(long["gdp"]) == [600000.0, 610000.0, 605000.0]


def test_percent_change_first_year_and_gaps_undefined():
    gdp_long = pd.DataFrame(
        {"year": [2009, 2007, 2008, 2011], "gdp": [110.0, 100.0, 120.0, 121.0]}
    )
    out = compute_percent_change(gdp_long)
    assert list(out["year"]) == [2007, 2008, 2009, 2011]
    change = out["gdpChange"].to_numpy()
    assert np.isnan(change[0])
    assert np.isclose(change[1], 20.0)
    assert np.isclose(change[2], (110.0 - 120.0) / 120.0 * 100)
    # 2010 is missing, so 2011 has no preceding year
    assert np.isnan(change[3])


def test_join_keeps_only_years_with_funding_and_defined_change():
    funding = pd.DataFrame(
        {"year": [2006, 2007, 2008, 2009, 2010, 2013], "ontarioCommitment": [1.0] * 6}
    )
    gdp = compute_percent_change(
        pd.DataFrame(
            {"year": [2007, 2008, 2009, 2010, 2011], "gdp": [100, 102, 101, 104, 105]}
        )
    )
    joined = join_funding_gdp(funding, gdp)

    defined = set(gdp.loc[gdp["gdpChange"].notna(), "year"])
    for year in set(funding["year"]) | set(gdp["year"]):
        expected = year in set(funding["year"]) and year in defined
        assert (year in set(joined["year"])) == expected
    assert list(joined.columns) == ["year", "ontarioCommitment", "gdpChange"]
    assert joined["gdpChange"].notna().all()


def test_join_rejects_infinite_gdp_change():
    funding = pd.DataFrame({"year": [2008, 2009, 2010], "ontarioCommitment": [1.0, 2.0, 3.0]})
    gdp = pd.DataFrame({"year": [2008, 2009, 2010], "gdpChange": [1.0, np.inf, 2.0]})
    with pytest.raises(DataFormatError, match="2009"):
        join_funding_gdp(funding, gdp)


def test_prepare_rejects_non_finite_gdp_cell():
    funding = pd.DataFrame(
        {
            "Approval Date": ["2008-05-01", "2009-05-01", "2010-05-01"],
            "Ontario Commitment": ["$100", "$200", "$300"],
        }
    )
    gdp = make_gdp_raw(["500,000", "510,000", "inf", "505,000"])
    with pytest.raises(DataFormatError, match="inf"):
        prepare_analysis_tables(funding, gdp)


def test_filter_low_outliers_is_one_sided():
    changes = [-10.0, 1, 2, 3, 4, 5, 6, 7, 8, 9, 10, 50.0]
    table = pd.DataFrame(
        {
            "year": range(2008, 2008 + len(changes)),
            "ontarioCommitment": np.linspace(1, 2, len(changes)),
            "gdpChange": changes,
        }
    )
    filtered = filter_low_outliers(table, lower_quantile=0.05)

    p5 = np.percentile(changes, 5)
    assert -10.0 not in set(filtered["gdpChange"])
    assert 50.0 in set(filtered["gdpChange"])
    assert (filtered["gdpChange"] >= p5).all()
    assert len(filtered) == int(np.sum(np.asarray(changes) >= p5))
    # input left untouched
    assert len(table) == len(changes)


def test_filter_low_outliers_keeps_ties_at_threshold():
    table = pd.DataFrame(
        {"year": [1, 2, 3], "ontarioCommitment": [1.0, 2.0, 3.0], "gdpChange": [1.0, 1.0, 1.0]}
    )
    assert len(filter_low_outliers(table)) == 3


def test_prepare_analysis_tables_from_csv(tmp_path):
    funding_path = tmp_path / "funding.csv"
    gdp_path = tmp_path / "gdp.csv"
    pd.DataFrame(
        {
            "Project": ["a", "b", "c", "d", "e", "f"],
            "Approval Date": [
                "2008-05-01",
                "2009-02-11",
                "2009-09-30",
                "2010-04-01",
                "2011-08-19",
                "2012-12-01",
            ],
            "Ontario Commitment": ["$1,000", "$500", "$700", "$2,000", "$300", "$900"],
        }
    ).to_csv(funding_path, index=False)
    make_gdp_raw(["500,000", "510,000", "495,000", "505,000", "520,000"]).to_csv(
        gdp_path, index=False
    )

    config = AnalysisConfig(funding_path=funding_path, gdp_path=gdp_path)
    tables = prepare_analysis_tables(
        load_funding_data(funding_path), load_gdp_data(gdp_path), config
    )

    # GDP covers 2007-2011; 2007 has no change and 2012 has no GDP
    assert list(tables.joined["year"]) == [2008, 2009, 2010, 2011]
    assert tables.joined.loc[1, "ontarioCommitment"] == 1200.0
    assert np.isclose(tables.joined.loc[0, "gdpChange"], 2.0)
    # 2009 is the only low outlier
    assert list(tables.filtered["year"]) == [2008, 2010, 2011]


def test_load_missing_file_raises(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_funding_data(tmp_path / "absent.csv")
    with pytest.raises(FileNotFoundError):
        load_gdp_data(tmp_path / "absent.csv")
