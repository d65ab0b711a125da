"""
Handles CSV loading, currency cleaning, reshaping and the year join.
"""

# Algorithm summary: parse currency-formatted commitments, derive the funding
# year from the approval date and sum per year; pick the industry row of the
# wide GDP table, melt it to one row per year (year from column position),
# compute year-over-year percent change, inner-join on year and drop years
# without a defined change. A one-sided quantile trim then removes only the
# low tail of GDP change.

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from pathlib import Path

import numpy as np
import pandas as pd

from .config import AnalysisConfig
from .schema import COLUMNS, RAW_COLUMNS

logger = logging.getLogger(__name__)


class DataFormatError(ValueError):
    """Raised when an input value or table cannot be interpreted."""


@dataclass(frozen=True)
class AnalysisTables:
    """The joined analysis table and its low-outlier-trimmed subset.

    Both frames are built once by :func:`prepare_analysis_tables` and treated
    as read-only by every downstream fit.
    """

    joined: pd.DataFrame
    filtered: pd.DataFrame


def parse_currency(value) -> float:
    """Convert a currency-formatted value such as ``"$1,234.50"`` to float.

    Args:
        value: String (with optional ``$``, ``,`` and surrounding whitespace)
            or an already-numeric value.

    Returns:
        float: Parsed value.

    Raises:
        DataFormatError: If the value is missing, empty, boolean, not numeric
            after stripping ``$`` and ``,``, or not finite.
    """
    if isinstance(value, (bool, np.bool_)):
        raise DataFormatError(f"Boolean is not a currency value: {value!r}")
    if value is None or (not isinstance(value, str) and pd.isna(value)):
        raise DataFormatError(f"Missing currency value: {value!r}")

    if isinstance(value, (int, float, np.integer, np.floating)):
        result = float(value)
    else:
        cleaned = str(value).strip().replace("$", "").replace(",", "").strip()
        if not cleaned:
            raise DataFormatError(f"Empty currency value: {value!r}")
        try:
            result = float(cleaned)
        except ValueError as exc:
            raise DataFormatError(f"Malformed currency value: {value!r}") from exc

    if not math.isfinite(result):
        raise DataFormatError(f"Non-finite currency value: {value!r}")
    return result


def parse_currency_series(series: pd.Series) -> pd.Series:
    """Apply :func:`parse_currency` element-wise, keeping the index."""
    return series.map(parse_currency).astype(float)


def _require_columns(df: pd.DataFrame, columns, table_name: str) -> None:
    missing = [c for c in columns if c not in df.columns]
    if missing:
        raise DataFormatError(f"{table_name} table is missing columns: {missing}")


def load_funding_data(filepath) -> pd.DataFrame:
    """
    Load research funding records from a CSV file.

    Args:
        filepath (str | Path): Path to the CSV file.

    Returns:
        pd.DataFrame: Raw funding rows, one per approved project.
    """
    filepath = Path(filepath)
    if not filepath.exists():
        raise FileNotFoundError(f"Funding CSV not found: {filepath}")
    return pd.read_csv(filepath)


def load_gdp_data(filepath) -> pd.DataFrame:
    """
    Load the wide GDP-by-industry table from a CSV file.

    Values are read as text so thousands separators reach
    :func:`parse_currency` intact.
    """
    filepath = Path(filepath)
    if not filepath.exists():
        raise FileNotFoundError(f"GDP CSV not found: {filepath}")
    return pd.read_csv(filepath, dtype=str)


def aggregate_funding_by_year(
    funding_df: pd.DataFrame,
    date_col: str = RAW_COLUMNS.approval_date,
    amount_col: str = RAW_COLUMNS.commitment,
) -> pd.DataFrame:
    """Sum project commitments by approval year.

    Args:
        funding_df: Raw funding rows with an approval-date string column and
            a currency-formatted commitment column.
        date_col: Name of the approval-date column.
        amount_col: Name of the commitment column.

    Returns:
        pd.DataFrame: Columns ``year`` (int) and ``ontarioCommitment``
        (float), one row per year, sorted by year.

    Raises:
        DataFormatError: On unparsable or missing dates, malformed amounts or
            negative commitments.
    """
    _require_columns(funding_df, [date_col, amount_col], "Funding")

    try:
        dates = pd.to_datetime(funding_df[date_col], errors="raise")
    except (ValueError, TypeError) as exc:
        raise DataFormatError(f"Unparsable approval date in '{date_col}': {exc}") from exc
    if dates.isna().any():
        bad_rows = list(funding_df.index[dates.isna()])
        raise DataFormatError(f"Missing approval date in rows {bad_rows}")

    amounts = parse_currency_series(funding_df[amount_col])
    if (amounts < 0).any():
        bad = funding_df.loc[amounts < 0, amount_col].tolist()
        raise DataFormatError(f"Negative commitment values: {bad}")

    per_project = pd.DataFrame(
        {COLUMNS.year: dates.dt.year.astype(int), COLUMNS.commitment: amounts}
    )
    by_year = (
        per_project.groupby(COLUMNS.year, as_index=False)[COLUMNS.commitment]
        .sum()
        .sort_values(COLUMNS.year)
        .reset_index(drop=True)
    )
    logger.debug(
        "Aggregated %d funding records into %d years", len(per_project), len(by_year)
    )
    return by_year


def select_industry(
    gdp_df: pd.DataFrame,
    industry: str,
    industry_col: str = RAW_COLUMNS.industry,
) -> pd.DataFrame:
    """Return the single GDP row for ``industry``.

    Raises:
        DataFormatError: If the industry column is absent or the label does
            not match exactly one row.
    """
    _require_columns(gdp_df, [industry_col], "GDP")
    labels = gdp_df[industry_col].astype(str).str.strip()
    row = gdp_df[labels == industry.strip()]
    if len(row) != 1:
        raise DataFormatError(
            f"Expected one GDP row for industry {industry!r}, found {len(row)}"
        )
    return row.reset_index(drop=True)


def reshape_gdp_wide_to_long(
    gdp_row: pd.DataFrame | pd.Series,
    base_year: int = 2007,
    first_data_column: int = 1,
) -> pd.DataFrame:
    """Melt one wide GDP row into one row per year.

    The source table carries one column per year, so the year is taken from
    the column position: the column at ``first_data_column`` is
    ``base_year``, the next one ``base_year + 1``, and so on. Header text is
    not trusted for the year.

    Args:
        gdp_row: One-row DataFrame (or Series) from :func:`select_industry`.
        base_year: Year of the first data column.
        first_data_column: Position of the first data column; earlier
            columns hold labels.

    Returns:
        pd.DataFrame: Columns ``year`` and ``gdp`` (millions of chained
        dollars), sorted by year.
    """
    if isinstance(gdp_row, pd.DataFrame):
        if len(gdp_row) != 1:
            raise DataFormatError(f"Expected a single GDP row, got {len(gdp_row)}")
        gdp_row = gdp_row.iloc[0]

    values = gdp_row.iloc[first_data_column:]
    if values.empty:
        raise DataFormatError("GDP row has no year columns")

    years = base_year + np.arange(len(values))
    return pd.DataFrame(
        {
            COLUMNS.year: years.astype(int),
            COLUMNS.gdp: [parse_currency(v) for v in values],
        }
    )


def compute_percent_change(gdp_long: pd.DataFrame) -> pd.DataFrame:
    """Add year-over-year GDP percent change.

    ``gdpChange = (current - previous) / previous * 100`` where ``previous``
    is the GDP of the immediately preceding calendar year. The first year,
    and any year whose preceding year is absent, gets NaN.

    Raises:
        DataFormatError: If a preceding-year GDP used as a denominator is zero.
    """
    df = gdp_long.sort_values(COLUMNS.year).reset_index(drop=True).copy()
    previous = df[COLUMNS.gdp].shift(1)
    consecutive = df[COLUMNS.year].diff() == 1

    if ((previous == 0) & consecutive).any():
        raise DataFormatError("Zero GDP value cannot serve as a percent-change base")

    change = (df[COLUMNS.gdp] - previous) / previous * 100.0
    df[COLUMNS.gdp_change] = change.where(consecutive)
    return df


def join_funding_gdp(
    funding_by_year: pd.DataFrame, gdp_change: pd.DataFrame
) -> pd.DataFrame:
    """Inner-join yearly funding and GDP change on year.

    Years present in only one table are dropped, as are rows whose GDP change
    is undefined (NaN). Neither case is an error.

    Returns:
        pd.DataFrame: Columns ``year``, ``ontarioCommitment``, ``gdpChange``.

    Raises:
        DataFormatError: If a matched year has an infinite GDP change or a
            non-finite commitment.
    """
    merged = funding_by_year.merge(
        gdp_change[[COLUMNS.year, COLUMNS.gdp_change]], on=COLUMNS.year, how="inner"
    )
    infinite = np.isinf(merged[COLUMNS.gdp_change].to_numpy(dtype=float))
    if infinite.any():
        bad_years = merged.loc[infinite, COLUMNS.year].tolist()
        raise DataFormatError(f"Infinite GDP change in years {bad_years}")
    bad_commitment = ~np.isfinite(merged[COLUMNS.commitment].to_numpy(dtype=float))
    if bad_commitment.any():
        bad_years = merged.loc[bad_commitment, COLUMNS.year].tolist()
        raise DataFormatError(f"Non-finite commitment in years {bad_years}")

    joined = (
        merged.dropna(subset=[COLUMNS.gdp_change])
        .sort_values(COLUMNS.year)
        .reset_index(drop=True)[[COLUMNS.year, COLUMNS.commitment, COLUMNS.gdp_change]]
    )

    all_years = set(funding_by_year[COLUMNS.year]) | set(gdp_change[COLUMNS.year])
    logger.debug(
        "Joined %d years; %d years dropped (unmatched or undefined change)",
        len(joined),
        len(all_years) - len(joined),
    )
    return joined


def filter_low_outliers(table: pd.DataFrame, lower_quantile: float = 0.05) -> pd.DataFrame:
    """Drop rows whose GDP change falls below the ``lower_quantile`` percentile.

    This is a one-sided trim: rows are kept when ``gdpChange`` lies in
    ``[quantile(lower_quantile), max]``, so only the low tail is removed and
    every high value survives. The quantile uses linear interpolation between
    order statistics.

    Args:
        table: Joined analysis table.
        lower_quantile: Lower cut as a fraction in ``[0, 1)``.

    Returns:
        pd.DataFrame: Trimmed copy with a fresh index.
    """
    if not 0.0 <= lower_quantile < 1.0:
        raise ValueError("lower_quantile must be in [0, 1)")
    if table.empty:
        return table.copy()

    change = table[COLUMNS.gdp_change]
    lower = float(change.quantile(lower_quantile))
    upper = float(change.max())
    keep = (change >= lower) & (change <= upper)
    return table[keep].reset_index(drop=True)


def prepare_analysis_tables(
    funding_raw: pd.DataFrame,
    gdp_raw: pd.DataFrame,
    config: AnalysisConfig | None = None,
) -> AnalysisTables:
    """Build the joined table ``d`` and its trimmed variant ``dfilt``.

    Args:
        funding_raw: Raw funding rows from :func:`load_funding_data`.
        gdp_raw: Raw wide GDP table from :func:`load_gdp_data`.
        config: Column names, industry label, base year and trim quantile.

    Returns:
        AnalysisTables: ``joined`` and ``filtered`` frames.
    """
    config = config or AnalysisConfig()

    funding = aggregate_funding_by_year(
        funding_raw, date_col=config.date_column, amount_col=config.amount_column
    )
    gdp_row = select_industry(
        gdp_raw, config.industry, industry_col=config.industry_column
    )
    gdp_long = reshape_gdp_wide_to_long(
        gdp_row,
        base_year=config.base_year,
        first_data_column=config.first_data_column,
    )
    joined = join_funding_gdp(funding, compute_percent_change(gdp_long))
    filtered = filter_low_outliers(joined, lower_quantile=config.lower_quantile)

    logger.info(
        "Analysis table has %d years; %d remain after low-outlier trim",
        len(joined),
        len(filtered),
    )
    return AnalysisTables(joined=joined, filtered=filtered)
