"""Define standardized column names for raw inputs and analysis tables."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class TableColumns:
    """Container for standardized column labels.

    These names are used by every table the pipeline builds, from the
    per-year aggregates through the joined analysis table and the exported
    CSV files.

    Attributes:
        year: Calendar year. Funding years come from the approval date;
            GDP years come from the column position in the wide source table.

        commitment: Total Ontario research funding commitment for the year,
            in dollars, summed across every project approved that year.

        gdp: Ontario GDP for the selected industry, in millions of chained
            dollars.

        gdp_change: Year-over-year GDP percent change,
            ``(current - previous) / previous * 100``. Undefined for the
            first year of the series.
    """

    year: str = "year"
    commitment: str = "ontarioCommitment"
    gdp: str = "gdp"
    gdp_change: str = "gdpChange"


@dataclass(frozen=True)
class RawColumns:
    """Column labels as they appear in the source CSV exports."""

    approval_date: str = "Approval Date"
    commitment: str = "Ontario Commitment"
    industry: str = "North American Industry Classification System (NAICS)"


COLUMNS = TableColumns()
RAW_COLUMNS = RawColumns()
