"""
A Python package relating Ontario research funding to Ontario GDP growth.

Joins annual research funding commitments with GDP percent change, fits an
OLS model and checks its reliability with bootstrap and train/test
resampling.

Modules:
    - data_processing: Loads, cleans, reshapes and joins the two datasets.
    - analysis: Runs the fit and resampling for each outlier variant.
    - stats: Regression fit and resampling procedures.
    - reporting: Summary tables and console report.
    - output: CSV export.
    - plotting: Descriptive and diagnostic figures.
"""

__version__ = "1.0.0"

from .analysis import analyze_table, describe_table, run_analysis
from .config import AnalysisConfig
from .data_processing import (
    AnalysisTables,
    DataFormatError,
    filter_low_outliers,
    load_funding_data,
    load_gdp_data,
    parse_currency,
    prepare_analysis_tables,
)
from .output import save_tables_to_csv
from .reporting import interval_table, model_summary_table, print_summary
from .stats import (
    FitError,
    ResamplingError,
    bootstrap_mse_ci,
    bootstrap_slope_ci,
    fit_model,
)

__all__ = [
    # Configuration
    "AnalysisConfig",
    # Data processing
    "AnalysisTables",
    "DataFormatError",
    "filter_low_outliers",
    "load_funding_data",
    "load_gdp_data",
    "parse_currency",
    "prepare_analysis_tables",
    # Statistics
    "FitError",
    "ResamplingError",
    "bootstrap_mse_ci",
    "bootstrap_slope_ci",
    "fit_model",
    # Analysis
    "analyze_table",
    "describe_table",
    "run_analysis",
    # Reporting
    "interval_table",
    "model_summary_table",
    "print_summary",
    "save_tables_to_csv",
]
