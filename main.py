#!/usr/bin/env python3
"""
Main script for running the research funding vs. GDP analysis.
"""

# Pipeline overview (README-style):
# 1) Load the funding CSV (one row per approved project) and the wide GDP
#    by industry CSV (one column per year).
# 2) Sum commitments per approval year, melt GDP to one row per year and
#    compute year-over-year percent change.
# 3) Inner-join on year; trim the low tail of GDP change (5th percentile).
# 4) For both tables fit OLS, bootstrap the slope and compute train/test
#    MSE intervals over random splits.
# 5) Print the summary and export CSV tables and figures.

import logging
import os
import sys
import time

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(levelname)s - %(message)s",
    handlers=[
        logging.StreamHandler(sys.stdout),
        logging.FileHandler("funding_gdp_analysis.log", mode="w"),
    ],
)

sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from fundgdp.analysis import describe_table, run_analysis
from fundgdp.config import AnalysisConfig
from fundgdp.data_processing import (
    load_funding_data,
    load_gdp_data,
    prepare_analysis_tables,
)
from fundgdp.output import save_tables_to_csv
from fundgdp.plotting import (
    plot_bootstrap_slopes,
    plot_gdp_change_by_year,
    plot_regression_fits,
)
from fundgdp.reporting import print_summary


def main():
    """Main execution function with step timing logged."""

    start_time = time.time()
    config = AnalysisConfig()
    logging.info("Initializing funding/GDP analysis pipeline")
    logging.info(
        "Resampling: %d iterations, P(train)=%.2f, seed=%s",
        config.iterations,
        config.train_prob,
        config.seed,
    )

    try:
        funding_raw = load_funding_data(config.funding_path)
        gdp_raw = load_gdp_data(config.gdp_path)
        tables = prepare_analysis_tables(funding_raw, gdp_raw, config)
    except (FileNotFoundError, ValueError) as exc:
        logging.error("Data preparation failed: %s", exc)
        return 1

    logging.info("Funding records loaded: %d", len(funding_raw))
    logging.info("Analysis table shape: %s", tables.joined.shape)
    logging.info("Descriptive statistics:\n%s", describe_table(tables.joined))

    step_start = time.time()
    try:
        results = run_analysis(tables, config)
    except ValueError as exc:
        logging.error("Model fitting failed: %s", exc)
        return 1
    step_duration = time.time() - step_start
    logging.info("Model fitting and resampling completed in %.2f seconds", step_duration)

    print_summary(results)

    output_dir = str(config.output_dir)
    os.makedirs(output_dir, exist_ok=True)
    logging.info("Output directory ensured: %s", output_dir)

    csv_paths = save_tables_to_csv(tables, results, output_dir)
    figure_paths = [
        plot_gdp_change_by_year(tables.joined, tables.filtered, output_dir),
        plot_regression_fits(results, output_dir),
        plot_bootstrap_slopes(results, output_dir),
    ]

    total_duration = time.time() - start_time
    logging.info(f"Total execution time: {total_duration:.2f} seconds")

    logging.info("Analysis pipeline completed successfully")
    logging.info("Generated output files:")
    for name, path in csv_paths.items():
        logging.info("  - %s: %s", name, path)
    for path in figure_paths:
        logging.info("  - Figure: %s", path)
    return 0


if __name__ == "__main__":
    sys.exit(main())
