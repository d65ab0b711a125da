"""Write analysis tables and summaries to reproducible CSV files.

This module is the output boundary between in-memory analysis and the
tabular artifacts kept with the report.
"""

from __future__ import annotations

import os
from typing import Dict, List

from .data_processing import AnalysisTables
from .reporting import interval_table, model_summary_table


def save_tables_to_csv(
    tables: AnalysisTables, results: List[Dict], output_dir: str = "output"
) -> Dict[str, str]:
    """Save the analysis tables, model summary and intervals to CSV files.

    Args:
        tables (AnalysisTables): Joined and trimmed analysis tables.
        results (list[dict]): Output of ``run_analysis``.
        output_dir (str): Directory where CSV outputs are written.

    Returns:
        dict[str, str]: Paths keyed by ``analysis_table``,
        ``analysis_table_filtered``, ``model_summary`` and
        ``resampling_intervals``.
    """
    os.makedirs(output_dir, exist_ok=True)

    frames = {
        "analysis_table": tables.joined,
        "analysis_table_filtered": tables.filtered,
        "model_summary": model_summary_table(results),
        "resampling_intervals": interval_table(results),
    }

    paths = {}
    for name, frame in frames.items():
        path = os.path.join(output_dir, f"{name}.csv")
        frame.to_csv(path, index=False)
        print(f"Saved {name.replace('_', ' ')} to {path}")
        paths[name] = path

    return paths
