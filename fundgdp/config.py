"""
Analysis settings: input paths, preparation constants and resampling defaults.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from .schema import RAW_COLUMNS

DATA_DIR = Path("data")
OUTPUT_DIR = Path("output")

# First year column of the wide GDP table (Statistics Canada 36-10-0402-01)
GDP_BASE_YEAR = 2007
GDP_INDUSTRY = "All industries [T001]"

N_ITERATIONS = 1000
TRAIN_PROB = 0.6
CONFIDENCE_LEVEL = 0.95
LOWER_QUANTILE = 0.05
RANDOM_SEED = 0


@dataclass(frozen=True)
class AnalysisConfig:
    """Settings for one run of the funding/GDP analysis.

    Build variants with :func:`dataclasses.replace` rather than mutating an
    instance.
    """

    funding_path: Path = DATA_DIR / "ontario_research_funding.csv"
    gdp_path: Path = DATA_DIR / "ontario_gdp_by_industry.csv"
    output_dir: Path = OUTPUT_DIR

    date_column: str = RAW_COLUMNS.approval_date
    amount_column: str = RAW_COLUMNS.commitment
    industry_column: str = RAW_COLUMNS.industry
    industry: str = GDP_INDUSTRY
    base_year: int = GDP_BASE_YEAR
    first_data_column: int = 1

    lower_quantile: float = LOWER_QUANTILE
    iterations: int = N_ITERATIONS
    train_prob: float = TRAIN_PROB
    confidence_level: float = CONFIDENCE_LEVEL
    seed: int | None = RANDOM_SEED
