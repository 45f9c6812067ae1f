"""
Configuration constants for the salary insights pipeline.
"""

import os
from pathlib import Path
from typing import Dict, List, Tuple

# ======================================================
#  DATA SOURCES / CONSTANTS
# ======================================================
# Local CSV by default; a URL works too (see ``fetch.py``).
SALARY_SOURCE: str = os.getenv(
    "SALARY_DATA_SOURCE",
    str(Path(__file__).resolve().parent.parent / "data" / "salary_data.csv"),
)

DEFAULT_SEP: str = ","
FETCH_TIMEOUT: int = 30

# Column name -> type, in the order the published dataset uses.
# The loader looks columns up by name, so the header order may differ.
COLUMN_TYPES: Dict[str, type] = {
    "work_year": int,
    "experience_level": str,
    "employment_type": str,
    "job_title": str,
    "salary": float,
    "salary_currency": str,
    "salary_in_usd": float,
    "employee_residence": str,
    "remote_ratio": int,
    "company_location": str,
    "company_size": str,
}

INT_COLUMNS: List[str] = [c for c, t in COLUMN_TYPES.items() if t is int]
FLOAT_COLUMNS: List[str] = [c for c, t in COLUMN_TYPES.items() if t is float]
STRING_COLUMNS: List[str] = [c for c, t in COLUMN_TYPES.items() if t is str]

# Plausible calendar window for ``work_year``
YEAR_MIN: int = 1900
YEAR_MAX: int = 2100

# ======================================================
#  OUTPUT SHAPES
# ======================================================
SUMMARY_COLUMNS: List[str] = ["year", "total_jobs", "average_salary"]
BREAKDOWN_COLUMNS: List[str] = ["job_title", "total_jobs"]

# ======================================================
#  UI DEFAULTS
# ======================================================
SUMMARY_SORT_OPTIONS: List[Tuple[str, str]] = [
    ("Year", "year"),
    ("Number of Total Jobs", "total_jobs"),
    ("Average Salary (USD)", "average_salary"),
]

DEFAULT_SORT: str = "year"
TOP_TITLES: int = 15

LOG_LEVEL: str = os.getenv("SALARY_LOG_LEVEL", "INFO")
