"""Shared fixtures for the salary insights tests."""
from __future__ import annotations

from pathlib import Path
from typing import Dict, Iterable, List

import pytest

from salary_insights import data_manager
from salary_insights.config import COLUMN_TYPES
from salary_insights.engine import SalaryEngine
from salary_insights.loader import load

ROOT = Path(__file__).resolve().parents[1]
SAMPLE_CSV = ROOT / "data" / "salary_data.csv"

HEADER: List[str] = list(COLUMN_TYPES)

DEFAULT_ROW: Dict[str, str] = {
    "work_year": "2021",
    "experience_level": "SE",
    "employment_type": "FT",
    "job_title": "ML Engineer",
    "salary": "100000",
    "salary_currency": "USD",
    "salary_in_usd": "100000",
    "employee_residence": "US",
    "remote_ratio": "100",
    "company_location": "US",
    "company_size": "M",
}


def make_csv(rows: Iterable[Dict[str, object]], header: List[str] = HEADER) -> str:
    """Build CSV text; each row overrides ``DEFAULT_ROW`` fields."""
    lines = [",".join(header)]
    for overrides in rows:
        row = {**DEFAULT_ROW, **{k: str(v) for k, v in overrides.items()}}
        lines.append(",".join(row[col] for col in header))
    return "\n".join(lines) + "\n"


def make_engine(rows: Iterable[Dict[str, object]]) -> SalaryEngine:
    engine = SalaryEngine()
    engine.initialize(load(make_csv(rows)))
    return engine


@pytest.fixture
def sample_csv() -> Path:
    return SAMPLE_CSV


@pytest.fixture(autouse=True)
def _clear_engine_cache():
    data_manager._cached_engine.cache_clear()
    data_manager.shared_session.cache_clear()
    yield
    data_manager._cached_engine.cache_clear()
    data_manager.shared_session.cache_clear()
