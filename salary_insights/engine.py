"""Aggregation engine over a loaded salary dataset.

The engine holds one immutable record frame, set by
:meth:`SalaryEngine.initialize`, and answers two read-only queries:

* :meth:`SalaryEngine.yearly_summary` - job count and mean USD salary per
  ``work_year`` across the whole dataset.
* :meth:`SalaryEngine.job_title_breakdown` - job count per ``job_title``
  within one selected year.

Both return DataFrames with a fixed column schema
(``config.SUMMARY_COLUMNS`` / ``config.BREAKDOWN_COLUMNS``).  Row order is
not part of the contract; callers that need an order must sort.
"""

from __future__ import annotations

import logging
import math
from dataclasses import asdict
from typing import Iterable, List, Optional, Union

import pandas as pd

from .config import BREAKDOWN_COLUMNS, COLUMN_TYPES, SUMMARY_COLUMNS
from .errors import NotInitializedError
from .loader import LoadResult, SalaryRecord, coerce_schema, empty_frame, ensure_columns

logger = logging.getLogger(__name__)

RecordSource = Union[LoadResult, pd.DataFrame, Iterable[SalaryRecord]]


def _to_frame(records: RecordSource) -> pd.DataFrame:
    if isinstance(records, LoadResult):
        return coerce_schema(records.frame)
    if isinstance(records, pd.DataFrame):
        ensure_columns(records, list(COLUMN_TYPES))
        return coerce_schema(records)
    rows = [asdict(r) for r in records]
    if not rows:
        return empty_frame()
    return coerce_schema(pd.DataFrame(rows))


class SalaryEngine:
    """Holds one record collection and exposes the two aggregation queries."""

    def __init__(self) -> None:
        self._frame: Optional[pd.DataFrame] = None
        self._skipped_rows: int = 0

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------
    def initialize(self, records: RecordSource) -> None:
        """Replace the held records with a fresh copy of ``records``.

        Accepts a :class:`LoadResult`, a DataFrame with the record schema,
        or an iterable of :class:`SalaryRecord`.  The previous collection is
        discarded as a whole; there are no partial updates.
        """
        frame = _to_frame(records)
        self._skipped_rows = (
            records.skipped_rows if isinstance(records, LoadResult) else 0
        )
        self._frame = frame
        logger.info(
            "Engine initialized with %d record(s) across %d year(s)",
            len(frame),
            frame["work_year"].nunique(),
        )

    @property
    def is_initialized(self) -> bool:
        return self._frame is not None

    @property
    def record_count(self) -> int:
        return len(self._require())

    @property
    def skipped_rows(self) -> int:
        self._require()
        return self._skipped_rows

    def _require(self) -> pd.DataFrame:
        if self._frame is None:
            raise NotInitializedError(
                "SalaryEngine.initialize() must be called before querying."
            )
        return self._frame

    def years(self) -> List[int]:
        """Distinct ``work_year`` values, ascending."""
        df = self._require()
        return sorted(int(y) for y in df["work_year"].unique())

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------
    def yearly_summary(self) -> pd.DataFrame:
        """Count jobs and average ``salary_in_usd`` per ``work_year``.

        Returns
        -------
        pd.DataFrame
            Columns ``year``, ``total_jobs`` and ``average_salary``; one row
            per year present in the data.  ``average_salary`` is the
            ``math.fsum`` of the year's salaries divided by its job count,
            so it does not depend on summation order.
        """
        df = self._require()
        if df.empty:
            return pd.DataFrame(
                {
                    "year": pd.Series([], dtype="int64"),
                    "total_jobs": pd.Series([], dtype="int64"),
                    "average_salary": pd.Series([], dtype="float64"),
                }
            )[SUMMARY_COLUMNS]

        grouped = (
            df.groupby("work_year", sort=True)["salary_in_usd"]
            .agg(total_jobs="size", salary_total=math.fsum)
            .reset_index()
            .rename(columns={"work_year": "year"})
        )
        grouped["total_jobs"] = grouped["total_jobs"].astype("int64")
        grouped["average_salary"] = grouped["salary_total"] / grouped["total_jobs"]
        return grouped[SUMMARY_COLUMNS]

    def job_title_breakdown(self, year: Optional[int]) -> pd.DataFrame:
        """Count jobs per ``job_title`` within ``year``.

        ``None`` stands for "no year selected" and, like a year without any
        records, yields an empty frame rather than an error.
        """
        df = self._require()
        if year is None:
            return self._empty_breakdown()

        subset = df.loc[df["work_year"] == int(year), "job_title"]
        if subset.empty:
            return self._empty_breakdown()

        counts = (
            subset.value_counts(sort=True)
            .rename_axis("job_title")
            .reset_index(name="total_jobs")
        )
        counts["total_jobs"] = counts["total_jobs"].astype("int64")
        return counts[BREAKDOWN_COLUMNS]

    @staticmethod
    def _empty_breakdown() -> pd.DataFrame:
        return pd.DataFrame(
            {
                "job_title": pd.Series([], dtype=object),
                "total_jobs": pd.Series([], dtype="int64"),
            }
        )[BREAKDOWN_COLUMNS]
