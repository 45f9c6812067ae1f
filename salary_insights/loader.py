"""Record loader: turn raw delimited text into validated salary records.

The loader applies an explicit schema (``config.COLUMN_TYPES``) to the raw
CSV text.  Columns are looked up by the names declared in the header, so
the column order of the source does not matter.  Rows that fail
validation are dropped and counted rather than coerced to ``0`` or
``NaN``; the count is returned alongside the records so callers can show a
"N rows skipped" diagnostic.
"""

from __future__ import annotations

import io
import logging
from dataclasses import dataclass, field
from typing import Iterator, List, Optional, Tuple

import numpy as np
import pandas as pd

from .config import (
    COLUMN_TYPES,
    DEFAULT_SEP,
    FLOAT_COLUMNS,
    INT_COLUMNS,
    STRING_COLUMNS,
    YEAR_MAX,
    YEAR_MIN,
)
from .errors import DataUnavailableError, RowParseError, SchemaError

logger = logging.getLogger(__name__)

_INT_PATTERN = r"[+-]?\d+"
_LINE_COL = "__line__"
_END_COL = "__end__"


@dataclass(frozen=True)
class SalaryRecord:
    """One validated row of the salary dataset."""

    work_year: int
    experience_level: str
    employment_type: str
    job_title: str
    salary: float
    salary_currency: str
    salary_in_usd: float
    employee_residence: str
    remote_ratio: int
    company_location: str
    company_size: str


@dataclass(frozen=True, eq=False)
class LoadResult:
    """Outcome of a successful :func:`load` call.

    ``frame`` holds one row per valid record, in source order, with one
    fixed dtype per schema column.  ``row_errors`` lists the rows that were
    dropped; only their count is meant for display.
    """

    frame: pd.DataFrame
    row_errors: Tuple[RowParseError, ...] = field(default_factory=tuple)

    @property
    def skipped_rows(self) -> int:
        return len(self.row_errors)

    def __len__(self) -> int:
        return len(self.frame)

    def records(self) -> Iterator[SalaryRecord]:
        for row in self.frame.itertuples(index=False):
            yield SalaryRecord(**row._asdict())


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def ensure_columns(df: pd.DataFrame, required: List[str]) -> None:
    """Raise :class:`SchemaError` if the frame lacks any required column."""
    missing = [col for col in required if col not in df.columns]
    if missing:
        raise SchemaError(missing)


def empty_frame() -> pd.DataFrame:
    """Return a zero-row frame carrying the record schema's dtypes."""
    return coerce_schema(pd.DataFrame({col: [] for col in COLUMN_TYPES}))


def coerce_schema(df: pd.DataFrame) -> pd.DataFrame:
    """Cast already-validated columns to their schema dtypes, in schema order."""
    out = df[list(COLUMN_TYPES)].copy()
    for col in INT_COLUMNS:
        out[col] = out[col].astype("int64")
    for col in FLOAT_COLUMNS:
        out[col] = out[col].astype("float64")
    for col in STRING_COLUMNS:
        out[col] = out[col].astype(object)
    return out.reset_index(drop=True)


def _split_lines(raw_text: str) -> Tuple[str, List[Tuple[int, str]]]:
    """Return the header and the non-blank data lines with their line numbers.

    Every record sits on its own physical line; quoted fields may hold the
    delimiter but not a line break.
    """
    numbered = [
        (n, line.rstrip("\r"))
        for n, line in enumerate(raw_text.split("\n"), start=1)
        if line.strip()
    ]
    if not numbered:
        raise DataUnavailableError("Salary data is empty.")
    (_, header), data = numbered[0], numbered[1:]
    return header, data


def _read_raw(raw_text: str, sep: str) -> Tuple[pd.DataFrame, List[RowParseError]]:
    """Tokenize the text into an all-string frame.

    Each data line is prefixed with its source line number (``_LINE_COL``)
    so every rejected row can be reported by line.  Lines with an
    unbalanced quote are rejected before parsing, since the CSV reader would
    otherwise swallow the rest of the file into one field.  Each line also
    ends in an ``_END_COL`` marker: a row with too many or too few fields
    pushes the marker out of that column and is rejected.  Any data line
    that still fails to come back as a row is reported as unparseable.
    """
    header, data = _split_lines(raw_text)
    row_errors: List[RowParseError] = []

    kept: List[Tuple[int, str]] = []
    for line_no, line in data:
        if line.count('"') % 2:
            row_errors.append(RowParseError(line_no, "unbalanced quote"))
        else:
            kept.append((line_no, line))

    def _on_bad_line(fields: List[str]) -> Optional[List[str]]:
        row_errors.append(
            RowParseError(
                int(fields[0]),
                f"too many fields ({len(fields) - 1}): {sep.join(fields[1:])!r}",
            )
        )
        return None

    text = "\n".join(
        [f"{_LINE_COL}{sep}{header}{sep}{_END_COL}"]
        + [f"{n}{sep}{line}{sep}{_END_COL}" for n, line in kept]
    )
    try:
        df = pd.read_csv(
            io.StringIO(text),
            sep=sep,
            dtype=str,
            keep_default_na=False,
            skip_blank_lines=True,
            engine="python",
            index_col=False,
            on_bad_lines=_on_bad_line,
        )
    except pd.errors.EmptyDataError as exc:
        raise DataUnavailableError("Salary data is empty.") from exc

    df.columns = [str(c).lstrip("\ufeff").strip() for c in df.columns]
    # Short rows come back as NaN even with keep_default_na=False
    df = df.fillna("")
    df[_LINE_COL] = df[_LINE_COL].astype("int64")

    misaligned = df[_END_COL] != _END_COL
    for line_no, end in zip(df.loc[misaligned, _LINE_COL], df.loc[misaligned, _END_COL]):
        reason = "too few fields" if end == "" else "too many fields"
        row_errors.append(RowParseError(int(line_no), reason))
    df = df.loc[~misaligned].drop(columns=_END_COL)

    seen = set(df[_LINE_COL]) | {err.line_no for err in row_errors}
    for line_no, _ in kept:
        if line_no not in seen:
            row_errors.append(RowParseError(line_no, "could not be parsed"))
    return df, row_errors


def _row_failures(df: pd.DataFrame) -> pd.Series:
    """Return the first validation failure per row (``""`` for valid rows)."""
    reasons = pd.Series("", index=df.index, dtype=object)

    def flag(mask: pd.Series, reason: str) -> None:
        hit = mask & (reasons == "")
        reasons[hit] = reason

    for col in INT_COLUMNS:
        text = df[col].str.strip()
        flag(text == "", f"{col} is empty")
        flag(~text.str.fullmatch(_INT_PATTERN), f"{col} is not an integer")

    for col in FLOAT_COLUMNS:
        text = df[col].str.strip()
        values = pd.to_numeric(text, errors="coerce")
        flag(text == "", f"{col} is empty")
        flag(~np.isfinite(values.astype(float)), f"{col} is not a number")
        flag(values < 0, f"{col} is negative")

    years = pd.to_numeric(df["work_year"].str.strip(), errors="coerce")
    flag(~years.between(YEAR_MIN, YEAR_MAX), "work_year is not a plausible year")

    ratio = pd.to_numeric(df["remote_ratio"].str.strip(), errors="coerce")
    flag(~ratio.between(0, 100), "remote_ratio is outside 0-100")
    return reasons


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def load(raw_text: str, *, sep: str = DEFAULT_SEP) -> LoadResult:
    """Parse raw delimited text into a :class:`LoadResult`.

    Parameters
    ----------
    raw_text : str
        Full CSV text, header row first.
    sep : str, optional
        Column delimiter; defaults to ``","``.

    Returns
    -------
    LoadResult
        The valid records plus the rows that were skipped.  A load in which
        every data row was rejected is still a successful load.

    Raises
    ------
    DataUnavailableError
        If the text is empty or holds no data rows after the header.
    SchemaError
        If the header lacks one of the required columns.
    """
    if raw_text is None or not raw_text.strip():
        raise DataUnavailableError("Salary data is empty.")

    raw, row_errors = _read_raw(raw_text, sep)
    ensure_columns(raw, list(COLUMN_TYPES))
    if raw.empty and not row_errors:
        raise DataUnavailableError("Salary data has a header but no data rows.")

    reasons = _row_failures(raw)
    invalid = reasons != ""
    for line_no, reason in zip(raw.loc[invalid, _LINE_COL], reasons[invalid]):
        row_errors.append(RowParseError(int(line_no), reason))
    row_errors.sort(key=lambda err: err.line_no)
    for err in row_errors:
        logger.debug("Skipping %s", err)

    valid = raw.loc[~invalid].copy()
    for col in INT_COLUMNS:
        valid[col] = pd.to_numeric(valid[col].str.strip()).astype("int64")
    for col in FLOAT_COLUMNS:
        valid[col] = pd.to_numeric(valid[col].str.strip())
    for col in STRING_COLUMNS:
        valid[col] = valid[col].str.strip()

    frame = coerce_schema(valid) if not valid.empty else empty_frame()
    if row_errors:
        logger.warning(
            "Skipped %d malformed row(s) while loading salary data", len(row_errors)
        )
    logger.info("Loaded %d salary record(s)", len(frame))
    return LoadResult(frame=frame, row_errors=tuple(row_errors))
