"""Exception types raised by the salary insights pipeline."""


class SalaryDataError(Exception):
    """Base class for all pipeline errors."""


class DataUnavailableError(SalaryDataError):
    """The source could not be read, or holds no data rows."""


class SchemaError(DataUnavailableError):
    """The header row lacks one or more required columns."""

    def __init__(self, missing):
        self.missing = list(missing)
        super().__init__(f"Missing expected columns: {self.missing}")


class RowParseError(SalaryDataError, ValueError):
    """A data line that failed validation.

    The loader collects these on ``LoadResult.row_errors`` instead of raising
    them; only their count reaches the dashboard.
    """

    def __init__(self, line_no: int, reason: str):
        self.line_no = line_no
        self.reason = reason
        super().__init__(f"line {line_no}: {reason}")


class NotInitializedError(SalaryDataError, RuntimeError):
    """A query was issued before any dataset was loaded into the engine."""
