"""Unit tests for the record loader."""
from __future__ import annotations

import pytest

from salary_insights.errors import DataUnavailableError, SchemaError
from salary_insights.loader import SalaryRecord, load

from .conftest import HEADER, make_csv


def test_sample_file_loads_every_row(sample_csv):
    result = load(sample_csv.read_text(encoding="utf-8"))

    assert len(result) == 20
    assert result.skipped_rows == 0
    assert list(result.frame.columns) == HEADER
    assert result.frame["work_year"].dtype == "int64"
    assert result.frame["remote_ratio"].dtype == "int64"
    assert result.frame["salary_in_usd"].dtype == "float64"


def test_records_are_typed_and_in_source_order():
    text = make_csv(
        [
            {"work_year": 2022, "job_title": "Data Scientist", "salary_in_usd": 300000},
            {"work_year": 2021, "job_title": "ML Engineer", "salary_in_usd": 100000.5},
        ]
    )

    records = list(load(text).records())

    assert [r.job_title for r in records] == ["Data Scientist", "ML Engineer"]
    first = records[0]
    assert isinstance(first, SalaryRecord)
    assert first.work_year == 2022 and isinstance(first.work_year, int)
    assert first.remote_ratio == 100
    assert records[1].salary_in_usd == pytest.approx(100000.5)
    with pytest.raises(AttributeError):
        first.salary_in_usd = 0  # type: ignore[misc]


def test_columns_are_read_by_header_name():
    header = list(reversed(HEADER)) + ["notes"]
    text = (
        ",".join(header)
        + "\n"
        + "M,US,50,US,250000,USD,250000,Data Scientist,FT,SE,2022,remote-ok\n"
    )

    result = load(text)

    assert len(result) == 1
    record = next(result.records())
    assert record.work_year == 2022
    assert record.salary_in_usd == 250000
    assert record.remote_ratio == 50
    assert record.job_title == "Data Scientist"
    assert "notes" not in result.frame.columns


def test_quoted_fields_keep_embedded_delimiters():
    text = (
        ",".join(HEADER)
        + "\n"
        + '2021,EN,PT,"Research Scientist, NLP",20000,EUR,23611,DE,100,DE,S\n'
    )

    record = next(load(text).records())

    assert record.job_title == "Research Scientist, NLP"
    assert record.salary_in_usd == 23611


def test_non_numeric_salary_in_usd_is_skipped_and_counted():
    text = make_csv(
        [
            {"salary_in_usd": 100000},
            {"salary_in_usd": "n/a"},
            {"salary_in_usd": 200000},
            {"salary_in_usd": "abc"},
        ]
    )

    result = load(text)

    assert len(result) == 2
    assert result.skipped_rows == 2
    assert result.frame["salary_in_usd"].tolist() == [100000.0, 200000.0]
    assert not result.frame["salary_in_usd"].isna().any()


@pytest.mark.parametrize(
    "overrides",
    [
        {"salary_in_usd": ""},
        {"salary": " "},
        {"work_year": "2021.5"},
        {"work_year": "twenty"},
        {"work_year": "21"},
        {"remote_ratio": "150"},
        {"remote_ratio": ""},
        {"salary_in_usd": "-5"},
        {"salary": "inf"},
    ],
)
def test_invalid_numeric_fields_drop_the_row(overrides):
    text = make_csv([{}, overrides])

    result = load(text)

    assert len(result) == 1
    assert result.skipped_rows == 1


def test_short_row_is_skipped():
    text = ",".join(HEADER) + "\n" + "2021,SE,FT,ML Engineer,100000\n"

    result = load(text)

    assert len(result) == 0
    assert result.skipped_rows == 1


def test_blank_lines_are_not_rows():
    text = make_csv([{}, {}]).replace("\n", "\n\n") + "\n\n"

    result = load(text)

    assert len(result) == 2
    assert result.skipped_rows == 0


def test_all_rows_invalid_is_a_successful_empty_load():
    text = make_csv([{"salary_in_usd": "x"}, {"salary_in_usd": "y"}])

    result = load(text)

    assert len(result) == 0
    assert result.skipped_rows == 2
    assert list(result.frame.columns) == HEADER


def test_surrounding_whitespace_is_trimmed():
    text = make_csv([{"work_year": " 2023 ", "job_title": "  Data Analyst "}])

    record = next(load(text).records())

    assert record.work_year == 2023
    assert record.job_title == "Data Analyst"


@pytest.mark.parametrize("text", ["", "   \n\n"])
def test_empty_input_is_unavailable(text):
    with pytest.raises(DataUnavailableError):
        load(text)


def test_header_only_input_is_unavailable():
    with pytest.raises(DataUnavailableError):
        load(",".join(HEADER) + "\n")


def test_missing_header_column_raises_schema_error():
    header = [c for c in HEADER if c != "salary_in_usd"]
    text = ",".join(header) + "\n" + ",".join(["x"] * len(header)) + "\n"

    with pytest.raises(SchemaError) as excinfo:
        load(text)

    assert excinfo.value.missing == ["salary_in_usd"]
    assert isinstance(excinfo.value, DataUnavailableError)


def test_alternative_delimiter():
    text = make_csv([{"salary_in_usd": 123}]).replace(",", ";")

    result = load(text, sep=";")

    assert result.frame["salary_in_usd"].tolist() == [123.0]


def test_stray_quote_skips_only_its_own_line():
    good = make_csv([{}]).splitlines()[1]
    text = "\n".join(
        [
            ",".join(HEADER),
            good,
            good,
            '2021,SE,FT,"ML Engineer,1,USD,1,US,100,US,M',
            good,
        ]
    ) + "\n"

    result = load(text)

    assert len(result) == 3
    assert result.skipped_rows == 1
    assert len(result) + result.skipped_rows == 4
    (error,) = result.row_errors
    assert error.line_no == 4
    assert error.reason == "unbalanced quote"


def test_row_with_extra_fields_is_skipped_and_counted():
    good = make_csv([{}]).splitlines()[1]
    text = ",".join(HEADER) + "\n" + good + "\n" + good + ",surplus\n"

    result = load(text)

    assert len(result) == 1
    assert result.skipped_rows == 1
    assert result.row_errors[0].line_no == 3


def test_row_errors_report_source_line_numbers():
    good = make_csv([{}]).splitlines()[1]
    lines = [
        ",".join(HEADER),  # 1
        good,  # 2
        "",  # 3
        good.replace("100000", "n/a"),  # 4
        good + ",surplus",  # 5
        "",  # 6
        "2021,SE,FT",  # 7
        good,  # 8
    ]

    result = load("\n".join(lines) + "\n")

    assert len(result) == 2
    assert [err.line_no for err in result.row_errors] == [4, 5, 7]
    assert all(str(err).startswith(f"line {err.line_no}:") for err in result.row_errors)
