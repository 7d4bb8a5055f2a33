from __future__ import annotations

import pandas as pd
import pytest

from usage_forecast.aggregation import (
    aggregate_by_day,
    assign_day_of_record,
    group_usage_by_day,
    validate_daily_data,
    write_daily_csv,
)
from usage_forecast.errors import SkippedRowWarning


@pytest.mark.parametrize(
    ("timestamp", "expected_day"),
    [
        ("2024-01-02T00:00", "2024-01-01"),
        ("2024-01-02T01:00", "2024-01-02"),
        ("2024-01-02T23:59", "2024-01-02"),
        ("2024-01-01T00:00", "2023-12-31"),
        ("2024-03-01T00:30", "2024-02-29"),
    ],
)
def test_day_of_record_boundary(timestamp: str, expected_day: str) -> None:
    days = assign_day_of_record(pd.Series(pd.to_datetime([timestamp])))

    assert days.iloc[0] == pd.Timestamp(expected_day)


def test_aggregation_sums_readings_of_the_same_day() -> None:
    series = pd.DataFrame({
        "timestamp": pd.to_datetime(["2024-05-10T01:00", "2024-05-10T05:00"]),
        "value": [3.0, 4.0],
    })

    daily = aggregate_by_day(series)

    assert daily["day"].tolist() == [pd.Timestamp("2024-05-10")]
    assert daily["total"].tolist() == [7.0]


def test_aggregation_sorts_days_and_leaves_gaps() -> None:
    series = pd.DataFrame({
        "timestamp": pd.to_datetime(["2024-05-12T10:00", "2024-05-10T10:00", "2024-05-13T00:00"]),
        "value": [1.0, 2.0, 5.0],
    })

    daily = aggregate_by_day(series)

    assert daily["day"].dt.strftime("%Y-%m-%d").tolist() == ["2024-05-10", "2024-05-12"]
    assert daily["total"].tolist() == [2.0, 6.0]


def test_group_usage_by_day_writes_daily_csv(write_csv, tmp_path) -> None:
    source = write_csv("hourly.csv", [
        "Timepoint,Usage",
        "2024-01-01T01:00:00,1.5",
        "2024-01-01T13:00:00,2.25",
        "2024-01-02T00:00:00,1",
        "2024-01-02T01:00:00,4",
        "2024-01-03T05:00:00,oops",
    ])
    output = tmp_path / "daily.csv"

    with pytest.warns(SkippedRowWarning):
        summary = group_usage_by_day(str(source), str(output))

    assert output.read_text(encoding="utf-8") == (
        "Timepoint,Usage\n"
        "2024-01-01,4.7500\n"
        "2024-01-02,4.0000\n"
    )
    assert summary["rows_processed"] == 5
    assert summary["rows_skipped"] == 1
    assert summary["days"] == 2
    assert summary["valid"] is True
    assert set(summary) == {"rows_processed", "rows_skipped", "days", "output_path", "valid"}


def test_grouped_output_is_readable_by_the_strict_loader(write_csv, tmp_path) -> None:
    from usage_forecast.data_loader import load_time_series

    source = write_csv("hourly.csv", [f"2024-01-01T{hour:02d}:00:00,0.5" for hour in range(1, 24)])
    output = tmp_path / "daily.csv"

    group_usage_by_day(str(source), str(output))
    series = load_time_series(str(output))

    assert series["value"].tolist() == [11.5]


def test_header_only_input_writes_header_only(write_csv, tmp_path) -> None:
    source = write_csv("hourly.csv", ["Timepoint,Usage"])
    output = tmp_path / "daily.csv"

    summary = group_usage_by_day(str(source), str(output))

    assert output.read_text(encoding="utf-8") == "Timepoint,Usage\n"
    assert summary["days"] == 0
    assert summary["valid"] is False


def test_write_daily_csv_uses_configured_precision(tmp_path) -> None:
    daily = pd.DataFrame({"day": pd.to_datetime(["2024-01-01"]), "total": [1.23456]})
    output = tmp_path / "daily.csv"

    write_daily_csv(daily, str(output), {"output_header": ["Day", "Total"], "float_precision": 2})

    assert output.read_text(encoding="utf-8") == "Day,Total\n2024-01-01,1.23\n"


def test_missing_input_raises_os_error(tmp_path) -> None:
    with pytest.raises(OSError):
        group_usage_by_day(str(tmp_path / "missing.csv"), str(tmp_path / "out.csv"))


def test_unwritable_output_raises_os_error(write_csv, tmp_path) -> None:
    source = write_csv("hourly.csv", ["2024-01-01T05:00:00,1"])

    with pytest.raises(OSError):
        group_usage_by_day(str(source), str(tmp_path / "no_such_dir" / "out.csv"))


def test_validate_daily_data_flags_negative_totals(capsys) -> None:
    daily = pd.DataFrame({"day": pd.to_datetime(["2024-01-01", "2024-01-03"]), "total": [1.0, -2.0]})

    assert validate_daily_data(daily) is False
    output = capsys.readouterr().out
    assert "Negative usage found" in output
    assert "Date gaps detected (2/3 days)" in output
