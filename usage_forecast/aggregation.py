"""
Data Aggregation Module

Groups timestamped usage readings into daily totals.

A usage day runs from 01:00 up to and including 00:00 of the next calendar
day: a reading stamped exactly at hour 0 closes out the previous day.
"""

from typing import Dict, Optional

import pandas as pd
import sys
import os
sys.path.append(os.path.dirname(os.path.dirname(__file__)))
from config import AGGREGATION_CONFIG

from usage_forecast.data_loader import LENIENT, read_observations


def assign_day_of_record(timestamps: pd.Series) -> pd.Series:
    """
    Map each timestamp to the calendar day it is accounted to

    Hours 1-23 belong to their own day, hour 0 belongs to the previous day.

    Args:
        timestamps: Naive datetime Series

    Returns:
        Series of midnight-normalized day timestamps
    """
    days = timestamps.dt.normalize()
    at_midnight = timestamps.dt.hour == 0
    return days.where(~at_midnight, days - pd.Timedelta(days=1))


def aggregate_by_day(series: pd.DataFrame) -> pd.DataFrame:
    """
    Sum readings into one total per day of record

    Args:
        series: DataFrame with timestamp, value columns

    Returns:
        DataFrame with day, total columns sorted by day ascending
    """
    daily = (
        series.assign(day=assign_day_of_record(series['timestamp']))
        .groupby('day', sort=True)['value']
        .sum()
        .reset_index()
        .rename(columns={'value': 'total'})
    )
    daily['total'] = daily['total'].astype(float)
    return daily


def write_daily_csv(daily: pd.DataFrame,
                    output_path: str,
                    config: Optional[Dict] = None) -> None:
    """
    Write daily totals as `Timepoint,Usage` rows with fixed precision

    Args:
        daily: DataFrame from aggregate_by_day
        output_path: Destination CSV path
        config: Aggregation configuration. If None, uses config value
    """
    config = config or AGGREGATION_CONFIG
    day_col, total_col = config['output_header']

    output = pd.DataFrame({
        day_col: pd.to_datetime(daily['day']).dt.strftime('%Y-%m-%d'),
        total_col: daily['total'],
    })
    output.to_csv(
        os.path.abspath(output_path),
        index=False,
        float_format=f"%.{config['float_precision']}f",
        lineterminator='\n',
        encoding='utf-8'
    )


def group_usage_by_day(input_path: str,
                       output_path: str,
                       config: Optional[Dict] = None) -> Dict:
    """
    Group a usage CSV by day and export the totals to a new CSV file

    Rows that fail to parse are skipped (SkippedRowWarning) and left out
    of every total.

    Args:
        input_path: Raw usage CSV (timestamp,value)
        output_path: Daily totals CSV to create
        config: Aggregation configuration. If None, uses config value

    Returns:
        Summary dictionary (rows_processed, rows_skipped, days, output_path, valid)
    """
    print("="*60)
    print("GROUPING USAGE BY DAY")
    print("="*60)

    series, skipped = read_observations(input_path, mode=LENIENT)
    daily = aggregate_by_day(series)
    write_daily_csv(daily, output_path, config)

    summary = {
        'rows_processed': len(series) + skipped,
        'rows_skipped': skipped,
        'days': len(daily),
        'output_path': os.path.abspath(output_path),
    }

    print(f"  ✓ Processed {summary['rows_processed']:,} data points")
    if skipped:
        print(f"  ⚠ Skipped {skipped:,} invalid rows")
    print(f"  ✓ Grouped into {summary['days']:,} days")
    print(f"  ✓ Output written to: {summary['output_path']}")

    summary['valid'] = validate_daily_data(daily)

    return summary


def validate_daily_data(daily: pd.DataFrame) -> bool:
    """
    Validate daily totals

    Args:
        daily: DataFrame from aggregate_by_day

    Returns:
        True if validation passes
    """
    print("\n" + "="*60)
    print("VALIDATING DAILY DATA")
    print("="*60)

    checks_passed = True

    if daily.empty:
        print("  ✗ No daily totals")
        print("="*60)
        return False

    if daily['total'].isna().any():
        print("  ✗ Missing daily totals")
        checks_passed = False
    else:
        print("  ✓ No missing totals")

    if (daily['total'] < 0).any():
        print("  ✗ Negative usage found")
        checks_passed = False
    else:
        print("  ✓ No negative usage")

    # Gaps are reported but not filled
    expected_days = (daily['day'].max() - daily['day'].min()).days + 1
    actual_days = daily['day'].nunique()
    if expected_days != actual_days:
        print(f"  ⚠ Date gaps detected ({actual_days}/{expected_days} days)")
    else:
        print("  ✓ Complete date sequence")

    if checks_passed:
        print("\n✓ All validation checks passed!")
    else:
        print("\n✗ Some validation checks failed!")

    print("="*60)

    return checks_passed
