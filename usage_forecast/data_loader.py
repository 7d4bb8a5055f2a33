"""
Data Loading Module

Reads two-column `timestamp,value` CSV files into a time series DataFrame
sorted by timestamp.

Two modes share the same parsing rules:
- strict: the first bad row aborts the load (forecast runs)
- lenient: bad rows are skipped with a SkippedRowWarning (daily grouping)
"""

import math
import warnings
from typing import Dict, List, Optional, Sequence, Tuple

import pandas as pd
import sys
import os
sys.path.append(os.path.dirname(os.path.dirname(__file__)))
from config import LOADER_CONFIG

from usage_forecast.errors import InvalidInputError, MalformedInputError, SkippedRowWarning

STRICT = 'strict'
LENIENT = 'lenient'

SERIES_COLUMNS = ['timestamp', 'value']
ROW_COLUMNS = ['line_number', 'line', 'n_fields', 'timestamp', 'value']


def _row_fields(row: Sequence, delimiter: str) -> List[str]:
    """Text fields of one parsed row, with folded overflow split back out"""
    fields: List[str] = []
    for field in row:
        if isinstance(field, str):
            fields.extend(field.split(delimiter))
    return fields


def read_rows(path: str, config: Optional[Dict] = None) -> pd.DataFrame:
    """
    Read a delimited file into raw text rows

    Fields are kept as text; parse_rows turns them into timestamps and
    values. Rows with too many fields are kept in place (overflow folded
    into the value field) so they fail the field count check later.

    Args:
        path: CSV path
        config: Loader configuration. If None, uses config value

    Returns:
        DataFrame with line_number (1-based), line, n_fields, timestamp and
        value columns, one row per non-blank line
    """
    config = config or LOADER_CONFIG
    delimiter = config['delimiter']

    def fold_extra_fields(fields: List[str]) -> List[str]:
        return [fields[0], delimiter.join(fields[1:])]

    try:
        raw = pd.read_csv(
            os.path.abspath(path),
            sep=delimiter,
            header=None,
            names=SERIES_COLUMNS,
            dtype=object,
            na_filter=False,
            skip_blank_lines=False,
            skipinitialspace=True,
            on_bad_lines=fold_extra_fields,
            engine='python',
            encoding='utf-8'
        )
    except pd.errors.EmptyDataError:
        raw = pd.DataFrame(columns=SERIES_COLUMNS)

    # An over-long first row makes pandas read its leading fields as an index
    if not isinstance(raw.index, pd.RangeIndex):
        raw = raw.reset_index()

    records = []
    # Blank lines are read as empty rows, so position matches the file line
    for number, row in enumerate(raw.itertuples(index=False, name=None), start=1):
        fields = _row_fields(row, delimiter)
        line = delimiter.join(fields).strip()
        if not line:
            continue

        timestamp, value = (fields + [None, None])[:2]
        records.append((number, line, len(fields), timestamp, value))

    return pd.DataFrame(records, columns=ROW_COLUMNS)


def has_header(line: str, keywords: Optional[Sequence[str]] = None) -> bool:
    """Check whether a line looks like a header row"""
    if keywords is None:
        keywords = LOADER_CONFIG['header_keywords']

    lowered = line.lower()
    return any(keyword in lowered for keyword in keywords)


def parse_value(text: str) -> float:
    """Parse a finite float, raising ValueError otherwise"""
    try:
        value = float(text)
    except ValueError:
        raise ValueError(f"invalid numeric value '{text}'") from None

    if not math.isfinite(value):
        raise ValueError(f"non-finite numeric value '{text}'")

    return value


def parse_timestamp(text: str, timezone: Optional[str] = None) -> pd.Timestamp:
    """
    Parse an ISO-8601-like date or date-time into a naive timestamp

    Timezone-aware input is converted to `timezone` and the zone dropped,
    so every timestamp in a series is local wall-clock time.

    Args:
        text: Timestamp string
        timezone: Target timezone for aware timestamps. If None, uses config value

    Returns:
        Naive pandas Timestamp
    """
    if timezone is None:
        timezone = LOADER_CONFIG['timezone']

    try:
        timestamp = pd.Timestamp(text)
    except (ValueError, TypeError):
        raise ValueError(f"invalid timestamp '{text}'") from None

    if pd.isna(timestamp):
        raise ValueError(f"invalid timestamp '{text}'")

    if timestamp.tzinfo is not None:
        timestamp = timestamp.tz_convert(timezone).tz_localize(None)

    return timestamp


def parse_rows(rows: pd.DataFrame,
               mode: str = STRICT,
               config: Optional[Dict] = None) -> Tuple[pd.DataFrame, int]:
    """
    Parse raw rows into a sorted time series

    A first row containing a header keyword is dropped.

    Args:
        rows: DataFrame from read_rows
        mode: STRICT or LENIENT
        config: Loader configuration. If None, uses config value

    Returns:
        (DataFrame with timestamp/value columns, number of skipped rows)
    """
    if mode not in (STRICT, LENIENT):
        raise InvalidInputError(f"Unknown loader mode: {mode}")

    config = config or LOADER_CONFIG

    if not rows.empty and has_header(rows['line'].iloc[0], config['header_keywords']):
        rows = rows.iloc[1:]

    records = []
    skipped = 0

    for row in rows.itertuples(index=False):
        try:
            if row.n_fields != 2:
                raise ValueError(f"expected 2 fields, found {row.n_fields}")
            timestamp = parse_timestamp(row.timestamp.strip(), config['timezone'])
            value = parse_value(row.value.strip())
        except ValueError as exc:
            if mode == STRICT:
                raise MalformedInputError(f"Invalid row ({exc})", row.line_number, row.line) from exc

            warnings.warn(f"Skipping invalid line {row.line_number}: {row.line}",
                          SkippedRowWarning, stacklevel=2)
            skipped += 1
            continue

        records.append((timestamp, value))

    series = pd.DataFrame(records, columns=SERIES_COLUMNS)
    series['timestamp'] = pd.to_datetime(series['timestamp'])
    series['value'] = series['value'].astype(float)

    # Sort by time (in case the file is not already sorted)
    series = series.sort_values('timestamp', kind='mergesort').reset_index(drop=True)

    return series, skipped


def read_observations(path: str,
                      mode: str = STRICT,
                      config: Optional[Dict] = None) -> Tuple[pd.DataFrame, int]:
    """
    Load a CSV file and report how many rows were skipped

    Args:
        path: CSV path
        mode: STRICT or LENIENT
        config: Loader configuration. If None, uses config value

    Returns:
        (time series DataFrame, number of skipped rows)
    """
    return parse_rows(read_rows(path, config), mode, config)


def load_time_series(path: str,
                     mode: str = STRICT,
                     config: Optional[Dict] = None) -> pd.DataFrame:
    """
    Load a two-column CSV file into a time series

    Args:
        path: CSV path (date,value with optional header)
        mode: STRICT raises MalformedInputError on the first bad row,
              LENIENT skips bad rows with a warning
        config: Loader configuration. If None, uses config value

    Returns:
        DataFrame with columns timestamp, value sorted by timestamp
    """
    series, _ = read_observations(path, mode, config)
    return series
