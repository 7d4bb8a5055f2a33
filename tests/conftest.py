from __future__ import annotations

import sys
from pathlib import Path
from typing import Callable, List, Sequence

import numpy as np
import pandas as pd
import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from usage_forecast.model_base import FittedModel, ModelConfig, TimeSeriesModel  # noqa: E402


class FakeFitted(FittedModel):
    def __init__(self, last_value: float):
        self.last_value = last_value

    def predict(self, steps: int):
        return np.full(steps, self.last_value), np.arange(1, steps + 1, dtype=float)


class FakeModel(TimeSeriesModel):
    """Repeats the last value; records what it was given."""

    name = 'fake'

    def __init__(self, config: ModelConfig):
        super().__init__(config)
        self.fitted_values: List[np.ndarray] = []

    def fit(self, values):
        values = np.asarray(values, dtype=float)
        self.fitted_values.append(values)
        return FakeFitted(float(values[-1]))


@pytest.fixture()
def fake_factory():
    created: List[FakeModel] = []

    def factory(config: ModelConfig) -> FakeModel:
        model = FakeModel(config)
        created.append(model)
        return model

    factory.created = created
    return factory


@pytest.fixture()
def write_csv(tmp_path: Path) -> Callable[..., Path]:
    def _write(name: str, lines: Sequence[str], newline: str = "\n") -> Path:
        path = tmp_path / name
        path.write_bytes(newline.join(lines).encode("utf-8") + newline.encode("utf-8"))
        return path

    return _write


def make_daily_series(count: int, start: str = "2025-08-01", seed: int = 7) -> pd.DataFrame:
    rng = np.random.default_rng(seed)
    index = np.arange(count)
    values = 100 + 10 * np.sin(2 * np.pi * index / 7) + 0.5 * index + rng.normal(0, 2, count)
    return pd.DataFrame({
        "timestamp": pd.date_range(start=start, periods=count, freq="D"),
        "value": values.astype(float),
    })


def series_to_lines(series: pd.DataFrame, header: str = "Timepoint,Usage") -> List[str]:
    rows = [f"{ts:%Y-%m-%d},{value:.4f}" for ts, value in zip(series["timestamp"], series["value"])]
    return [header] + rows if header else rows


@pytest.fixture()
def daily_series() -> Callable[..., pd.DataFrame]:
    return make_daily_series
