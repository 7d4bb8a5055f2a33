"""
Forecast Generation Module

Fits a model backend to a loaded series, forecasts a number of steps ahead
and stamps each prediction with a future timestamp derived from the
series' own sampling cadence.
"""

import math
from dataclasses import dataclass
from typing import Callable, Dict, Optional

import numpy as np
import pandas as pd

from usage_forecast.arima_model import ArimaModel
from usage_forecast.errors import InsufficientDataError, InvalidInputError, ModelFittingError
from usage_forecast.ets_model import EtsModel
from usage_forecast.model_base import ModelConfig, TimeSeriesModel

# Model fitting is not attempted below this many points
MIN_HISTORY_POINTS = 10

# Orders handed to every backend; seasonal orders stay zero whatever the caller asks for
FIXED_MODEL_CONFIG = ModelConfig(p=2, d=1, q=2, P=0, D=0, Q=0, s=0, auto=True)

# Cadence is inferred from the first points of the history only
CADENCE_SAMPLE_POINTS = 10
DEFAULT_STEP_INTERVAL = pd.Timedelta(hours=1)

MODEL_REGISTRY = {
    ArimaModel.name: ArimaModel,
    EtsModel.name: EtsModel,
}


def get_model(name: str, config: ModelConfig) -> TimeSeriesModel:
    """Create a model backend by name ('arima' or 'ets')"""
    if name not in MODEL_REGISTRY:
        raise InvalidInputError(
            f"Unknown model backend: {name}",
            {'available': sorted(MODEL_REGISTRY)}
        )
    return MODEL_REGISTRY[name](config)


def fixed_model_config() -> ModelConfig:
    """Non-seasonal ARIMA(2, 1, 2) orders with automatic order selection"""
    return FIXED_MODEL_CONFIG


def infer_step_interval(timestamps: pd.Series) -> pd.Timedelta:
    """
    Infer the sampling interval of a series

    Uses the mean gap between consecutive points among the first
    CADENCE_SAMPLE_POINTS timestamps, rounded to the nearest millisecond.
    Falls back to one hour with fewer than two points.

    Args:
        timestamps: Timestamps in ascending order

    Returns:
        Step interval
    """
    sample = pd.Series(pd.to_datetime(timestamps)).reset_index(drop=True).iloc[:CADENCE_SAMPLE_POINTS]
    if len(sample) < 2:
        return DEFAULT_STEP_INTERVAL

    gaps_ms = sample.diff().iloc[1:].dt.total_seconds() * 1000
    return pd.Timedelta(milliseconds=math.floor(gaps_ms.mean() + 0.5))


def build_future_timestamps(last_timestamp: pd.Timestamp,
                            step_interval: pd.Timedelta,
                            steps: int) -> pd.DatetimeIndex:
    """Timestamps `last + step * (i + 1)` for i in 0..steps-1"""
    return pd.DatetimeIndex([last_timestamp + step_interval * (i + 1) for i in range(steps)])


@dataclass(frozen=True)
class ForecastResult:
    """Outcome of one forecast run"""

    model_name: str
    model_config: ModelConfig
    history: pd.DataFrame
    forecast: pd.DataFrame
    step_interval: pd.Timedelta

    @property
    def model_info(self) -> Dict:
        return {'model': self.model_name, **self.model_config.to_dict()}


class SeriesForecaster:
    """Runs a model backend over a series and dates its predictions"""

    def __init__(self,
                 model_name: str = 'arima',
                 model_factory: Optional[Callable[[ModelConfig], TimeSeriesModel]] = None):
        """
        Initialize forecaster

        Args:
            model_name: Backend name used when no factory is given
            model_factory: Callable building a backend from a ModelConfig
        """
        self.model_name = model_name
        self.model_factory = model_factory or (lambda config: get_model(model_name, config))
        self.model_config = fixed_model_config()

    def forecast(self,
                 series: pd.DataFrame,
                 steps: int,
                 seasonal: Optional[bool] = None,
                 seasonal_period: Optional[int] = None) -> ForecastResult:
        """
        Fit the backend and forecast `steps` points past the end of the series

        Args:
            series: DataFrame with timestamp, value columns sorted by timestamp
            steps: Forecast horizon
            seasonal: Accepted for compatibility, not passed to the model
            seasonal_period: Accepted for compatibility, not passed to the model

        Returns:
            ForecastResult
        """
        if isinstance(steps, bool) or not isinstance(steps, (int, np.integer)) or steps <= 0:
            raise InvalidInputError(f"Forecast horizon must be a positive integer, got {steps!r}")

        history = series[['timestamp', 'value']].reset_index(drop=True).copy()

        if len(history) < MIN_HISTORY_POINTS:
            raise InsufficientDataError(len(history), MIN_HISTORY_POINTS)

        model = self.model_factory(self.model_config)
        print(f"\n  Fitting {model.name.upper()} on {len(history)} points "
              f"(p={self.model_config.p}, d={self.model_config.d}, q={self.model_config.q}, "
              f"auto={self.model_config.auto})...")

        fitted = model.fit(history['value'].to_numpy(dtype=float))
        predictions, errors = fitted.predict(steps)
        predictions = np.asarray(predictions, dtype=float)
        errors = np.asarray(errors, dtype=float)

        if len(predictions) != steps or len(errors) != steps:
            raise ModelFittingError(
                f"Model returned {len(predictions)} predictions and {len(errors)} errors "
                f"for a horizon of {steps}"
            )

        step_interval = infer_step_interval(history['timestamp'])
        future_timestamps = build_future_timestamps(history['timestamp'].iloc[-1], step_interval, steps)

        forecast_df = pd.DataFrame({
            'timestamp': future_timestamps,
            'predicted': predictions,
            'error': errors,
        })

        print(f"    Step interval: {step_interval}")
        print(f"    Forecast mean: {predictions.mean():.3f}")
        print(f"    ✓ Forecast generated ({steps} steps)")

        return ForecastResult(
            model_name=model.name,
            model_config=self.model_config,
            history=history,
            forecast=forecast_df,
            step_interval=step_interval,
        )


def forecast_series(series: pd.DataFrame,
                    steps: int,
                    model: str = 'arima',
                    seasonal: Optional[bool] = None,
                    seasonal_period: Optional[int] = None) -> ForecastResult:
    """
    Convenience function to forecast a series with a named backend

    Args:
        series: DataFrame with timestamp, value columns
        steps: Forecast horizon
        model: Backend name ('arima' or 'ets')
        seasonal: Accepted for compatibility, not passed to the model
        seasonal_period: Accepted for compatibility, not passed to the model

    Returns:
        ForecastResult
    """
    forecaster = SeriesForecaster(model_name=model)
    return forecaster.forecast(series, steps, seasonal=seasonal, seasonal_period=seasonal_period)
