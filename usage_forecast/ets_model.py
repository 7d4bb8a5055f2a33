"""
ETS (Exponential Smoothing) Model Module

Alternative backend built on Holt-Winters exponential smoothing.
No seasonal component is fitted. A differencing order of 1 or more maps to
an additive damped trend.
"""

import warnings
from typing import Optional, Sequence, Tuple

import numpy as np
from statsmodels.tsa.holtwinters import ExponentialSmoothing

from usage_forecast.errors import ModelFittingError
from usage_forecast.model_base import FittedModel, ModelConfig, TimeSeriesModel


class FittedEts(FittedModel):
    """Wrapper around a statsmodels HoltWintersResults object"""

    def __init__(self, results, residual_std: float):
        self.results = results
        self.residual_std = residual_std

    def predict(self, steps: int) -> Tuple[np.ndarray, np.ndarray]:
        try:
            predictions = np.asarray(self.results.forecast(steps), dtype=float)
        except Exception as exc:
            raise ModelFittingError(f"Error forecasting ETS model: {exc}") from exc
        # Random-walk style growth of uncertainty with horizon
        errors = self.residual_std * np.sqrt(np.arange(1, steps + 1))
        return predictions, errors


class EtsModel(TimeSeriesModel):
    """ETS backend for a single series"""

    name = 'ets'

    def __init__(self, config: ModelConfig):
        """
        Initialize ETS backend

        Args:
            config: Model orders. Only `d` is used: d >= 1 enables an additive
                    damped trend, d == 0 fits simple exponential smoothing
        """
        super().__init__(config)
        self.trend: Optional[str] = 'add' if config.d >= 1 else None
        self.damped_trend = self.trend is not None

    def fit(self, values: Sequence[float]) -> FittedEts:
        """
        Fit ETS to a numeric series

        Args:
            values: Series values in time order

        Returns:
            Fitted model
        """
        y = np.asarray(values, dtype=float)
        if y.size == 0:
            raise ModelFittingError("Cannot fit ETS on an empty series.")

        try:
            with warnings.catch_warnings():
                warnings.simplefilter('ignore')
                model = ExponentialSmoothing(
                    y,
                    trend=self.trend,
                    damped_trend=self.damped_trend,
                    seasonal=None,
                    initialization_method='estimated'
                )
                results = model.fit(optimized=True, use_brute=False)
        except Exception as exc:
            raise ModelFittingError(f"Error fitting ETS model: {exc}") from exc

        residuals = y - np.asarray(results.fittedvalues, dtype=float)
        residual_std = float(np.std(residuals))
        if not np.isfinite(residual_std):
            raise ModelFittingError("ETS fit produced non-finite residuals.")

        print(f"    Optimized smoothing: α={results.params['smoothing_level']:.3f}")

        return FittedEts(results, residual_std)
