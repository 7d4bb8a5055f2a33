"""
ARIMA Model Module

Fits non-seasonal ARIMA models with statsmodels. With `auto` enabled the
configured orders are treated as upper bounds and pmdarima's stepwise
auto_arima picks the order: differencing from a KPSS unit-root test, then
p and q by AIC at that differencing order.
"""

import warnings
from typing import Sequence, Tuple

import numpy as np
from pmdarima import auto_arima
from statsmodels.tsa.arima.model import ARIMA

from usage_forecast.errors import ModelFittingError
from usage_forecast.model_base import FittedModel, TimeSeriesModel


class FittedArima(FittedModel):
    """Wrapper around a statsmodels ARIMAResults object"""

    def __init__(self, results, order: Tuple[int, int, int]):
        self.results = results
        self.order = order

    @property
    def aic(self) -> float:
        return float(self.results.aic)

    def predict(self, steps: int) -> Tuple[np.ndarray, np.ndarray]:
        try:
            forecast_res = self.results.get_forecast(steps=steps)
        except Exception as exc:
            raise ModelFittingError(f"Error forecasting ARIMA{self.order}: {exc}") from exc

        predictions = np.asarray(forecast_res.predicted_mean, dtype=float)
        errors = np.asarray(forecast_res.se_mean, dtype=float)
        return predictions, errors


class ArimaModel(TimeSeriesModel):
    """ARIMA backend with optional order search"""

    name = 'arima'

    def select_order(self, y: np.ndarray) -> Tuple[int, int, int]:
        """
        Pick the (p, d, q) order to fit

        Args:
            y: Series values

        Returns:
            The configured order when auto is off, otherwise auto_arima's choice
            within the configured bounds
        """
        if not self.config.auto:
            return self.config.order

        # ndiffs needs a positive max_d, so a zero bound pins d instead
        differencing = {'d': 0} if self.config.d == 0 else {'d': None, 'max_d': self.config.d}

        search = auto_arima(
            y,
            start_p=0,
            start_q=0,
            max_p=self.config.p,
            max_q=self.config.q,
            test='kpss',
            seasonal=False,
            stepwise=True,
            suppress_warnings=True,
            error_action='ignore',
            information_criterion='aic',
            trace=False,
            **differencing
        )
        return tuple(int(k) for k in search.order)

    def fit(self, values: Sequence[float]) -> FittedArima:
        """
        Fit ARIMA to a numeric series

        Args:
            values: Series values in time order

        Returns:
            Fitted model at the selected order
        """
        y = np.asarray(values, dtype=float)
        if y.size == 0:
            raise ModelFittingError("Cannot fit ARIMA on an empty series.")
        if not np.all(np.isfinite(y)):
            raise ModelFittingError("Cannot fit ARIMA on a series with non-finite values.")

        try:
            order = self.select_order(y)
            with warnings.catch_warnings():
                warnings.simplefilter('ignore')
                model = ARIMA(y, order=order, seasonal_order=self.config.seasonal_order)
                results = model.fit()
        except Exception as exc:
            raise ModelFittingError(
                f"Error fitting ARIMA model: {exc}",
                {'bounds': self.config.order, 'auto': self.config.auto}
            ) from exc

        fitted = FittedArima(results, order)
        print(f"    Selected ARIMA{order} (AIC={fitted.aic:.2f})")

        return fitted
