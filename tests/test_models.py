from __future__ import annotations

import numpy as np
import pytest

from usage_forecast.arima_model import ArimaModel, FittedArima
from usage_forecast.errors import ModelFittingError
from usage_forecast.ets_model import EtsModel, FittedEts
from usage_forecast.model_base import ModelConfig


@pytest.fixture()
def trending_values() -> np.ndarray:
    rng = np.random.default_rng(42)
    return 50 + 0.8 * np.arange(40) + rng.normal(0, 1.5, 40)


def test_model_config_from_dict_ignores_unknown_keys() -> None:
    config = ModelConfig.from_dict({"p": 1, "d": 0, "q": 1, "auto": False, "verbose": True})

    assert config.order == (1, 0, 1)
    assert config.seasonal_order == (0, 0, 0, 0)
    assert config.auto is False
    assert config.to_dict()["p"] == 1


def white_noise(seed: int, count: int = 60) -> np.ndarray:
    return 100 + np.random.default_rng(seed).normal(0, 5, count)


def test_fixed_arima_uses_exact_order(trending_values) -> None:
    model = ArimaModel(ModelConfig(p=2, d=1, q=2, auto=False))

    assert model.select_order(trending_values) == (2, 1, 2)


def test_auto_arima_does_not_difference_stationary_series() -> None:
    model = ArimaModel(ModelConfig(p=2, d=1, q=2, auto=True))

    chosen_d = [model.fit(white_noise(seed)).order[1] for seed in range(8)]

    # KPSS at the 5% level can still reject a stationary draw
    assert chosen_d.count(0) >= 6


def test_auto_arima_differences_trending_series(trending_values) -> None:
    fitted = ArimaModel(ModelConfig(p=2, d=1, q=2, auto=True)).fit(trending_values)

    assert fitted.order[1] == 1


@pytest.mark.parametrize("bounds", [(1, 1, 1), (2, 0, 1), (0, 1, 0)])
def test_auto_arima_order_stays_within_bounds(trending_values, bounds) -> None:
    p, d, q = bounds
    fitted = ArimaModel(ModelConfig(p=p, d=d, q=q, auto=True)).fit(trending_values)

    assert all(chosen <= bound for chosen, bound in zip(fitted.order, bounds))
    assert np.isfinite(fitted.aic)


def test_arima_fit_and_predict(trending_values) -> None:
    fitted = ArimaModel(ModelConfig(p=1, d=1, q=1, auto=False)).fit(trending_values)

    predictions, errors = fitted.predict(5)

    assert isinstance(fitted, FittedArima)
    assert fitted.order == (1, 1, 1)
    assert predictions.shape == (5,)
    assert errors.shape == (5,)
    assert np.all(np.isfinite(predictions))
    assert np.all(errors > 0)
    # Trend continues upwards
    assert predictions.mean() > trending_values[:10].mean()


@pytest.mark.parametrize("values", [[], [1.0, np.nan, 3.0]])
def test_arima_rejects_unusable_series(values) -> None:
    with pytest.raises(ModelFittingError):
        ArimaModel(ModelConfig()).fit(values)


def test_ets_trend_follows_differencing_order() -> None:
    assert EtsModel(ModelConfig(d=1)).trend == "add"
    assert EtsModel(ModelConfig(d=1)).damped_trend is True
    assert EtsModel(ModelConfig(d=0)).trend is None
    assert EtsModel(ModelConfig(d=0)).damped_trend is False


def test_ets_fit_and_predict(trending_values) -> None:
    fitted = EtsModel(ModelConfig()).fit(trending_values)

    predictions, errors = fitted.predict(4)

    assert isinstance(fitted, FittedEts)
    assert predictions.shape == (4,)
    assert np.all(np.diff(errors) > 0)
    assert errors[0] == pytest.approx(fitted.residual_std)


def test_ets_rejects_empty_series() -> None:
    with pytest.raises(ModelFittingError):
        EtsModel(ModelConfig()).fit([])


class ExplodingEstimator:
    def __init__(self, *args, **kwargs):
        pass

    def fit(self, *args, **kwargs):
        raise IndexError("index 3 is out of bounds")


def test_arima_backend_errors_become_model_fitting_errors(monkeypatch, trending_values) -> None:
    monkeypatch.setattr("usage_forecast.arima_model.ARIMA", ExplodingEstimator)

    with pytest.raises(ModelFittingError) as exc_info:
        ArimaModel(ModelConfig(auto=False)).fit(trending_values)

    assert isinstance(exc_info.value.__cause__, IndexError)


def test_arima_order_search_errors_become_model_fitting_errors(monkeypatch, trending_values) -> None:
    def failing_search(*args, **kwargs):
        raise ValueError("Could not successfully fit a viable ARIMA model")

    monkeypatch.setattr("usage_forecast.arima_model.auto_arima", failing_search)

    with pytest.raises(ModelFittingError, match="viable ARIMA model"):
        ArimaModel(ModelConfig(auto=True)).fit(trending_values)


def test_ets_backend_errors_become_model_fitting_errors(monkeypatch, trending_values) -> None:
    monkeypatch.setattr("usage_forecast.ets_model.ExponentialSmoothing", ExplodingEstimator)

    with pytest.raises(ModelFittingError) as exc_info:
        EtsModel(ModelConfig()).fit(trending_values)

    assert isinstance(exc_info.value.__cause__, IndexError)
