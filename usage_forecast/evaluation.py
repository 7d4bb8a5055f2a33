"""
Evaluation Module

Forecast error metrics:
- MAE (Mean Absolute Error)
- RMSE (Root Mean Square Error)
- MAPE (Mean Absolute Percentage Error)

plus a naive last-value baseline to compare a model forecast against.
"""

import pandas as pd
import numpy as np
from typing import Dict, Optional, Sequence, Tuple

from usage_forecast.errors import InvalidInputError


def _as_pair(actual: Sequence[float], predicted: Sequence[float]) -> Tuple[np.ndarray, np.ndarray]:
    actual = np.asarray(actual, dtype=float)
    predicted = np.asarray(predicted, dtype=float)

    if actual.shape != predicted.shape:
        raise InvalidInputError(
            f"Actual and predicted lengths differ ({len(actual)} vs {len(predicted)})",
            {'actual_length': len(actual), 'predicted_length': len(predicted)}
        )

    return actual, predicted


def calculate_mae(actual: Sequence[float], predicted: Sequence[float]) -> float:
    """
    Calculate Mean Absolute Error

    Args:
        actual: Actual values
        predicted: Predicted values

    Returns:
        MAE (NaN for empty input)
    """
    actual, predicted = _as_pair(actual, predicted)
    if actual.size == 0:
        return np.nan

    return float(np.mean(np.abs(actual - predicted)))


def calculate_rmse(actual: Sequence[float], predicted: Sequence[float]) -> float:
    """
    Calculate Root Mean Square Error

    Args:
        actual: Actual values
        predicted: Predicted values

    Returns:
        RMSE (NaN for empty input)
    """
    actual, predicted = _as_pair(actual, predicted)
    if actual.size == 0:
        return np.nan

    return float(np.sqrt(np.mean((actual - predicted)**2)))


def calculate_mape(actual: Sequence[float], predicted: Sequence[float]) -> float:
    """
    Calculate Mean Absolute Percentage Error

    Points with a zero actual add nothing to the error sum but still count
    in the denominator, so zeros pull the score towards 0.

    Args:
        actual: Actual values
        predicted: Predicted values

    Returns:
        MAPE percentage (NaN for empty input)
    """
    actual, predicted = _as_pair(actual, predicted)
    n = actual.size
    if n == 0:
        return np.nan

    mask = actual != 0
    pct_errors = np.abs((actual[mask] - predicted[mask]) / actual[mask])

    return float(np.sum(pct_errors) / n * 100)


def naive_baseline(history: Sequence[float], n: int) -> np.ndarray:
    """
    Repeat the last training value n times

    Args:
        history: Training values in time order
        n: Number of evaluation steps

    Returns:
        Baseline predictions
    """
    history = np.asarray(history, dtype=float)
    if history.size == 0:
        raise InvalidInputError("Baseline needs at least one training value")

    return np.full(n, history[-1])


def evaluate_forecast(actual: Sequence[float],
                      predicted: Sequence[float],
                      label: Optional[str] = None) -> Dict[str, float]:
    """
    Compute MAE, RMSE and MAPE for one forecast

    Args:
        actual: Actual values
        predicted: Predicted values
        label: Name printed with the metrics

    Returns:
        Dictionary of metrics
    """
    mae = calculate_mae(actual, predicted)
    rmse = calculate_rmse(actual, predicted)
    mape = calculate_mape(actual, predicted)

    metrics = {
        'label': label,
        'n_samples': len(actual),
        'MAE': round(mae, 2),
        'RMSE': round(rmse, 2),
        'MAPE': round(mape, 2),
    }

    name = f"{label:<9} - " if label else ""
    print(f"  {name}MAE: {mae:.2f}, RMSE: {rmse:.2f}, MAPE: {mape:.2f}%")

    return metrics


def compare_with_baseline(history: Sequence[float],
                          actual: Sequence[float],
                          predicted: Sequence[float],
                          model_label: str = 'ARIMA') -> pd.DataFrame:
    """
    Score a model forecast next to the naive last-value baseline

    Args:
        history: Training values (the last one is the baseline)
        actual: Held-out actual values
        predicted: Model predictions for the same steps
        model_label: Row label for the model

    Returns:
        DataFrame with one row for the baseline and one for the model
    """
    actual, predicted = _as_pair(actual, predicted)

    print("="*60)
    print("EVALUATION ON TEST SET")
    print("="*60)

    baseline = naive_baseline(history, len(actual))
    print(f"  Baseline value: {np.asarray(history, dtype=float)[-1]:.3f}")

    results = [
        evaluate_forecast(actual, baseline, 'Baseline'),
        evaluate_forecast(actual, predicted, model_label),
    ]

    return pd.DataFrame(results)
