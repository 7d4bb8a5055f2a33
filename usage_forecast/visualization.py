"""
Visualization Module

Plots the tail of the history, the forecast with its error band and,
when available, the held-out actuals.
"""

from typing import Optional

import pandas as pd
import matplotlib
matplotlib.use('Agg')
import matplotlib.pyplot as plt
import seaborn as sns

from usage_forecast.forecast import ForecastResult

# Set style
sns.set_style("whitegrid")


def plot_forecast_vs_actual(result: ForecastResult,
                            actual: Optional[pd.DataFrame] = None,
                            history_points: int = 60,
                            save_path: Optional[str] = None) -> plt.Figure:
    """
    Plot history, forecast and actual time series

    Args:
        result: ForecastResult from SeriesForecaster.forecast
        actual: Optional held-out series (timestamp, value columns)
        history_points: Number of trailing history points to show
        save_path: Path to save plot

    Returns:
        The matplotlib figure (already closed)
    """
    fig, ax = plt.subplots(figsize=(15, 6))

    history = result.history.tail(history_points)
    forecast = result.forecast

    ax.plot(history['timestamp'], history['value'],
            label='Historical', alpha=0.5, color='gray', linewidth=1)

    if actual is not None and not actual.empty:
        ax.plot(actual['timestamp'], actual['value'],
                label='Actual', linewidth=2, marker='o', markersize=4, alpha=0.8)

    ax.plot(forecast['timestamp'], forecast['predicted'],
            label=f'{result.model_name.upper()} Forecast', linewidth=2, marker='s',
            markersize=4, linestyle='--', alpha=0.8)
    ax.fill_between(forecast['timestamp'],
                    forecast['predicted'] - forecast['error'],
                    forecast['predicted'] + forecast['error'],
                    alpha=0.2, label='± Error')

    ax.axvline(x=forecast['timestamp'].iloc[0], color='red',
               linestyle=':', alpha=0.5, label='Forecast Start')

    ax.set_title('Usage: Actual vs Forecast', fontsize=14, fontweight='bold')
    ax.set_xlabel('Date', fontsize=12)
    ax.set_ylabel('Usage', fontsize=12)
    ax.legend(loc='best', fontsize=10)
    ax.grid(True, alpha=0.3)
    fig.autofmt_xdate(rotation=45)
    fig.tight_layout()

    if save_path:
        fig.savefig(save_path, dpi=150, bbox_inches='tight')
        print(f"Plot saved: {save_path}")

    plt.close(fig)

    return fig
