"""
Daily Usage Forecasting System

Loads timestamped usage readings, groups them into daily totals, forecasts
the daily series with a statistical model and scores the forecast against
held-out actuals and a naive last-value baseline.
"""

__version__ = "1.0.0"
__author__ = "Forecasting Team"
