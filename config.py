"""
Configuration File for Usage Forecasting Pipeline

Central place to configure all parameters for the forecasting system.
Modify values here to experiment with different settings.
"""

# ==============================================================================
# DATA PATHS
# ==============================================================================
DATA_CONFIG = {
    'raw_input_path': 'data/two_months/trainingData.csv',  # Hourly readings to group by day
    'grouped_output_path': 'data/two_months/trainingData-grouped-by-day.csv',
    'training_path': 'data/3_months/trainingData-grouped-by-day.csv',
    'testing_path': 'data/3_months/testingData-grouped-by-day.csv'
}

# ==============================================================================
# CSV LOADING
# ==============================================================================
LOADER_CONFIG = {
    'delimiter': ',',
    # First line is treated as a header if it contains any of these (case-insensitive)
    'header_keywords': ['timepoint', 'usage', 'timestamp', 'date', 'value'],
    # Timezone-aware timestamps are converted to this zone, then made naive
    'timezone': 'UTC'
}

# ==============================================================================
# FORECAST CONFIGURATION
# ==============================================================================
FORECAST_CONFIG = {
    'forecast_horizon': 11,  # Number of steps (days) to forecast
    'model': 'arima',        # 'arima' or 'ets'

    # Accepted for compatibility but not passed to the model
    'seasonal': True,
    'seasonal_period': 7     # 7 for weekly pattern on daily data
}

# ==============================================================================
# AGGREGATION CONFIGURATION
# ==============================================================================
AGGREGATION_CONFIG = {
    'output_header': ['Timepoint', 'Usage'],
    'float_precision': 4  # Decimal places written for daily totals
}

# ==============================================================================
# OUTPUT CONFIGURATION
# ==============================================================================
OUTPUT_CONFIG = {
    'history_tail': 5,        # History points printed before the forecast
    'save_plot': False,
    'plot_path': 'outputs/plots/forecast_vs_actual.png'
}
