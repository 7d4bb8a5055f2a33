"""
Main Forecasting Pipeline

Two independent passes over two-column usage CSV files:

Grouping pass (offline preprocessing):
1. Load raw readings (bad rows skipped)
2. Group into daily totals and write the grouped CSV

Forecast pass:
1. Load training data
2. Fit model and generate forecast
3. Report history tail and forecast
4. Evaluate model and naive baseline on test data
5. Create visualization (optional)
"""

import argparse
import os
import sys
from datetime import datetime
from typing import Dict, List, Optional, Sequence

# Import configuration
from config import (
    DATA_CONFIG, FORECAST_CONFIG, OUTPUT_CONFIG
)

# Import custom modules
from usage_forecast.aggregation import group_usage_by_day
from usage_forecast.data_loader import load_time_series
from usage_forecast.errors import UsageForecastError
from usage_forecast.evaluation import compare_with_baseline
from usage_forecast.forecast import MODEL_REGISTRY, SeriesForecaster


def run_aggregation(input_path: Optional[str] = None,
                    output_path: Optional[str] = None) -> Dict:
    """Grouping pass: raw readings -> daily totals CSV"""
    input_path = input_path or DATA_CONFIG['raw_input_path']
    output_path = output_path or DATA_CONFIG['grouped_output_path']

    return group_usage_by_day(input_path, output_path)


class ForecastingPipeline:
    """Forecast pass (configured via config.py, overridable per run)"""

    def __init__(self, overrides: Optional[Dict] = None):
        """
        Initialize pipeline with config from config.py

        Args:
            overrides: Optional values replacing config entries
                       (training_path, testing_path, forecast_horizon,
                       model, save_plot, plot_path, history_tail)
        """
        settings = {
            'training_path': DATA_CONFIG['training_path'],
            'testing_path': DATA_CONFIG['testing_path'],
            'forecast_horizon': FORECAST_CONFIG['forecast_horizon'],
            'model': FORECAST_CONFIG['model'],
            'seasonal': FORECAST_CONFIG['seasonal'],
            'seasonal_period': FORECAST_CONFIG['seasonal_period'],
            'history_tail': OUTPUT_CONFIG['history_tail'],
            'save_plot': OUTPUT_CONFIG['save_plot'],
            'plot_path': OUTPUT_CONFIG['plot_path'],
        }
        settings.update({key: value for key, value in (overrides or {}).items() if value is not None})

        self.training_path = settings['training_path']
        self.testing_path = settings['testing_path']
        self.forecast_horizon = settings['forecast_horizon']
        self.model_name = settings['model']
        self.seasonal = settings['seasonal']
        self.seasonal_period = settings['seasonal_period']
        self.history_tail = settings['history_tail']
        self.save_plot = settings['save_plot']
        self.plot_path = settings['plot_path']

        # Pipeline components (will be populated)
        self.train_df = None
        self.test_df = None
        self.result = None
        self.metrics_df = None

    def run_complete_pipeline(self) -> Dict:
        """
        Run complete forecast pass

        Returns:
            Dictionary with pipeline results
        """
        print("\n" + "="*80)
        print("DAILY USAGE FORECASTING PIPELINE")
        print("="*80)
        print(f"Start time: {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}")
        print("="*80 + "\n")

        # Step 1: Data Loading
        self.step_1_load_data()

        # Step 2: Forecast
        self.step_2_generate_forecast()

        # Step 3: Report
        self.step_3_report_forecast()

        # Step 4: Evaluate
        if self.testing_path:
            self.step_4_evaluate()

        # Step 5: Visualize
        if self.save_plot:
            self.step_5_visualize()

        print("\n" + "="*80)
        print("PIPELINE COMPLETE!")
        print("="*80)
        print(f"End time: {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}")
        print("="*80 + "\n")

        return {
            'result': self.result,
            'metrics': self.metrics_df,
        }

    def step_1_load_data(self):
        """Step 1: Load training data"""
        print("\n" + "="*80)
        print("STEP 1: DATA LOADING")
        print("="*80)

        self.train_df = load_time_series(self.training_path)
        print(f"Loaded {len(self.train_df)} points from {self.training_path}")

        print("\n✓ Step 1 complete")

    def step_2_generate_forecast(self):
        """Step 2: Fit model and forecast"""
        print("\n" + "="*80)
        print(f"STEP 2: {self.model_name.upper()} FORECAST ({self.forecast_horizon} STEPS)")
        print("="*80)

        forecaster = SeriesForecaster(model_name=self.model_name)
        self.result = forecaster.forecast(
            self.train_df,
            self.forecast_horizon,
            seasonal=self.seasonal,
            seasonal_period=self.seasonal_period
        )

        print("\n✓ Step 2 complete")

    def step_3_report_forecast(self):
        """Step 3: Print model info, history tail and forecast"""
        print("\n" + "="*80)
        print("STEP 3: FORECAST REPORT")
        print("="*80)

        print("\n=== Model Info ===")
        print(self.result.model_info)

        print(f"\n=== Last {self.history_tail} history points ===")
        for row in self.result.history.tail(self.history_tail).itertuples():
            print(f"{row.timestamp:%Y-%m-%d} -> {row.value:.3f}")

        print(f"\n=== Forecast (next {len(self.result.forecast)} steps) ===")
        for row in self.result.forecast.itertuples():
            print(f"{row.timestamp:%Y-%m-%d} -> pred={row.predicted:.3f}, error≈{row.error:.3f}")

        print("\n✓ Step 3 complete")

    def step_4_evaluate(self):
        """Step 4: Evaluate model and naive baseline on test data"""
        print("\n" + "="*80)
        print("STEP 4: FORECAST EVALUATION")
        print("="*80)

        self.test_df = load_time_series(self.testing_path)
        print(f"Loaded {len(self.test_df)} test points from {self.testing_path}")
        if not self.test_df.empty:
            print(f"Test period: {self.test_df['timestamp'].min():%Y-%m-%d} → "
                  f"{self.test_df['timestamp'].max():%Y-%m-%d}\n")

        self.metrics_df = compare_with_baseline(
            self.train_df['value'].to_numpy(),
            self.test_df['value'].to_numpy(),
            self.result.forecast['predicted'].to_numpy(),
            model_label=self.result.model_name.upper()
        )

        print("\n✓ Step 4 complete")

    def step_5_visualize(self):
        """Step 5: Create visualization"""
        print("\n" + "="*80)
        print("STEP 5: VISUALIZATION")
        print("="*80)

        from usage_forecast.visualization import plot_forecast_vs_actual

        plot_dir = os.path.dirname(self.plot_path)
        if plot_dir:
            os.makedirs(plot_dir, exist_ok=True)

        plot_forecast_vs_actual(self.result, self.test_df, save_path=self.plot_path)

        print("\n✓ Step 5 complete")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Group usage readings by day and forecast daily usage.")
    subparsers = parser.add_subparsers(dest='command', required=True)

    aggregate = subparsers.add_parser('aggregate', help="Group raw readings into daily totals.")
    aggregate.add_argument('--input', dest='input_path', help="Raw readings CSV (timestamp,value).")
    aggregate.add_argument('--output', dest='output_path', help="Daily totals CSV to write.")

    forecast = subparsers.add_parser('forecast', help="Forecast daily usage and evaluate it.")
    forecast.add_argument('--train', dest='training_path', help="Training CSV.")
    forecast.add_argument('--test', dest='testing_path', help="Testing CSV with held-out actuals.")
    forecast.add_argument('--horizon', dest='forecast_horizon', type=int, help="Number of steps to forecast.")
    forecast.add_argument('--model', choices=sorted(MODEL_REGISTRY), help="Model backend.")
    forecast.add_argument('--plot', dest='plot_path', help="Save a forecast plot to this path.")

    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Main entry point - defaults come from config.py"""
    args: List[str] = list(sys.argv[1:] if argv is None else argv)
    if not args:
        args = ['forecast']

    options = build_parser().parse_args(args)

    try:
        if options.command == 'aggregate':
            run_aggregation(options.input_path, options.output_path)
        else:
            overrides = {
                'training_path': options.training_path,
                'testing_path': options.testing_path,
                'forecast_horizon': options.forecast_horizon,
                'model': options.model,
                'plot_path': options.plot_path,
                'save_plot': True if options.plot_path else None,
            }
            pipeline = ForecastingPipeline(overrides)
            pipeline.run_complete_pipeline()
    except (UsageForecastError, OSError) as exc:
        print(f"Error: {exc}")
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
