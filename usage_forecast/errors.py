"""
Pipeline Errors

Exception and warning types raised by the loading, forecasting and
evaluation steps.
"""

from typing import Any, Dict, Optional


class UsageForecastError(Exception):
    """Base class for pipeline errors."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)


class MalformedInputError(UsageForecastError, ValueError):
    """Raised when a data row cannot be parsed by the strict loader."""

    def __init__(self, message: str, line_number: int, line: str):
        self.line_number = line_number
        self.line = line
        super().__init__(
            f'{message} at line {line_number}: "{line}"',
            {'line_number': line_number, 'line': line}
        )


class InsufficientDataError(UsageForecastError, ValueError):
    """Raised when a series is too short to fit a model."""

    def __init__(self, n_points: int, minimum: int):
        self.n_points = n_points
        self.minimum = minimum
        super().__init__(
            f"Time series is too short ({n_points} < {minimum} points) to train a model.",
            {'n_points': n_points, 'minimum': minimum}
        )


class ModelFittingError(UsageForecastError, RuntimeError):
    """Raised when a model backend cannot fit the series."""


class InvalidInputError(UsageForecastError, ValueError):
    """Raised when a caller passes arguments that cannot be evaluated."""


class SkippedRowWarning(UserWarning):
    """Emitted when the lenient loader drops an unparseable row."""
