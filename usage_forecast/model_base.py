"""Shared model backend interface and configuration."""

from abc import ABC, abstractmethod
from dataclasses import asdict, dataclass
from typing import Dict, Sequence, Tuple

import numpy as np


@dataclass(frozen=True)
class ModelConfig:
    """ARIMA-style orders handed to a model backend"""

    p: int = 2
    d: int = 1
    q: int = 2
    P: int = 0
    D: int = 0
    Q: int = 0
    s: int = 0
    auto: bool = True

    @classmethod
    def from_dict(cls, values: Dict) -> "ModelConfig":
        return cls(**{key: values[key] for key in cls.__dataclass_fields__ if key in values})

    @property
    def order(self) -> Tuple[int, int, int]:
        return (self.p, self.d, self.q)

    @property
    def seasonal_order(self) -> Tuple[int, int, int, int]:
        return (self.P, self.D, self.Q, self.s)

    def to_dict(self) -> Dict:
        return asdict(self)


class FittedModel(ABC):
    """A model fitted to one series, able to extend it into the future"""

    @abstractmethod
    def predict(self, steps: int) -> Tuple[np.ndarray, np.ndarray]:
        """
        Forecast `steps` values past the end of the fitted series

        Returns:
            (point predictions, per-step error estimates), both of length steps
        """


class TimeSeriesModel(ABC):
    """Statistical backend that fits a numeric series"""

    name = 'base'

    def __init__(self, config: ModelConfig):
        self.config = config

    @abstractmethod
    def fit(self, values: Sequence[float]) -> FittedModel:
        """Fit the model, raising ModelFittingError if the series cannot be modeled"""
