from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from sabr_smile.exceptions import ValidationError


class EndCriteriaType(str, Enum):
    """Reason an optimization method stopped.

    This is a report, not a verdict: ``MAX_ITERATIONS`` still comes with the
    best point found so far.
    """

    NONE = "none"
    MAX_ITERATIONS = "max_iterations"
    STATIONARY_POINT = "stationary_point"
    STATIONARY_FUNCTION_VALUE = "stationary_function_value"
    STATIONARY_FUNCTION_ACCURACY = "stationary_function_accuracy"
    ZERO_GRADIENT_NORM = "zero_gradient_norm"
    UNKNOWN = "unknown"


@dataclass(frozen=True, slots=True)
class MarketPoint:
    """One observed (strike, implied volatility) quote of a smile."""

    strike: float
    volatility: float

    def __post_init__(self) -> None:
        if self.strike <= 0.0:
            raise ValidationError(f"strike must be positive: {self.strike} not allowed")


@dataclass(frozen=True, slots=True)
class SABRParams:
    """SABR model parameters.

    Parameters
    ----------
    alpha : float
        Initial volatility level, ``alpha > 0``.
    beta : float
        CEV exponent, ``0 <= beta <= 1``.
    nu : float
        Volatility of volatility, ``nu >= 0``.
    rho : float
        Correlation between forward and volatility, ``-1 < rho < 1``.
    """

    alpha: float
    beta: float
    nu: float
    rho: float

    def as_tuple(self) -> tuple[float, float, float, float]:
        return (self.alpha, self.beta, self.nu, self.rho)


class SimpleQuote:
    """Mutable market quote cell.

    Lets a forward be shared by reference: anything holding the quote sees
    ``set_value`` updates on its next read.
    """

    __slots__ = ("_value",)

    def __init__(self, value: float) -> None:
        self._value = float(value)

    @property
    def value(self) -> float:
        return self._value

    def set_value(self, value: float) -> float:
        """Store a new value and return the change."""
        diff = float(value) - self._value
        self._value = float(value)
        return diff

    def __call__(self) -> float:
        return self._value

    def __repr__(self) -> str:
        return f"SimpleQuote({self._value!r})"


class CalibrationPhase(str, Enum):
    """Lifecycle of a smile calibrator."""

    UNINITIALIZED = "uninitialized"
    CALIBRATING = "calibrating"
    CALIBRATED = "calibrated"
    SKIPPED = "skipped"
