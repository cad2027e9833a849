"""
sabr_smile

SABR smile calibration to discrete (strike, volatility) quotes.

The package exposes the main user-facing objects at the top level, so you
can write, for example:

    from sabr_smile import SABRInterpolation, EndCriteria
"""

from .config import EndCriteria, default_end_criteria
from .exceptions import DomainError, UnsupportedOperationError, ValidationError
from .models import black_std_dev_derivative, sabr_volatility
from .numerics import LevenbergMarquardt, Simplex
from .types import (
    CalibrationPhase,
    EndCriteriaType,
    MarketPoint,
    SABRParams,
    SimpleQuote,
)
from .vol import SABR, SABRFitResult, SABRInterpolation, SABRSmile

__all__ = [
    # Types
    "CalibrationPhase",
    "EndCriteriaType",
    "MarketPoint",
    "SABRParams",
    "SimpleQuote",
    # Config
    "EndCriteria",
    "default_end_criteria",
    # Errors
    "DomainError",
    "ValidationError",
    "UnsupportedOperationError",
    # Formulas
    "sabr_volatility",
    "black_std_dev_derivative",
    # Optimizers
    "Simplex",
    "LevenbergMarquardt",
    # Calibration
    "SABR",
    "SABRFitResult",
    "SABRInterpolation",
    "SABRSmile",
]
