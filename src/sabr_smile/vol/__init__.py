"""Smile calibration: transform, weighting, cost function and calibrator."""

from .cost import SABRCostFunction
from .interpolation import Interpolation, SABRSmile
from .sabr import (
    DEFAULT_ALPHA,
    DEFAULT_BETA,
    DEFAULT_NU,
    DEFAULT_RHO,
    SABR,
    SABRFitResult,
    SABRInterpolation,
)
from .transform import EPS1, EPS2, SABRParametersTransformation
from .weights import WeightPolicy, uniform_weights, vega_weights

__all__ = [
    "DEFAULT_ALPHA",
    "DEFAULT_BETA",
    "DEFAULT_NU",
    "DEFAULT_RHO",
    "EPS1",
    "EPS2",
    "Interpolation",
    "SABR",
    "SABRCostFunction",
    "SABRFitResult",
    "SABRInterpolation",
    "SABRParametersTransformation",
    "SABRSmile",
    "WeightPolicy",
    "uniform_weights",
    "vega_weights",
]
