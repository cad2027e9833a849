"""Closed-form model formulas."""

from .black import black_std_dev_derivative
from .sabr import sabr_volatility, unsafe_sabr_volatility, validate_sabr_parameters

__all__ = [
    "black_std_dev_derivative",
    "sabr_volatility",
    "unsafe_sabr_volatility",
    "validate_sabr_parameters",
]
