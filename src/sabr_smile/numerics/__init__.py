# src/sabr_smile/numerics/__init__.py
"""
Numerical building blocks (advanced API).

Top-level package `sabr_smile` exposes the everyday calibration API.
This subpackage exposes the optimizer adapters and the parameter projection.
"""

from .optimization import (
    Constraint,
    CostFunction,
    LevenbergMarquardt,
    NoConstraint,
    OptimizationMethod,
    Problem,
    Simplex,
    StationarityTracker,
    default_optimization_method,
)
from .projection import ParameterProjection

__all__ = [
    # Optimization
    "CostFunction",
    "Constraint",
    "NoConstraint",
    "Problem",
    "OptimizationMethod",
    "Simplex",
    "LevenbergMarquardt",
    "StationarityTracker",
    "default_optimization_method",
    # Projection
    "ParameterProjection",
]
