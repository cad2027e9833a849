# src/sabr_smile/vol/interpolation.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol, runtime_checkable

import numpy as np

from sabr_smile.exceptions import DomainError, UnsupportedOperationError
from sabr_smile.models.sabr import sabr_volatility
from sabr_smile.types import SABRParams
from sabr_smile.typing import ArrayLike, FloatArray


@runtime_checkable
class Interpolation(Protocol):
    """
    One-dimensional "evaluate at point" capability.

    Required:
        - value(x): evaluation without range checks
        - __call__(x, allow_extrapolation): range-checked evaluation
        - x_min / x_max: the range covered by the data
        - primitive / derivative / second_derivative (may be unsupported)
    """

    @property
    def x_min(self) -> float: ...

    @property
    def x_max(self) -> float: ...

    def is_in_range(self, x: float) -> bool: ...

    def value(self, x: ArrayLike) -> FloatArray: ...

    def __call__(
        self, x: ArrayLike, allow_extrapolation: bool = False
    ) -> FloatArray: ...

    def primitive(self, x: float) -> float: ...

    def derivative(self, x: float) -> float: ...

    def second_derivative(self, x: float) -> float: ...


def check_range(
    interp: Interpolation, x: ArrayLike, allow_extrapolation: bool
) -> None:
    if allow_extrapolation:
        return
    xs = np.atleast_1d(np.asarray(x, dtype=np.float64))
    for xi in xs:
        if not interp.is_in_range(float(xi)):
            raise DomainError(
                f"interpolation range is [{interp.x_min}, {interp.x_max}]: "
                f"extrapolation at {float(xi)} not allowed"
            )


@dataclass(frozen=True, slots=True)
class SABRSmile:
    """Analytic SABR smile slice evaluated pointwise in strike.

    A value object: expiry, forward and parameters are frozen. ``x_min`` /
    ``x_max`` only matter for range-checked calls.
    """

    expiry: float
    forward: float
    params: SABRParams
    x_min: float = 0.0
    x_max: float = float("inf")

    def is_in_range(self, x: float) -> bool:
        return self.x_min <= x <= self.x_max

    def value(self, x: ArrayLike) -> FloatArray:
        p = self.params
        return sabr_volatility(
            x, self.forward, self.expiry, p.alpha, p.beta, p.nu, p.rho
        )

    def __call__(self, x: ArrayLike, allow_extrapolation: bool = False) -> FloatArray:
        check_range(self, x, allow_extrapolation)
        return self.value(x)

    def primitive(self, x: float) -> float:
        raise UnsupportedOperationError("SABR primitive not implemented")

    def derivative(self, x: float) -> float:
        raise UnsupportedOperationError("SABR derivative not implemented")

    def second_derivative(self, x: float) -> float:
        raise UnsupportedOperationError("SABR secondDerivative not implemented")
