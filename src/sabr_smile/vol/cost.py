from __future__ import annotations

from dataclasses import dataclass

import numpy as np
from numpy.typing import NDArray

from sabr_smile.exceptions import ValidationError
from sabr_smile.models.sabr import unsafe_sabr_volatility
from sabr_smile.numerics.projection import ParameterProjection
from sabr_smile.types import SABRParams
from sabr_smile.typing import ArrayLike
from sabr_smile.vol.transform import SABRParametersTransformation


@dataclass(frozen=True, slots=True)
class SABRCostFunction:
    """
    Weighted least-squares SABR smile error on the reduced search space.

    Maps a reduced unconstrained vector ``x`` to SABR parameters via
    ``transform.direct(projection.include(x))``; fixed coordinates take
    ``fixed_values`` exactly. Nothing outside this object is touched.

        value(x)  = sum_i w_i * (model_i - market_i)^2
        values(x) = sqrt(w_i) * (model_i - market_i)      (sum of squares == value)
    """

    strikes: NDArray[np.float64]
    volatilities: NDArray[np.float64]
    weights: NDArray[np.float64]
    forward: float
    expiry: float
    transform: SABRParametersTransformation
    projection: ParameterProjection
    fixed_values: NDArray[np.float64]

    def __post_init__(self) -> None:
        n = self.strikes.shape
        if self.volatilities.shape != n or self.weights.shape != n:
            raise ValidationError(
                "strikes, volatilities and weights must have the same shape"
            )
        if self.fixed_values.shape != (4,):
            raise ValidationError("fixed_values must have 4 entries")

    def parameters(self, x: ArrayLike) -> NDArray[np.float64]:
        y = self.transform.direct(self.projection.include(x))
        fixed = self.projection.fixed
        y[fixed] = self.fixed_values[fixed]
        return y

    def params(self, x: ArrayLike) -> SABRParams:
        alpha, beta, nu, rho = map(float, self.parameters(x))
        return SABRParams(alpha=alpha, beta=beta, nu=nu, rho=rho)

    def errors(self, x: ArrayLike) -> NDArray[np.float64]:
        alpha, beta, nu, rho = self.parameters(x)
        model = unsafe_sabr_volatility(
            self.strikes, self.forward, self.expiry, alpha, beta, nu, rho
        )
        return model - self.volatilities

    def value(self, x: ArrayLike) -> float:
        err = self.errors(x)
        return float(np.sum(self.weights * err * err))

    def values(self, x: ArrayLike) -> NDArray[np.float64]:
        return self.errors(x) * np.sqrt(self.weights)
