from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import TypeAlias

import numpy as np
from numpy.typing import NDArray

from sabr_smile.exceptions import DomainError
from sabr_smile.models.black import black_std_dev_derivative
from sabr_smile.typing import ArrayLike

# (strike, forward, std_dev) -> sensitivity, vectorised over strike/std_dev
Sensitivity: TypeAlias = Callable[[ArrayLike, float, ArrayLike], ArrayLike]


def uniform_weights(n: int) -> NDArray[np.float64]:
    if n < 0:
        raise ValueError("n must be >= 0")
    if n == 0:
        return np.zeros(0, dtype=np.float64)
    return np.full(n, 1.0 / n, dtype=np.float64)


def vega_weights(
    strikes: ArrayLike,
    volatilities: ArrayLike,
    forward: float,
    expiry: float,
    sensitivity: Sensitivity = black_std_dev_derivative,
) -> NDArray[np.float64]:
    """
    Sensitivity weights ``s(K_i, F, sigma_i*sqrt(T))`` normalized to sum to 1.

    Raises
    ------
    DomainError
        If the weights do not have a finite, nonzero sum.
    """
    k = np.asarray(strikes, dtype=np.float64).reshape(-1)
    vol = np.asarray(volatilities, dtype=np.float64).reshape(-1)
    std_dev = np.sqrt(vol * vol * expiry)

    raw = np.asarray(sensitivity(k, forward, std_dev), dtype=np.float64).reshape(-1)
    if raw.shape != k.shape:
        raise ValueError("sensitivity must return one value per strike")

    total = float(np.sum(raw))
    if total == 0.0 or not np.isfinite(total):
        raise DomainError(f"cannot normalize vega weights: sum of weights is {total}")
    return raw / total


@dataclass(frozen=True, slots=True)
class WeightPolicy:
    """Uniform or vega weighting of smile residuals."""

    vega_weighted: bool = False
    sensitivity: Sensitivity = black_std_dev_derivative

    def weights(
        self,
        strikes: ArrayLike,
        volatilities: ArrayLike,
        forward: float,
        expiry: float,
    ) -> NDArray[np.float64]:
        if self.vega_weighted:
            return vega_weights(
                strikes, volatilities, forward, expiry, sensitivity=self.sensitivity
            )
        return uniform_weights(int(np.asarray(strikes).size))
