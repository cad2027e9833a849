from __future__ import annotations

from dataclasses import dataclass

import numpy as np
from numpy.typing import NDArray

from sabr_smile.exceptions import DomainError
from sabr_smile.typing import ArrayLike

EPS1 = 1e-7
EPS2 = 0.9999


@dataclass(frozen=True, slots=True)
class SABRParametersTransformation:
    """
    Bijection between R^4 and the admissible SABR parameter set.

    x = [x_alpha, x_beta, x_nu, x_rho]  (unconstrained)

      alpha = x_alpha^2 + eps1          in [eps1, inf)
      beta  = exp(-x_beta^2)            in (0, 1]
      nu    = x_nu^2 + eps1             in [eps1, inf)
      rho   = eps2 * sin(x_rho)         in [-eps2, eps2]

    ``inverse`` picks the branch with x_alpha, x_beta, x_nu >= 0 and
    x_rho in [-pi/2, pi/2].
    """

    eps1: float = EPS1
    eps2: float = EPS2

    def direct(self, x: ArrayLike) -> NDArray[np.float64]:
        x = np.asarray(x, dtype=np.float64).reshape(4)
        return np.array(
            [
                x[0] * x[0] + self.eps1,
                np.exp(-(x[1] * x[1])),
                x[2] * x[2] + self.eps1,
                self.eps2 * np.sin(x[3]),
            ],
            dtype=np.float64,
        )

    def inverse(
        self, y: ArrayLike, *, where: ArrayLike | None = None
    ) -> NDArray[np.float64]:
        """
        Unconstrained preimage of ``y``.

        Only coordinates selected by the boolean mask ``where`` (default: all)
        are inverted and domain-checked; the others are returned as 0.0.

        Raises
        ------
        DomainError
            If a selected coordinate lies outside the range of ``direct``.
        """
        y = np.asarray(y, dtype=np.float64).reshape(4)
        mask = (
            np.ones(4, dtype=bool)
            if where is None
            else np.asarray(where, dtype=bool).reshape(4)
        )
        out = np.zeros(4, dtype=np.float64)

        if mask[0]:
            out[0] = self._sqrt_shifted(y[0], "alpha")
        if mask[1]:
            if not 0.0 < y[1] <= 1.0:
                raise DomainError(
                    f"beta must be in (0, 1] to be transformed: {y[1]} not allowed"
                )
            out[1] = np.sqrt(-np.log(y[1]))
        if mask[2]:
            out[2] = self._sqrt_shifted(y[2], "nu")
        if mask[3]:
            if not abs(y[3]) <= self.eps2:
                raise DomainError(
                    f"rho must be in [-{self.eps2}, {self.eps2}] to be transformed: "
                    f"{y[3]} not allowed"
                )
            out[3] = np.arcsin(y[3] / self.eps2)
        return out

    def _sqrt_shifted(self, v: float, name: str) -> float:
        if not v >= self.eps1:
            raise DomainError(
                f"{name} must be >= {self.eps1} to be transformed: {v} not allowed"
            )
        return float(np.sqrt(v - self.eps1))
