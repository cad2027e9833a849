from __future__ import annotations

import numpy as np
from scipy.stats import norm

from sabr_smile.exceptions import ValidationError
from sabr_smile.typing import ArrayLike, FloatArray


def black_std_dev_derivative(
    strike: ArrayLike,
    forward: float,
    std_dev: ArrayLike,
    discount: float = 1.0,
) -> FloatArray:
    """
    Black (vega-like) sensitivity to the total standard deviation
    ``sigma*sqrt(T)``.

        dPrice/dStdDev = discount * F * phi(d1),
        d1 = ln(F/K)/stdDev + stdDev/2

    The value is the same for calls and puts. Entries with ``std_dev == 0`` or
    ``strike == 0`` are 0.
    """
    k_arr = np.asarray(strike, dtype=np.float64)
    s_arr = np.asarray(std_dev, dtype=np.float64)
    if np.any(s_arr < 0.0):
        raise ValidationError("stdDev must be non-negative")
    if not discount > 0.0:
        raise ValidationError(f"discount must be positive: {discount} not allowed")
    if not forward > 0.0:
        raise ValidationError(f"forward must be positive: {forward} not allowed")

    k, s = np.broadcast_arrays(np.atleast_1d(k_arr), np.atleast_1d(s_arr))
    degenerate = (s == 0.0) | (k == 0.0)
    with np.errstate(divide="ignore", invalid="ignore"):
        d1 = np.log(forward / k) / s + 0.5 * s
    out = np.where(degenerate, 0.0, discount * forward * norm.pdf(d1))
    out = np.asarray(out, dtype=np.float64)

    if k_arr.ndim == 0 and s_arr.ndim == 0:
        return np.asarray(out[0], dtype=np.float64)
    return out
