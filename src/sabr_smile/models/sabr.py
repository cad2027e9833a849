"""Hagan et al. (2002) lognormal SABR implied volatility."""

from __future__ import annotations

import numpy as np

from sabr_smile.exceptions import ValidationError
from sabr_smile.typing import ArrayLike, FloatArray

MACHINE_EPS = float(np.finfo(np.float64).eps)

# forward and strike are treated as equal within this many machine epsilons
CLOSE_ULPS = 42.0
# below z**2 <= SMALL_Z_ULPS * eps the z/x(z) ratio is replaced by its expansion
SMALL_Z_ULPS = 10.0


def validate_sabr_parameters(alpha: float, beta: float, nu: float, rho: float) -> None:
    if not alpha > 0.0:
        raise ValidationError(f"alpha must be positive: {alpha} not allowed")
    if not 0.0 <= beta <= 1.0:
        raise ValidationError(f"beta must be in [0.0, 1.0]: {beta} not allowed")
    if not nu >= 0.0:
        raise ValidationError(f"nu must be non negative: {nu} not allowed")
    if not rho * rho < 1.0:
        raise ValidationError(f"rho square must be less than one: {rho} not allowed")


def _log_moneyness(forward: float, k: FloatArray) -> FloatArray:
    diff = forward - k
    tol = CLOSE_ULPS * MACHINE_EPS
    close = (np.abs(diff) <= tol * abs(forward)) & (np.abs(diff) <= tol * np.abs(k))
    eps = diff / k
    # second-order expansion of log(F/K) around F == K
    return np.where(close, eps - 0.5 * eps * eps, np.log(forward / k))


def unsafe_sabr_volatility(
    strike: ArrayLike,
    forward: float,
    expiry: float,
    alpha: float,
    beta: float,
    nu: float,
    rho: float,
) -> FloatArray:
    """
    Hagan lognormal SABR volatility without any input validation.

    Vectorised over ``strike``. Returns an array with the shape of ``strike``
    (0-d for scalar input). Invalid inputs propagate as NaN/inf.
    """
    k_arr = np.asarray(strike, dtype=np.float64)
    k = np.atleast_1d(k_arr)

    one_minus_beta = 1.0 - beta
    with np.errstate(divide="ignore", invalid="ignore", over="ignore"):
        a = (forward * k) ** one_minus_beta
        sqrt_a = np.sqrt(a)
        log_m = _log_moneyness(forward, k)

        z = (nu / alpha) * sqrt_a * log_m
        b = 1.0 - 2.0 * rho * z + z * z
        c = one_minus_beta * one_minus_beta * log_m * log_m
        xx = np.log((np.sqrt(b) + z - rho) / (1.0 - rho))

        denom = sqrt_a * (1.0 + c / 24.0 + c * c / 1920.0)
        time_corr = 1.0 + expiry * (
            one_minus_beta * one_minus_beta * alpha * alpha / (24.0 * a)
            + 0.25 * rho * beta * nu * alpha / sqrt_a
            + (2.0 - 3.0 * rho * rho) * (nu * nu / 24.0)
        )

        small_z = np.abs(z * z) <= SMALL_Z_ULPS * MACHINE_EPS
        multiplier = np.where(
            small_z,
            1.0 - 0.5 * rho * z - (3.0 * rho * rho - 2.0) * z * z / 12.0,
            z / xx,
        )
        out = (alpha / denom) * multiplier * time_corr

    out = np.asarray(out, dtype=np.float64)
    if k_arr.ndim == 0:
        return np.asarray(out[0], dtype=np.float64)
    return out.reshape(k_arr.shape)


def sabr_volatility(
    strike: ArrayLike,
    forward: float,
    expiry: float,
    alpha: float,
    beta: float,
    nu: float,
    rho: float,
) -> FloatArray:
    """
    Hagan lognormal SABR implied volatility.

    Raises
    ------
    ValidationError
        If any strike is not positive, the forward is not positive, the expiry
        is negative, or the parameters fail :func:`validate_sabr_parameters`.
    """
    k = np.asarray(strike, dtype=np.float64)
    if np.any(~(k > 0.0)):
        bad = float(np.atleast_1d(k)[~(np.atleast_1d(k) > 0.0)][0])
        raise ValidationError(f"strike must be positive: {bad} not allowed")
    if not forward > 0.0:
        raise ValidationError(
            f"at the money forward rate must be positive: {forward} not allowed"
        )
    if not expiry >= 0.0:
        raise ValidationError(f"expiry time must be non-negative: {expiry} not allowed")
    validate_sabr_parameters(alpha, beta, nu, rho)
    return unsafe_sabr_volatility(k, forward, expiry, alpha, beta, nu, rho)
