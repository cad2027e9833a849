from __future__ import annotations

import math
from collections.abc import Callable
from dataclasses import dataclass
from typing import ClassVar

import numpy as np
from numpy.typing import NDArray

from sabr_smile.config import EndCriteria, default_end_criteria
from sabr_smile.exceptions import (
    DomainError,
    UnsupportedOperationError,
    ValidationError,
)
from sabr_smile.logging import get_logger
from sabr_smile.models.black import black_std_dev_derivative
from sabr_smile.models.sabr import sabr_volatility, validate_sabr_parameters
from sabr_smile.numerics.optimization import (
    NoConstraint,
    OptimizationMethod,
    Problem,
    default_optimization_method,
)
from sabr_smile.numerics.projection import ParameterProjection
from sabr_smile.types import (
    CalibrationPhase,
    EndCriteriaType,
    MarketPoint,
    SABRParams,
)
from sabr_smile.typing import ArrayLike, FloatArray, ForwardLike
from sabr_smile.vol.cost import SABRCostFunction
from sabr_smile.vol.interpolation import SABRSmile, check_range
from sabr_smile.vol.transform import SABRParametersTransformation
from sabr_smile.vol.weights import Sensitivity, WeightPolicy, uniform_weights

logger = get_logger(__name__)

# ==========================
# Defaults for unset guesses
# ==========================
DEFAULT_ALPHA = math.sqrt(0.2)
DEFAULT_BETA = 0.5
DEFAULT_NU = math.sqrt(0.4)
DEFAULT_RHO = 0.0

PARAM_NAMES = ("alpha", "beta", "nu", "rho")


# ==========================
# Fit outputs
# ==========================
@dataclass(frozen=True, slots=True)
class SABRFitResult:
    params: SABRParams
    forward: float
    error: float
    max_error: float
    weights: tuple[float, ...]
    end_criteria: EndCriteriaType
    function_evaluations: int
    skipped: bool

    @property
    def summary(self) -> str:
        p = self.params
        return (
            f"status={self.end_criteria.value} rms={self.error:.3g} "
            f"max={self.max_error:.3g} alpha={p.alpha:.6g} beta={p.beta:.6g} "
            f"nu={p.nu:.6g} rho={p.rho:.6g} nfev={self.function_evaluations}"
        )


def _as_forward_source(forward: ForwardLike) -> Callable[[], float]:
    if callable(forward):
        return forward
    value = float(forward)
    return lambda: value


# ==========================
# Calibrated smile
# ==========================
class SABRInterpolation:
    """SABR smile calibrated to discrete (strike, volatility) quotes.

    Parameters
    ----------
    strikes, volatilities : array_like
        Market smile, one volatility per strike. Strikes must be positive.
    expiry : float
        Option expiry (year fraction), strictly positive.
    forward : float or callable
        At-the-money forward. A zero-argument callable (for example a
        :class:`~sabr_smile.types.SimpleQuote`) is re-read on every
        :meth:`update` and evaluation, so external updates are picked up.
    alpha, beta, nu, rho : float or None
        Initial guesses. ``None`` selects the default
        (``sqrt(0.2)``, ``0.5``, ``sqrt(0.4)``, ``0.0``) and leaves that
        parameter free whatever its fixed flag says.
    alpha_is_fixed, beta_is_fixed, nu_is_fixed, rho_is_fixed : bool
        Keep the corresponding (supplied) guess out of the optimization.
    vega_weighted : bool, default False
        Weight residuals by Black vega instead of uniformly. Vega weights are
        recomputed on every :meth:`update` because the forward may move.
    end_criteria : EndCriteria, optional
        Convergence configuration; :func:`default_end_criteria` if omitted.
    method : OptimizationMethod, optional
        Optimizer; ``Simplex(0.01)`` if omitted.
    sensitivity : callable, optional
        Vega formula used when ``vega_weighted`` is set.

    Notes
    -----
    Nothing is fitted at construction; call :meth:`update`. Every
    :meth:`update` starts from the initial guesses, so repeated calls on
    unchanged inputs reproduce the same fit.
    """

    def __init__(
        self,
        strikes: ArrayLike,
        volatilities: ArrayLike,
        expiry: float,
        forward: ForwardLike,
        alpha: float | None = None,
        beta: float | None = None,
        nu: float | None = None,
        rho: float | None = None,
        alpha_is_fixed: bool = False,
        beta_is_fixed: bool = False,
        nu_is_fixed: bool = False,
        rho_is_fixed: bool = False,
        vega_weighted: bool = False,
        end_criteria: EndCriteria | None = None,
        method: OptimizationMethod | None = None,
        *,
        sensitivity: Sensitivity = black_std_dev_derivative,
    ) -> None:
        if not expiry > 0.0:
            raise ValidationError(f"expiry time must be positive: {expiry} not allowed")

        k = np.array(strikes, dtype=np.float64)
        vol = np.array(volatilities, dtype=np.float64)
        if k.ndim != 1 or vol.ndim != 1:
            raise ValidationError("strikes and volatilities must be 1-D")
        if k.shape != vol.shape:
            raise ValidationError(
                f"strikes and volatilities must have the same length: "
                f"{k.size} != {vol.size}"
            )
        if not (np.all(np.isfinite(k)) and np.all(np.isfinite(vol))):
            raise ValidationError("strikes and volatilities must be finite")
        if np.any(k <= 0.0):
            raise ValidationError(
                f"strike must be positive: {float(k[k <= 0.0][0])} not allowed"
            )
        k.setflags(write=False)
        vol.setflags(write=False)

        self._strikes = k
        self._vols = vol
        self._expiry = float(expiry)
        self._forward = _as_forward_source(forward)

        guesses = (alpha, beta, nu, rho)
        defaults = (DEFAULT_ALPHA, DEFAULT_BETA, DEFAULT_NU, DEFAULT_RHO)
        flags = (alpha_is_fixed, beta_is_fixed, nu_is_fixed, rho_is_fixed)
        values = tuple(
            float(d) if g is None else float(g) for g, d in zip(guesses, defaults)
        )
        validate_sabr_parameters(*values)

        self._initial = SABRParams(*values)
        self._params = self._initial
        # an unset guess is never fixed
        self._fixed = tuple(bool(f) and g is not None for g, f in zip(guesses, flags))

        self._policy = WeightPolicy(
            vega_weighted=vega_weighted, sensitivity=sensitivity
        )
        self._weights = uniform_weights(int(k.size))
        self._end_criteria = (
            default_end_criteria() if end_criteria is None else end_criteria
        )
        self._method = default_optimization_method() if method is None else method
        self._transform = SABRParametersTransformation()

        self._error: float | None = None
        self._max_error: float | None = None
        self._status = EndCriteriaType.NONE
        self._phase = CalibrationPhase.UNINITIALIZED
        self._last_result: SABRFitResult | None = None
        self._extrapolation = False

    # ---- read-only views ----
    @property
    def expiry(self) -> float:
        return self._expiry

    @property
    def forward(self) -> float:
        return float(self._forward())

    @property
    def alpha(self) -> float:
        return self._params.alpha

    @property
    def beta(self) -> float:
        return self._params.beta

    @property
    def nu(self) -> float:
        return self._params.nu

    @property
    def rho(self) -> float:
        return self._params.rho

    @property
    def params(self) -> SABRParams:
        return self._params

    @property
    def is_fixed(self) -> tuple[bool, ...]:
        return self._fixed

    @property
    def vega_weighted(self) -> bool:
        return self._policy.vega_weighted

    @property
    def strikes(self) -> NDArray[np.float64]:
        return self._strikes

    @property
    def volatilities(self) -> NDArray[np.float64]:
        return self._vols

    @property
    def market_points(self) -> tuple[MarketPoint, ...]:
        return tuple(
            MarketPoint(strike=float(k), volatility=float(v))
            for k, v in zip(self._strikes, self._vols)
        )

    @property
    def interpolation_error(self) -> float | None:
        return self._error

    @property
    def interpolation_max_error(self) -> float | None:
        return self._max_error

    @property
    def interpolation_weights(self) -> NDArray[np.float64]:
        return self._weights.copy()

    @property
    def termination_status(self) -> EndCriteriaType:
        return self._status

    @property
    def phase(self) -> CalibrationPhase:
        return self._phase

    @property
    def last_result(self) -> SABRFitResult | None:
        return self._last_result

    # ---- calibration ----
    def update(self) -> SABRFitResult:
        """Recalibrate against the current forward and store the outcome.

        Returns
        -------
        SABRFitResult
            Snapshot of what was written into this object.

        Raises
        ------
        ValidationError
            If the forward is not positive.
        DomainError
            If there are fewer than two quotes or vega weights cannot be
            normalized.
        """
        previous = self._phase
        self._phase = CalibrationPhase.CALIBRATING
        try:
            result = self._calibrate()
        except Exception:
            self._phase = previous
            raise

        self._params = result.params
        self._weights = np.asarray(result.weights, dtype=np.float64)
        self._error = result.error
        self._max_error = result.max_error
        self._status = result.end_criteria
        self._last_result = result
        self._phase = (
            CalibrationPhase.SKIPPED if result.skipped else CalibrationPhase.CALIBRATED
        )
        return result

    def _calibrate(self) -> SABRFitResult:
        forward = self.forward
        if not forward > 0.0:
            raise ValidationError(f"forward must be positive: {forward} not allowed")
        n = int(self._strikes.size)
        if n < 2:
            raise DomainError(f"at least two quotes are needed, got {n}")

        if self._policy.vega_weighted:
            weights = self._policy.weights(
                self._strikes, self._vols, forward, self._expiry
            )
        else:
            weights = self._weights

        fixed = np.array(self._fixed, dtype=bool)
        guess = np.array(self._initial.as_tuple(), dtype=np.float64)
        logger.debug(
            "SABR calibration: n=%d T=%g F=%g fixed=%s vega_weighted=%s",
            n,
            self._expiry,
            forward,
            dict(zip(PARAM_NAMES, self._fixed)),
            self._policy.vega_weighted,
        )

        if fixed.all():
            params = self._initial
            status = EndCriteriaType.NONE
            nfev = 0
            skipped = True
            logger.debug("SABR calibration skipped: all parameters fixed")
        else:
            u_guess = self._transform.inverse(guess, where=~fixed)
            projection = ParameterProjection(u_guess, fixed)
            cost = SABRCostFunction(
                strikes=self._strikes,
                volatilities=self._vols,
                weights=weights,
                forward=forward,
                expiry=self._expiry,
                transform=self._transform,
                projection=projection,
                fixed_values=guess,
            )
            problem = Problem(
                cost_function=cost,
                constraint=NoConstraint(),
                current_value=projection.project(u_guess),
            )
            status = self._method.minimize(problem, self._end_criteria)
            params = cost.params(problem.current_value)
            nfev = problem.function_evaluations
            skipped = False

        error, max_error = _error_metrics(
            self._strikes, self._vols, weights, forward, self._expiry, params
        )
        result = SABRFitResult(
            params=params,
            forward=forward,
            error=error,
            max_error=max_error,
            weights=tuple(float(w) for w in weights),
            end_criteria=status,
            function_evaluations=nfev,
            skipped=skipped,
        )

        if status is EndCriteriaType.MAX_ITERATIONS:
            logger.warning("SABR calibration hit the iteration cap: %s", result.summary)
        else:
            logger.info("SABR calibration done: %s", result.summary)
        return result

    # ---- smile evaluation ----
    @property
    def smile(self) -> SABRSmile:
        """Current parameters frozen into a pointwise evaluator."""
        return SABRSmile(
            expiry=self._expiry,
            forward=self.forward,
            params=self._params,
            x_min=self.x_min,
            x_max=self.x_max,
        )

    @property
    def x_min(self) -> float:
        return float(np.min(self._strikes)) if self._strikes.size else 0.0

    @property
    def x_max(self) -> float:
        return float(np.max(self._strikes)) if self._strikes.size else 0.0

    def is_in_range(self, x: float) -> bool:
        return self.x_min <= x <= self.x_max

    def enable_extrapolation(self) -> None:
        self._extrapolation = True

    def disable_extrapolation(self) -> None:
        self._extrapolation = False

    @property
    def allows_extrapolation(self) -> bool:
        return self._extrapolation

    def value(self, x: ArrayLike) -> FloatArray:
        p = self._params
        return sabr_volatility(
            x, self.forward, self._expiry, p.alpha, p.beta, p.nu, p.rho
        )

    def __call__(self, x: ArrayLike, allow_extrapolation: bool = False) -> FloatArray:
        check_range(self, x, allow_extrapolation or self._extrapolation)
        return self.value(x)

    def primitive(self, x: float) -> float:
        raise UnsupportedOperationError("SABR primitive not implemented")

    def derivative(self, x: float) -> float:
        raise UnsupportedOperationError("SABR derivative not implemented")

    def second_derivative(self, x: float) -> float:
        raise UnsupportedOperationError("SABR secondDerivative not implemented")

    def __repr__(self) -> str:
        p = self._params
        return (
            f"SABRInterpolation(n={self._strikes.size}, T={self._expiry:g}, "
            f"alpha={p.alpha:.6g}, beta={p.beta:.6g}, nu={p.nu:.6g}, "
            f"rho={p.rho:.6g}, phase={self._phase.value})"
        )


def _error_metrics(
    strikes: NDArray[np.float64],
    volatilities: NDArray[np.float64],
    weights: NDArray[np.float64],
    forward: float,
    expiry: float,
    params: SABRParams,
) -> tuple[float, float]:
    """Sample RMS of the weighted residuals and the max absolute residual."""
    n = int(strikes.size)
    if n < 2:
        raise DomainError(f"error metrics need at least two quotes, got {n}")
    model = sabr_volatility(
        strikes, forward, expiry, params.alpha, params.beta, params.nu, params.rho
    )
    err = model - volatilities
    squared_error = float(np.sum(weights * err * err))
    error = math.sqrt(n * squared_error / (n - 1))
    max_error = float(np.max(np.abs(err)))
    return error, max_error


# ==========================
# Factory
# ==========================
@dataclass(frozen=True, slots=True)
class SABR:
    """Builds :class:`SABRInterpolation` objects sharing one configuration."""

    expiry: float
    forward: ForwardLike
    alpha: float | None = None
    beta: float | None = None
    nu: float | None = None
    rho: float | None = None
    alpha_is_fixed: bool = False
    beta_is_fixed: bool = False
    nu_is_fixed: bool = False
    rho_is_fixed: bool = False
    vega_weighted: bool = False
    end_criteria: EndCriteria | None = None
    method: OptimizationMethod | None = None

    # SABR is a global fit: every quote influences the whole smile
    global_: ClassVar[bool] = True

    def interpolate(
        self, strikes: ArrayLike, volatilities: ArrayLike
    ) -> SABRInterpolation:
        return SABRInterpolation(
            strikes,
            volatilities,
            self.expiry,
            self.forward,
            alpha=self.alpha,
            beta=self.beta,
            nu=self.nu,
            rho=self.rho,
            alpha_is_fixed=self.alpha_is_fixed,
            beta_is_fixed=self.beta_is_fixed,
            nu_is_fixed=self.nu_is_fixed,
            rho_is_fixed=self.rho_is_fixed,
            vega_weighted=self.vega_weighted,
            end_criteria=self.end_criteria,
            method=self.method,
        )
