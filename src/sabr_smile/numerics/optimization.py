"""
Thin optimization-method adapters over :mod:`scipy.optimize`.

All methods share one contract::

    status = method.minimize(problem, end_criteria)

``problem.current_value`` holds the starting point on entry and the best point
found on exit. The returned :class:`EndCriteriaType` says why the method
stopped; running out of iterations is reported, not raised.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Protocol, runtime_checkable

import numpy as np
from numpy.typing import NDArray
from scipy.optimize import OptimizeResult, least_squares, minimize

from sabr_smile.config import EndCriteria
from sabr_smile.exceptions import ValidationError
from sabr_smile.logging import get_logger
from sabr_smile.types import EndCriteriaType
from sabr_smile.typing import ArrayLike

logger = get_logger(__name__)


# ---------------------------
# Interfaces
# ---------------------------


@runtime_checkable
class CostFunction(Protocol):
    """Scalar cost plus the residual vector whose squared norm equals it."""

    def value(self, x: NDArray[np.float64]) -> float: ...

    def values(self, x: NDArray[np.float64]) -> NDArray[np.float64]: ...


@runtime_checkable
class Constraint(Protocol):
    def test(self, x: NDArray[np.float64]) -> bool: ...


@dataclass(frozen=True, slots=True)
class NoConstraint:
    """Every point of R^k is feasible."""

    def test(self, x: NDArray[np.float64]) -> bool:
        return True


@dataclass(slots=True)
class Problem:
    """Cost function, constraint and the evolving current point."""

    cost_function: CostFunction
    constraint: Constraint
    current_value: NDArray[np.float64]
    function_value: float = float("nan")
    function_evaluations: int = 0
    gradient_evaluations: int = 0

    def __post_init__(self) -> None:
        self.current_value = np.array(self.current_value, dtype=np.float64).reshape(
            -1
        )

    def value(self, x: ArrayLike) -> float:
        self.function_evaluations += 1
        return float(self.cost_function.value(np.asarray(x, dtype=np.float64)))

    def values(self, x: ArrayLike) -> NDArray[np.float64]:
        self.function_evaluations += 1
        return np.asarray(
            self.cost_function.values(np.asarray(x, dtype=np.float64)),
            dtype=np.float64,
        )


@runtime_checkable
class OptimizationMethod(Protocol):
    def minimize(
        self, problem: Problem, end_criteria: EndCriteria
    ) -> EndCriteriaType: ...


# ---------------------------
# Stationarity bookkeeping
# ---------------------------


@dataclass(slots=True)
class StationarityTracker:
    """
    Counts consecutive iterations whose best cost moved by less than
    ``function_epsilon``. ``observe`` returns True once the count exceeds
    ``max_stationary_iterations``.
    """

    function_epsilon: float
    max_stationary_iterations: int
    previous: float | None = None
    count: int = 0
    stopped: bool = field(default=False)

    def observe(self, fx: float) -> bool:
        prev, self.previous = self.previous, fx
        if prev is None or not abs(fx - prev) < self.function_epsilon:
            self.count = 0
            return False
        self.count += 1
        if self.count > self.max_stationary_iterations:
            self.stopped = True
        return self.stopped


# ---------------------------
# Methods
# ---------------------------


@dataclass(frozen=True, slots=True)
class Simplex:
    """
    Nelder-Mead downhill simplex (derivative free).

    The initial simplex is ``x0`` plus ``lambda_`` along each unit vector.
    Uses ``max_iterations``, ``max_stationary_iterations``, ``root_epsilon``
    and ``function_epsilon`` from the end criteria.
    """

    lambda_: float = 0.01

    def __post_init__(self) -> None:
        if not self.lambda_ > 0.0:
            raise ValidationError("simplex step lambda_ must be > 0")

    def minimize(self, problem: Problem, end_criteria: EndCriteria) -> EndCriteriaType:
        x0 = problem.current_value
        n = int(x0.size)
        if n == 0:
            problem.function_value = problem.value(x0)
            return EndCriteriaType.NONE

        initial_simplex = np.vstack([x0, x0 + self.lambda_ * np.eye(n)])
        tracker = StationarityTracker(
            function_epsilon=end_criteria.function_epsilon,
            max_stationary_iterations=end_criteria.max_stationary_iterations,
        )

        def fun(x: NDArray[np.float64]) -> float:
            fx = problem.value(x)
            # a non-finite vertex must lose every comparison
            return fx if np.isfinite(fx) else np.inf

        def callback(intermediate_result: OptimizeResult) -> None:
            if tracker.observe(float(intermediate_result.fun)):
                raise StopIteration

        res = minimize(
            fun,
            x0,
            method="Nelder-Mead",
            callback=callback,
            options={
                "maxiter": end_criteria.max_iterations,
                "xatol": end_criteria.root_epsilon,
                "fatol": end_criteria.function_epsilon,
                "initial_simplex": initial_simplex,
            },
        )

        problem.current_value = np.asarray(res.x, dtype=np.float64).reshape(-1)
        problem.function_value = float(res.fun)

        if tracker.stopped:
            status = EndCriteriaType.STATIONARY_FUNCTION_VALUE
        elif res.status == 0:
            status = EndCriteriaType.STATIONARY_POINT
        elif res.status in (1, 2):
            status = EndCriteriaType.MAX_ITERATIONS
        else:
            status = EndCriteriaType.UNKNOWN

        logger.debug(
            "simplex finished: status=%s nit=%s nfev=%s f=%.6g",
            status.value,
            res.nit,
            res.nfev,
            problem.function_value,
        )
        return status


# scipy.optimize.least_squares status -> termination reason
_LSQ_STATUS: dict[int, EndCriteriaType] = {
    0: EndCriteriaType.MAX_ITERATIONS,
    1: EndCriteriaType.ZERO_GRADIENT_NORM,
    2: EndCriteriaType.STATIONARY_FUNCTION_VALUE,
    3: EndCriteriaType.STATIONARY_POINT,
    4: EndCriteriaType.STATIONARY_POINT,
}


@dataclass(frozen=True, slots=True)
class LevenbergMarquardt:
    """
    Least-squares minimization of the residual vector ``values(x)``.

    Runs MINPACK Levenberg-Marquardt (``method="lm"``) when there are at least
    as many residuals as free parameters, and the trust-region reflective
    solver otherwise (``lm`` cannot handle under-determined systems).

    Parameters
    ----------
    epsfcn : float
        Relative accuracy of the residuals; the finite-difference step is
        ``sqrt(epsfcn)``.
    xtol : float
        Relative step tolerance. ``ftol`` comes from
        ``EndCriteria.function_epsilon``, ``gtol`` from
        ``EndCriteria.gradient_norm_epsilon`` and the evaluation cap from
        ``EndCriteria.max_iterations``.
    """

    epsfcn: float = 1e-8
    xtol: float = 1e-8

    def __post_init__(self) -> None:
        if self.epsfcn <= 0 or self.xtol <= 0:
            raise ValidationError("epsfcn and xtol must be > 0")

    def minimize(self, problem: Problem, end_criteria: EndCriteria) -> EndCriteriaType:
        x0 = problem.current_value
        n = int(x0.size)
        if n == 0:
            problem.function_value = problem.value(x0)
            return EndCriteriaType.NONE

        m = int(problem.values(x0).size)
        method = "lm" if m >= n else "trf"

        res = least_squares(
            problem.values,
            x0,
            method=method,
            ftol=end_criteria.function_epsilon,
            xtol=self.xtol,
            gtol=end_criteria.gradient_norm_epsilon,
            diff_step=float(np.sqrt(self.epsfcn)),
            max_nfev=end_criteria.max_iterations,
        )

        problem.current_value = np.asarray(res.x, dtype=np.float64).reshape(-1)
        problem.function_value = float(np.sum(res.fun * res.fun))
        problem.gradient_evaluations += int(res.njev or 0)

        status = _LSQ_STATUS.get(int(res.status), EndCriteriaType.UNKNOWN)
        logger.debug(
            "least squares (%s) finished: status=%s nfev=%s f=%.6g",
            method,
            status.value,
            res.nfev,
            problem.function_value,
        )
        return status


def default_optimization_method() -> OptimizationMethod:
    return Simplex(0.01)
