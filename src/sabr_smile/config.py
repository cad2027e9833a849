from __future__ import annotations

from dataclasses import dataclass

from sabr_smile.exceptions import ValidationError


@dataclass(frozen=True, slots=True)
class EndCriteria:
    """Convergence configuration handed to an optimization method.

    Parameters
    ----------
    max_iterations : int
        Hard cap on optimizer iterations.
    max_stationary_iterations : int
        Number of consecutive iterations without meaningful improvement after
        which the run is declared stationary.
    root_epsilon : float
        Tolerance on the change of the optimization vector.
    function_epsilon : float
        Tolerance on the change of the cost function value.
    gradient_norm_epsilon : float
        Tolerance on the gradient norm (gradient-based methods only).

    Notes
    -----
    Each method uses the subset of thresholds that is meaningful to it.
    """

    max_iterations: int = 60000
    max_stationary_iterations: int = 100
    root_epsilon: float = 1e-8
    function_epsilon: float = 1e-8
    gradient_norm_epsilon: float = 1e-8

    def __post_init__(self) -> None:
        if self.max_iterations <= 0:
            raise ValidationError("max_iterations must be > 0")
        if self.max_stationary_iterations <= 0:
            raise ValidationError("max_stationary_iterations must be > 0")
        if self.max_stationary_iterations > self.max_iterations:
            raise ValidationError(
                "max_stationary_iterations must not exceed max_iterations"
            )
        if (
            self.root_epsilon <= 0
            or self.function_epsilon <= 0
            or self.gradient_norm_epsilon <= 0
        ):
            raise ValidationError("epsilon thresholds must be > 0")


def default_end_criteria() -> EndCriteria:
    return EndCriteria(
        max_iterations=60000,
        max_stationary_iterations=100,
        root_epsilon=1e-8,
        function_epsilon=1e-8,
        gradient_norm_epsilon=1e-8,
    )
