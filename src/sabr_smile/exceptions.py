class DomainError(ValueError):
    """Raised when a value falls outside the domain an operation is defined on.

    Typical sources are the inverse of the SABR parameter transformation being
    handed a value the direct map can never produce, error metrics requested on
    fewer than two observations, and a vega weight vector that cannot be
    normalized because its sum is zero.
    """


class ValidationError(DomainError):
    """Raised eagerly when an input violates its documented precondition.

    Expiry, forward and strike must be strictly positive, and the SABR
    parameters must satisfy ``alpha > 0``, ``0 <= beta <= 1``, ``nu >= 0`` and
    ``rho**2 < 1``. Inputs are never silently clamped.

    Notes
    -----
    This is a :class:`DomainError` (and therefore a :class:`ValueError`), so
    callers that only care about "the input was out of range" can catch the
    broader type.
    """


class UnsupportedOperationError(NotImplementedError):
    """Raised by interpolation operations a closed-form smile does not provide."""
