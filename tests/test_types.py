from __future__ import annotations

import dataclasses

import pytest

from sabr_smile import (
    EndCriteriaType,
    MarketPoint,
    SABRFitResult,
    SABRParams,
    ValidationError,
)


def test_market_point_requires_positive_strike() -> None:
    assert MarketPoint(0.05, 0.2).volatility == 0.2
    with pytest.raises(ValidationError):
        MarketPoint(0.0, 0.2)


def test_params_are_frozen_values() -> None:
    p = SABRParams(alpha=0.04, beta=0.5, nu=0.3, rho=-0.2)
    assert p.as_tuple() == (0.04, 0.5, 0.3, -0.2)
    assert p == SABRParams(0.04, 0.5, 0.3, -0.2)
    with pytest.raises(dataclasses.FrozenInstanceError):
        p.alpha = 1.0  # type: ignore[misc]


def test_fit_result_summary() -> None:
    result = SABRFitResult(
        params=SABRParams(0.04, 0.5, 0.3, -0.2),
        forward=0.05,
        error=1e-3,
        max_error=2e-3,
        weights=(0.5, 0.5),
        end_criteria=EndCriteriaType.STATIONARY_POINT,
        function_evaluations=42,
        skipped=False,
    )
    text = result.summary
    assert "status=stationary_point" in text
    assert "nfev=42" in text
    assert "rho=-0.2" in text


def test_end_criteria_type_is_a_string_enum() -> None:
    assert EndCriteriaType("max_iterations") is EndCriteriaType.MAX_ITERATIONS
    assert EndCriteriaType.NONE == "none"
