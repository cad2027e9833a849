from __future__ import annotations

import numpy as np
import pytest
from scipy.stats import norm

from sabr_smile.exceptions import DomainError, ValidationError
from sabr_smile.models.black import black_std_dev_derivative
from sabr_smile.vol.weights import WeightPolicy, uniform_weights, vega_weights


def black_call(K: float, F: float, std_dev: float) -> float:
    d1 = np.log(F / K) / std_dev + 0.5 * std_dev
    return F * norm.cdf(d1) - K * norm.cdf(d1 - std_dev)


@pytest.mark.parametrize("K", [0.03, 0.05, 0.08])
def test_std_dev_derivative_matches_finite_difference(K: float) -> None:
    F, s, h = 0.05, 0.2, 1e-6
    fd = (black_call(K, F, s + h) - black_call(K, F, s - h)) / (2.0 * h)
    assert float(black_std_dev_derivative(K, F, s)) == pytest.approx(fd, rel=1e-6)


def test_std_dev_derivative_degenerate_cases() -> None:
    assert float(black_std_dev_derivative(0.05, 0.05, 0.0)) == 0.0
    out = black_std_dev_derivative(np.array([0.04, 0.05]), 0.05, np.array([0.0, 0.2]))
    assert out[0] == 0.0 and out[1] > 0.0
    assert float(black_std_dev_derivative(0.05, 0.05, 0.2, discount=0.5)) == (
        pytest.approx(0.5 * float(black_std_dev_derivative(0.05, 0.05, 0.2)))
    )


def test_std_dev_derivative_rejects_negative_std_dev() -> None:
    with pytest.raises(ValidationError):
        black_std_dev_derivative(0.05, 0.05, -0.1)


def test_uniform_weights() -> None:
    w = uniform_weights(4)
    np.testing.assert_allclose(w, 0.25)
    assert uniform_weights(0).shape == (0,)


def test_vega_weights_normalized_and_peaked_at_the_money() -> None:
    strikes = np.array([0.03, 0.04, 0.05, 0.06, 0.07])
    vols = np.array([0.25, 0.22, 0.20, 0.21, 0.23])
    w = vega_weights(strikes, vols, forward=0.05, expiry=1.0)
    assert float(np.sum(w)) == pytest.approx(1.0, abs=1e-9)
    assert np.all(w > 0.0)
    assert int(np.argmax(w)) == 2


def test_vega_weights_with_identical_vols() -> None:
    strikes = np.array([0.04, 0.05, 0.06])
    w = vega_weights(strikes, np.full(3, 0.2), forward=0.052, expiry=1.0)
    assert np.all(np.isfinite(w))
    assert float(np.sum(w)) == pytest.approx(1.0, abs=1e-9)


def test_vega_weights_zero_sum_is_a_domain_error() -> None:
    def flat_zero(k, f, s):
        return np.zeros_like(np.asarray(k, dtype=float))

    with pytest.raises(DomainError, match="normalize"):
        vega_weights([0.04, 0.05], [0.2, 0.2], 0.05, 1.0, sensitivity=flat_zero)


def test_vega_weights_use_the_supplied_sensitivity() -> None:
    seen = {}

    def linear(k, f, s):
        seen["forward"] = f
        seen["std_dev"] = np.asarray(s)
        return np.asarray(k, dtype=float)

    w = vega_weights([1.0, 3.0], [0.2, 0.4], 2.0, 4.0, sensitivity=linear)
    np.testing.assert_allclose(w, [0.25, 0.75])
    assert seen["forward"] == 2.0
    np.testing.assert_allclose(seen["std_dev"], [0.4, 0.8])


def test_weight_policy_switches_mode() -> None:
    strikes = np.array([0.04, 0.05, 0.06])
    vols = np.array([0.2, 0.18, 0.19])
    uni = WeightPolicy().weights(strikes, vols, 0.05, 1.0)
    veg = WeightPolicy(vega_weighted=True).weights(strikes, vols, 0.05, 1.0)
    np.testing.assert_allclose(uni, 1.0 / 3.0)
    assert not np.allclose(veg, uni)
    assert float(np.sum(veg)) == pytest.approx(1.0)
