from __future__ import annotations

import numpy as np
import pytest

from sabr_smile.exceptions import DomainError
from sabr_smile.vol.transform import EPS1, EPS2, SABRParametersTransformation


@pytest.fixture
def tr() -> SABRParametersTransformation:
    return SABRParametersTransformation()


def test_default_constants(tr) -> None:
    assert tr.eps1 == EPS1 == 1e-7
    assert tr.eps2 == EPS2 == 0.9999


def test_direct_lands_in_admissible_set(tr) -> None:
    rng = np.random.default_rng(7)
    for x in rng.normal(0.0, 3.0, size=(200, 4)):
        alpha, beta, nu, rho = tr.direct(x)
        assert alpha >= EPS1
        assert 0.0 <= beta <= 1.0
        assert nu >= EPS1
        assert abs(rho) <= EPS2


@pytest.mark.parametrize(
    "y",
    [
        [0.2, 0.5, 0.4, 0.0],
        [np.sqrt(0.2), 0.5, np.sqrt(0.4), -0.3],
        [0.03, 0.99, 1.5, 0.9],
        [1.0, 1.0, 0.01, -0.95],
    ],
)
def test_direct_of_inverse_is_identity(tr, y) -> None:
    y = np.asarray(y, dtype=np.float64)
    np.testing.assert_allclose(tr.direct(tr.inverse(y)), y, rtol=0.0, atol=1e-10)


@pytest.mark.parametrize(
    "x",
    [
        [0.3, 0.8, 0.6, 0.0],
        [1.2, 0.1, 2.0, -1.2],
        [0.05, 1.5, 0.01, 1.4],
    ],
)
def test_inverse_of_direct_is_identity_on_principal_branch(tr, x) -> None:
    x = np.asarray(x, dtype=np.float64)
    np.testing.assert_allclose(tr.inverse(tr.direct(x)), x, rtol=0.0, atol=1e-10)


@pytest.mark.parametrize(
    "y,match",
    [
        ([0.0, 0.5, 0.4, 0.0], "alpha"),
        ([0.2, 0.0, 0.4, 0.0], "beta"),
        ([0.2, 1.5, 0.4, 0.0], "beta"),
        ([0.2, 0.5, 0.0, 0.0], "nu"),
        ([0.2, 0.5, 0.4, 0.99995], "rho"),
        ([0.2, 0.5, 0.4, -1.0], "rho"),
    ],
)
def test_inverse_rejects_values_outside_the_image(tr, y, match) -> None:
    with pytest.raises(DomainError, match=match):
        tr.inverse(y)


def test_inverse_where_skips_masked_coordinates(tr) -> None:
    # nu = 0 has no preimage, but it is not selected
    y = np.array([0.2, 0.5, 0.0, 0.1])
    u = tr.inverse(y, where=[True, True, False, True])
    assert u[2] == 0.0
    np.testing.assert_allclose(tr.direct(u)[[0, 1, 3]], y[[0, 1, 3]], atol=1e-12)
