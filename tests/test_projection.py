from __future__ import annotations

import numpy as np
import pytest

from sabr_smile.exceptions import ValidationError
from sabr_smile.numerics.projection import ParameterProjection


def test_project_keeps_free_coordinates_in_order() -> None:
    proj = ParameterProjection([1.0, 2.0, 3.0, 4.0], [False, True, False, True])
    assert proj.n_free == 2
    np.testing.assert_array_equal(proj.project([10.0, 20.0, 30.0, 40.0]), [10.0, 30.0])


def test_include_reinserts_frozen_values() -> None:
    proj = ParameterProjection([1.0, 2.0, 3.0, 4.0], [False, True, False, True])
    np.testing.assert_array_equal(proj.include([-1.0, -3.0]), [-1.0, 2.0, -3.0, 4.0])


@pytest.mark.parametrize(
    "fixed",
    [
        [False, False, False, False],
        [True, False, False, False],
        [False, True, True, False],
        [True, True, True, False],
        [True, True, True, True],
    ],
)
def test_include_of_project_round_trips(fixed) -> None:
    guess = np.array([0.3, 0.8, 0.6, -0.2])
    proj = ParameterProjection(guess, fixed)
    v = guess.copy()
    v[~np.asarray(fixed)] += 0.5
    np.testing.assert_array_equal(proj.include(proj.project(v)), v)


def test_guess_is_copied() -> None:
    guess = np.array([1.0, 2.0])
    proj = ParameterProjection(guess, [True, False])
    guess[0] = 99.0
    assert proj.include([5.0])[0] == 1.0


def test_all_fixed_projects_to_empty() -> None:
    proj = ParameterProjection([1.0, 2.0], [True, True])
    assert proj.all_fixed
    assert proj.project([7.0, 8.0]).shape == (0,)
    np.testing.assert_array_equal(proj.include([]), [1.0, 2.0])


def test_length_mismatches_are_rejected() -> None:
    with pytest.raises(ValidationError):
        ParameterProjection([1.0, 2.0, 3.0], [True, False])
    proj = ParameterProjection([1.0, 2.0, 3.0], [True, False, False])
    with pytest.raises(ValidationError):
        proj.project([1.0, 2.0])
    with pytest.raises(ValidationError):
        proj.include([1.0])
