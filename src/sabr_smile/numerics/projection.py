from __future__ import annotations

from collections.abc import Sequence

import numpy as np
from numpy.typing import NDArray

from sabr_smile.exceptions import ValidationError
from sabr_smile.typing import ArrayLike


class ParameterProjection:
    """
    Removes fixed coordinates from an optimization vector and puts them back.

    Built from a full-length guess and a boolean mask (``True`` = fixed). The
    fixed coordinates of the guess are frozen at construction; ``project``
    keeps only the free coordinates and ``include`` rebuilds a full vector
    from free coordinates, re-inserting the frozen values unchanged.

        include(project(v)) == v   for any v agreeing with the frozen values
    """

    __slots__ = ("_fixed", "_values", "_free_idx")

    def __init__(self, guess: ArrayLike, fixed: Sequence[bool] | NDArray[np.bool_]):
        values = np.array(guess, dtype=np.float64).reshape(-1)
        mask = np.array(fixed, dtype=bool).reshape(-1)
        if values.shape != mask.shape:
            raise ValidationError(
                f"guess and fixed mask must have the same length: "
                f"{values.size} != {mask.size}"
            )
        self._values = values
        self._fixed = mask
        self._free_idx = np.flatnonzero(~mask)

    @property
    def size(self) -> int:
        return int(self._values.size)

    @property
    def n_free(self) -> int:
        return int(self._free_idx.size)

    @property
    def fixed(self) -> NDArray[np.bool_]:
        return self._fixed.copy()

    @property
    def all_fixed(self) -> bool:
        return self.n_free == 0

    def project(self, full: ArrayLike) -> NDArray[np.float64]:
        full_arr = np.asarray(full, dtype=np.float64).reshape(-1)
        if full_arr.size != self.size:
            raise ValidationError(
                f"expected a vector of length {self.size}, got {full_arr.size}"
            )
        return full_arr[self._free_idx].copy()

    def include(self, reduced: ArrayLike) -> NDArray[np.float64]:
        red = np.asarray(reduced, dtype=np.float64).reshape(-1)
        if red.size != self.n_free:
            raise ValidationError(
                f"expected a reduced vector of length {self.n_free}, got {red.size}"
            )
        out = self._values.copy()
        out[self._free_idx] = red
        return out
