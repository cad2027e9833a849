from __future__ import annotations

from collections.abc import Callable
from typing import TypeAlias

import numpy as np
from numpy.typing import NDArray

# typing only
FloatArray: TypeAlias = NDArray[np.floating]
ArrayLike: TypeAlias = float | np.ndarray | np.floating
ForwardLike: TypeAlias = float | Callable[[], float]
