"""Pytest helpers for the sabr_smile library."""

from __future__ import annotations

import numpy as np
import pytest

from sabr_smile import SABRInterpolation


@pytest.fixture
def smile_data() -> dict:
    """A small, deliberately imperfect market smile."""
    return {
        "strikes": np.array([0.04, 0.05, 0.06], dtype=np.float64),
        "vols": np.array([0.20, 0.18, 0.19], dtype=np.float64),
        "expiry": 1.0,
        "forward": 0.05,
    }


@pytest.fixture
def wide_smile() -> dict:
    """Seven quotes generated from known SABR parameters."""
    from sabr_smile.models.sabr import sabr_volatility

    strikes = np.linspace(0.03, 0.07, 7, dtype=np.float64)
    forward, expiry = 0.05, 2.0
    true = {"alpha": 0.04, "beta": 0.5, "nu": 0.35, "rho": -0.25}
    vols = sabr_volatility(strikes, forward, expiry, **true)
    return {
        "strikes": strikes,
        "vols": np.asarray(vols, dtype=np.float64),
        "expiry": expiry,
        "forward": forward,
        "true": true,
    }


@pytest.fixture
def make_interp(smile_data):
    """Factory fixture for calibrators on the default smile."""

    def _make(**kwargs) -> SABRInterpolation:
        data = dict(smile_data)
        data.update({k: kwargs.pop(k) for k in list(kwargs) if k in data})
        return SABRInterpolation(
            data["strikes"],
            data["vols"],
            data["expiry"],
            data["forward"],
            **kwargs,
        )

    return _make
