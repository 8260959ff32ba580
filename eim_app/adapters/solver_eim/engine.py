# eim_app/adapters/solver_eim/engine.py
"""
Entry points of the effective index core.

Both functions are pure: every call solves from scratch, so callers may
sweep by producing modified copies of the parameter bundle.
"""
from __future__ import annotations

import numpy as np

from eim_app.adapters.registry import make_engine
from eim_app.domain.models import SlotWaveguide, StripWaveguide, Waveguide

__all__ = ["compute_mode_field", "kind_of", "solve_waveguide"]


def kind_of(params: Waveguide) -> str:
    if isinstance(params, StripWaveguide):
        return "strip"
    if isinstance(params, SlotWaveguide):
        return "slot"
    raise TypeError(f"Unsupported waveguide parameters: {type(params).__name__}")


def solve_waveguide(params: Waveguide) -> float:
    """Effective index of the requested mode (the cutoff fallback if unguided)."""
    return make_engine(kind_of(params)).solve(params)


def compute_mode_field(
    params: Waveguide,
    positions_x: np.ndarray,
    positions_y: np.ndarray,
    *,
    workers: int | None = None,
) -> np.ndarray:
    """
    Complex field map of shape (len(positions_y), len(positions_x)).

    Positions are in μm from the core centre; x is lateral, y vertical.
    """
    x = np.asarray(positions_x, dtype=float)
    y = np.asarray(positions_y, dtype=float)
    if x.ndim != 1 or y.ndim != 1:
        raise ValueError("positions_x and positions_y must be 1D arrays")
    engine = make_engine(kind_of(params), workers=workers)
    return engine.mode_2d(params, x, y)
