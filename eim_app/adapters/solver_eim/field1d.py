# eim_app/adapters/solver_eim/field1d.py
"""
Closed-form transverse field of a guided three-layer slab mode.

Coordinates put x = 0 on the n1/n2 interface and x = W on the n2/n3 one:

    n1 | n2 | n3
   ----0----W---> x

Inside the core the profile is cos(γ2 x + α); outside it decays as
exp(γ1 x) and exp(-γ3 (x - W)). The core coefficient is fixed to 1, so the
amplitude scale is arbitrary (no power normalization).

For TE the amplitude is E_y, continuous together with its derivative. For TM
the amplitude is H_y, continuous together with its derivative divided by n².
The `normal` component is the curl of the amplitude (H_z for TE, E_z for TM)
and is therefore continuous across both interfaces as well.
"""
from __future__ import annotations

from dataclasses import dataclass
from math import atan2, cos, pi

import numpy as np

from eim_app.adapters.solver_eim.parallel import chunk_bounds, parallel_map
from eim_app.adapters.solver_eim.slab import decay_constants
from eim_app.domain.constants import C0, EPS0, ETA0, MU0, UM
from eim_app.domain.models import Mode

__all__ = ["FieldProfile", "mode_1d"]


@dataclass(frozen=True)
class FieldProfile:
    x: np.ndarray  # (N,) positions in μm
    amplitude: np.ndarray  # (N,) complex transverse field
    lateral: np.ndarray  # (N,) complex impedance-scaled companion
    normal: np.ndarray  # (N,) complex component from ∂/∂x of the amplitude


@dataclass(frozen=True)
class _Coefficients:
    mode: Mode
    n1: float
    n2: float
    n3: float
    W: float
    g1: float
    g2: float
    g3: float
    alpha: float
    C1: float
    C3: float
    omega: float

    def evaluate(self, x: np.ndarray) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
        A = np.zeros(x.shape, dtype=np.complex128)
        dA = np.zeros(x.shape, dtype=np.complex128)  # ∂A/∂x in 1/μm
        eps_r = np.empty(x.shape, dtype=float)

        left = x < 0.0
        right = x > self.W
        core = ~(left | right)

        xl = x[left]
        A[left] = self.C1 * np.exp(self.g1 * xl)
        dA[left] = self.g1 * A[left]
        eps_r[left] = self.n1**2

        xc = x[core]
        A[core] = np.cos(self.g2 * xc + self.alpha)
        dA[core] = -self.g2 * np.sin(self.g2 * xc + self.alpha)
        eps_r[core] = self.n2**2

        xr = x[right]
        A[right] = self.C3 * np.exp(-self.g3 * (xr - self.W))
        dA[right] = -self.g3 * A[right]
        eps_r[right] = self.n3**2

        dA_si = dA / UM
        if self.mode == "TE":
            lateral = A * self.n1 / ETA0
            normal = -dA_si / (1j * self.omega * MU0)
        else:
            lateral = A * ETA0 / self.n1
            normal = dA_si / (1j * self.omega * EPS0 * eps_r)
        return A, lateral, normal


def _coefficients(
    mode: Mode, neff: float, n1: float, n2: float, n3: float, lambda_um: float, W: float, j: int
) -> _Coefficients:
    g1, g2, g3 = decay_constants(n1, n2, n3, lambda_um, neff)
    if mode == "TE":
        w1 = w2 = 1.0
    else:
        w1, w2 = n1 * n1, n2 * n2

    # x = 0:  C1 = C2 cos α,  γ1 C1 / w1 = -γ2 C2 sin α / w2
    # x = W:  C3 = C2 cos(γ2 W + α),  γ2 C2 sin(γ2 W + α) / w2 = γ3 C3 / w3
    # with C2 = 1. The second condition at x = W holds only at a root of the
    # characteristic equation.
    alpha = -atan2(g1 * w2, g2 * w1) + j * pi
    C1 = cos(alpha)
    C3 = cos(g2 * W + alpha)
    omega = 2.0 * pi * C0 / (lambda_um * UM)
    return _Coefficients(mode, n1, n2, n3, W, g1, g2, g3, alpha, C1, C3, omega)


def mode_1d(
    x_um: np.ndarray,
    neff: float,
    n1: float,
    n2: float,
    n3: float,
    lambda_um: float,
    W: float,
    j: int,
    mode: Mode,
    *,
    workers: int | None = None,
) -> FieldProfile:
    """
    Evaluate the TE or TM slab field at positions x_um.

    `neff` must be the converged index of order j for the same slab. An index
    outside the guided band [max(n1, n3), n2] raises ValueError; callers skip
    cut-off modes instead of passing their fallback index.
    With workers > 1 the positions are split into contiguous chunks and
    evaluated on a thread pool; sample order is unchanged.
    """
    x = np.asarray(x_um, dtype=float)
    if x.ndim != 1:
        raise ValueError("x_um must be a 1D array of positions")
    if not max(n1, n3) <= neff <= n2:
        raise ValueError(
            f"neff={neff:g} lies outside the guided band [{max(n1, n3):g}, {n2:g}]"
        )
    coef = _coefficients(mode, float(neff), float(n1), float(n2), float(n3),
                         float(lambda_um), float(W), int(j))

    if workers is None or workers <= 1 or x.size < 2:
        A, lateral, normal = coef.evaluate(x)
    else:
        bounds = chunk_bounds(x.size, int(workers))
        parts = parallel_map(lambda b: coef.evaluate(x[b[0]:b[1]]), bounds, workers=len(bounds))
        A = np.concatenate([p[0] for p in parts])
        lateral = np.concatenate([p[1] for p in parts])
        normal = np.concatenate([p[2] for p in parts])
    return FieldProfile(x=x, amplitude=A, lateral=lateral, normal=normal)
