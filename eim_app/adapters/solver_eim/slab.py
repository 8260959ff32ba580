# eim_app/adapters/solver_eim/slab.py
from __future__ import annotations

import logging
from dataclasses import dataclass
from math import atan2, pi, sqrt
from typing import Tuple

from eim_app.adapters.solver_eim.bisection import RootResult, bisection
from eim_app.adapters.solver_eim.parallel import run_concurrently
from eim_app.domain.models import Mode

logger = logging.getLogger(__name__)

__all__ = ["SlabSolution", "decay_constants", "slab_equation", "solve_slab", "solve_slab_detailed"]


def decay_constants(
    n1: float, n2: float, n3: float, lambda_um: float, neff: float
) -> Tuple[float, float, float]:
    """
    (γ1, γ2, γ3) in rad/μm for a trial index inside (max(n1, n3), n2).

    γ1, γ3 are the evanescent decay rates in the bounding layers, γ2 the
    transverse wavenumber in the core.
    """
    k0 = 2.0 * pi / float(lambda_um)
    n_sq = neff * neff
    return (
        k0 * sqrt(n_sq - n1 * n1),
        k0 * sqrt(n2 * n2 - n_sq),
        k0 * sqrt(n_sq - n3 * n3),
    )


def slab_equation(
    mode: Mode, n1: float, n2: float, n3: float, lambda_um: float, W: float, j: int, neff: float
) -> float:
    """Transverse-resonance residual of the three-layer slab n1 | n2 (thickness W) | n3.

    TE:  -atan2(γ2, γ1) - atan2(γ2, γ3) + (j+1)π - γ2 W
    TM:  the atan2 arguments carry the n² weights of the adjacent layers,
         -atan2(n1² γ2, n2² γ1) - atan2(n3² γ2, n2² γ3) + (j+1)π - γ2 W

    The residual increases through zero at the j-th mode index.
    """
    g1, g2, g3 = decay_constants(n1, n2, n3, lambda_um, neff)
    if mode == "TE":
        phase = -atan2(g2, g1) - atan2(g2, g3)
    else:
        n1_sq, n2_sq, n3_sq = n1 * n1, n2 * n2, n3 * n3
        phase = -atan2(n1_sq * g2, n2_sq * g1) - atan2(n3_sq * g2, n2_sq * g3)
    return phase + (j + 1) * pi - g2 * W


@dataclass(frozen=True)
class SlabSolution:
    te: RootResult
    tm: RootResult
    n_fallback: float

    @property
    def neff_te(self) -> float:
        return self.te.root if self.te.converged else self.n_fallback

    @property
    def neff_tm(self) -> float:
        return self.tm.root if self.tm.converged else self.n_fallback

    def neff(self, mode: Mode) -> float:
        return self.neff_te if mode == "TE" else self.neff_tm

    def converged(self, mode: Mode) -> bool:
        return (self.te if mode == "TE" else self.tm).converged

    def as_tuple(self) -> Tuple[float, float]:
        return self.neff_te, self.neff_tm


def _find_root(
    mode: Mode, n1: float, n2: float, n3: float, lambda_um: float, W: float, j: int
) -> RootResult:
    lo = max(n1, n3)
    if n2 <= lo:
        # no guided band at all: nothing to bracket
        return RootResult(root=min(n1, n3), status="INVALID_RANGE", iterations=0, residual=float("nan"))
    res = bisection(lambda n: slab_equation(mode, n1, n2, n3, lambda_um, W, j, n), lo, n2)
    if not res.converged:
        logger.debug(
            "slab %s%d cut off (n=%g|%g|%g, W=%g, λ=%g): %s",
            mode, j, n1, n2, n3, W, lambda_um, res.status,
        )
    return res


def solve_slab_detailed(
    n1: float,
    n2: float,
    n3: float,
    lambda_um: float,
    W: float,
    j: int,
    *,
    concurrent: bool = False,
) -> SlabSolution:
    """
    Solve the TE and TM j-th order modes of a three-layer slab.

    Roots are searched in the guided band [max(n1, n3), n2]. A mode without a
    converged root (cut off, or no guided band) reports min(n1, n3).
    """
    args = (float(n1), float(n2), float(n3), float(lambda_um), float(W), int(j))
    if concurrent:
        te, tm = run_concurrently(lambda: _find_root("TE", *args), lambda: _find_root("TM", *args))
    else:
        te, tm = _find_root("TE", *args), _find_root("TM", *args)
    return SlabSolution(te=te, tm=tm, n_fallback=min(float(n1), float(n3)))


def solve_slab(
    n1: float,
    n2: float,
    n3: float,
    lambda_um: float,
    W: float,
    j: int,
    *,
    concurrent: bool = False,
) -> Tuple[float, float]:
    """(n_eff TE, n_eff TM) of the slab; unsupported modes return min(n1, n3)."""
    return solve_slab_detailed(n1, n2, n3, lambda_um, W, j, concurrent=concurrent).as_tuple()
