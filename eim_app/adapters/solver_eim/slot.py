# eim_app/adapters/solver_eim/slot.py
from __future__ import annotations

import logging
from dataclasses import dataclass
from math import atan2, inf, pi, sqrt, tanh
from typing import Tuple

import numpy as np

from eim_app.adapters.solver_eim.bisection import RootResult, bisection
from eim_app.adapters.solver_eim.slab import solve_slab_detailed
from eim_app.adapters.solver_eim.strip import ModeSolution
from eim_app.domain.models import SlotWaveguide
from eim_app.domain.ports import WaveguideEngine

logger = logging.getLogger(__name__)

__all__ = [
    "SlotEngine",
    "SlotSolution",
    "slot_cosh_equation",
    "slot_sinh_equation",
    "solve_slot_slab",
    "solve_slot_slab_detailed",
]


def _slot_terms(
    n_clad: float, n_core: float, n_slot: float, lambda_um: float, neff: float
) -> Tuple[float, float, float]:
    k0 = 2.0 * pi / float(lambda_um)
    n_sq = neff * neff
    gamma_slot = k0 * sqrt(n_sq - n_slot * n_slot)
    kappa_core = k0 * sqrt(n_core * n_core - n_sq)
    gamma_clad = k0 * sqrt(n_sq - n_clad * n_clad)
    return gamma_slot, kappa_core, gamma_clad


def _residual(
    n_clad: float, n_core: float, n_slot: float, kappa_core: float, gamma_clad: float,
    slot_term: float, a: float, b: float, j: int,
) -> float:
    nc_sq = n_core * n_core
    lhs = (
        atan2(nc_sq * gamma_clad, n_clad * n_clad * kappa_core)
        + atan2(nc_sq * slot_term, n_slot * n_slot * kappa_core)
        + j * pi
    )
    return kappa_core * (b - a) - lhs


def slot_cosh_equation(
    n_clad: float, n_core: float, n_slot: float, lambda_um: float, a: float, b: float, j: int,
    neff: float,
) -> float:
    """
    Even (cosh-type) residual of the symmetric five-layer slot slab.

    clad | core | slot | core | clad with the slot spanning |x| < a and the
    rails a < |x| < b:

        κ (b - a) - [atan2(n_core² γ_clad, n_clad² κ)
                     + atan2(n_core² γ_slot tanh(γ_slot a), n_slot² κ) + jπ]
    """
    gamma_slot, kappa_core, gamma_clad = _slot_terms(n_clad, n_core, n_slot, lambda_um, neff)
    slot_term = gamma_slot * tanh(gamma_slot * a)
    return _residual(n_clad, n_core, n_slot, kappa_core, gamma_clad, slot_term, a, b, j)


def slot_sinh_equation(
    n_clad: float, n_core: float, n_slot: float, lambda_um: float, a: float, b: float, j: int,
    neff: float,
) -> float:
    """Odd (sinh-type) residual: as the cosh form with tanh replaced by coth."""
    gamma_slot, kappa_core, gamma_clad = _slot_terms(n_clad, n_core, n_slot, lambda_um, neff)
    if a == 0.0:
        # no slot: coth blows up and the atan2 term saturates at π/2
        slot_term = inf
    elif gamma_slot == 0.0:
        # γ coth(γ a) → 1/a as γ → 0
        slot_term = 1.0 / a
    else:
        slot_term = gamma_slot / tanh(gamma_slot * a)
    return _residual(n_clad, n_core, n_slot, kappa_core, gamma_clad, slot_term, a, b, j)


@dataclass(frozen=True)
class SlotSolution:
    even: RootResult
    odd: RootResult
    n_fallback: float

    @property
    def neff_even(self) -> float:
        return self.even.root if self.even.converged else self.n_fallback

    @property
    def neff_odd(self) -> float:
        return self.odd.root if self.odd.converged else self.n_fallback

    def as_tuple(self) -> Tuple[float, float]:
        return self.neff_even, self.neff_odd


def solve_slot_slab_detailed(
    n_clad: float,
    n_core: float,
    n_slot: float,
    lambda_um: float,
    w_slot: float,
    w_core: float,
    j: int,
) -> SlotSolution:
    """
    Even and odd j-th order modes of the symmetric slot slab.

    Bracket and fallback are both max(n_clad, n_slot): a guided mode must sit
    above every surrounding index.
    """
    n_clad, n_core, n_slot = float(n_clad), float(n_core), float(n_slot)
    a = 0.5 * float(w_slot)
    b = a + float(w_core)
    nmin = max(n_clad, n_slot)

    if n_core <= nmin:
        none = RootResult(root=nmin, status="INVALID_RANGE", iterations=0, residual=float("nan"))
        return SlotSolution(even=none, odd=none, n_fallback=nmin)

    even = bisection(
        lambda n: slot_cosh_equation(n_clad, n_core, n_slot, lambda_um, a, b, j, n), nmin, n_core
    )
    odd = bisection(
        lambda n: slot_sinh_equation(n_clad, n_core, n_slot, lambda_um, a, b, j, n), nmin, n_core
    )
    return SlotSolution(even=even, odd=odd, n_fallback=nmin)


def solve_slot_slab(
    n_clad: float,
    n_core: float,
    n_slot: float,
    lambda_um: float,
    w_slot: float,
    w_core: float,
    j: int,
) -> Tuple[float, float]:
    """(n_eff even, n_eff odd); unsupported modes return max(n_clad, n_slot)."""
    return solve_slot_slab_detailed(n_clad, n_core, n_slot, lambda_um, w_slot, w_core, j).as_tuple()


class SlotEngine(WaveguideEngine):
    """
    Effective index method for the slot waveguide.

     z ^
       +------------------------
       |  clad  | clad  | clad  |
       +--------+-------+--------
       |  core  | slot  | core  |  <- t_core
       +--------+-------+--------
       |  box   | box   | box   |
       +------------------------
       ---------|-------|------> y
                w_core  w_slot

    Each column is solved as a vertical three-layer slab; the resulting
    indices form the five-layer horizontal slot slab, whose even mode is
    returned.
    """

    def __init__(self, *, concurrent: bool = False) -> None:
        self.concurrent = concurrent

    def solve_detailed(self, wg: SlotWaveguide) -> ModeSolution:
        kw = dict(concurrent=self.concurrent)
        core = solve_slab_detailed(wg.n_box, wg.n_core, wg.n_clad, wg.wavelength_um, wg.t_core_um, 0, **kw)
        slot = solve_slab_detailed(wg.n_box, wg.n_slot, wg.n_clad, wg.wavelength_um, wg.t_core_um, 0, **kw)
        clad = solve_slab_detailed(wg.n_box, wg.n_clad, wg.n_clad, wg.wavelength_um, wg.t_core_um, 0, **kw)

        sol = solve_slot_slab_detailed(
            clad.neff(wg.mode),
            core.neff(wg.mode),
            slot.neff(wg.mode),
            wg.wavelength_um,
            wg.w_slot_um,
            wg.w_core_um,
            wg.mode_order,
        )
        out = ModeSolution(neff=sol.neff_even, converged=sol.even.converged)
        if not out.converged:
            logger.debug(
                "slot %s%d unsupported at w=%g, gap=%g, λ=%g; n_eff=%g",
                wg.mode, wg.mode_order, wg.w_core_um, wg.w_slot_um, wg.wavelength_um, out.neff,
            )
        return out

    def solve(self, wg: SlotWaveguide) -> float:
        return self.solve_detailed(wg).neff

    def mode_2d(self, wg: SlotWaveguide, x_um: np.ndarray, y_um: np.ndarray) -> np.ndarray:
        raise NotImplementedError("2D mode field calculation is not available for slot waveguides")
