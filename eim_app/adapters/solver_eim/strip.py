# eim_app/adapters/solver_eim/strip.py
from __future__ import annotations

import logging
from dataclasses import dataclass

import numpy as np

from eim_app.adapters.solver_eim.field1d import mode_1d
from eim_app.adapters.solver_eim.slab import SlabSolution, solve_slab_detailed
from eim_app.domain.models import StripWaveguide, opposite
from eim_app.domain.ports import WaveguideEngine

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ModeSolution:
    neff: float
    converged: bool


@dataclass(frozen=True)
class StripDecomposition:
    """Intermediate slab solves of the effective index recipe."""

    rib: SlabSolution  # vertical slab under the rib: box | core | clad, t_rib
    side: SlabSolution  # vertical slab beside the rib: box | core-or-clad | clad, t_slab
    lateral: SlabSolution  # horizontal slab: side | rib | side, w_rib


class StripEngine(WaveguideEngine):
    """
    Effective index method for strip and rib waveguides.

         clad
      +--------+           ^ z
      |  rib   | t_rib     |
    --+--------+--  slab t_slab
         box               +---> y
       <- w_rib ->

    The vertical slabs are solved first; their indices become the layers of a
    horizontal slab of width w_rib. The polarization swaps between the two
    analyses: a quasi-TE mode (E along y) is TE in the vertical slab and TM in
    the horizontal one, and vice versa.
    """

    def __init__(self, *, concurrent: bool = False, workers: int | None = None) -> None:
        self.concurrent = concurrent
        self.workers = workers

    # --- helpers -------------------------------------------------------------
    def decompose(self, wg: StripWaveguide) -> StripDecomposition:
        rib = solve_slab_detailed(
            wg.n_box, wg.n_core, wg.n_clad, wg.wavelength_um, wg.t_rib_um, 0,
            concurrent=self.concurrent,
        )
        # without a slab the side region is cladding only and carries no mode
        n_side_core = wg.n_core if wg.t_slab_um > 0.0 else wg.n_clad
        side = solve_slab_detailed(
            wg.n_box, n_side_core, wg.n_clad, wg.wavelength_um, wg.t_slab_um, 0,
            concurrent=self.concurrent,
        )
        n_side = side.neff(wg.mode)
        lateral = solve_slab_detailed(
            n_side, rib.neff(wg.mode), n_side, wg.wavelength_um, wg.w_rib_um, wg.mode_order,
            concurrent=self.concurrent,
        )
        return StripDecomposition(rib=rib, side=side, lateral=lateral)

    # --- API -----------------------------------------------------------------
    def solve_detailed(self, wg: StripWaveguide) -> ModeSolution:
        parts = self.decompose(wg)
        lateral_mode = opposite(wg.mode)
        sol = ModeSolution(
            neff=parts.lateral.neff(lateral_mode),
            converged=parts.lateral.converged(lateral_mode),
        )
        if not sol.converged:
            logger.debug(
                "strip %s%d unsupported at w=%g, λ=%g; n_eff=%g",
                wg.mode, wg.mode_order, wg.w_rib_um, wg.wavelength_um, sol.neff,
            )
        return sol

    def solve(self, wg: StripWaveguide) -> float:
        return self.solve_detailed(wg).neff

    def mode_2d(self, wg: StripWaveguide, x_um: np.ndarray, y_um: np.ndarray) -> np.ndarray:
        """|rows| follow y (vertical), |cols| follow x (lateral); origin at the rib centre."""
        x = np.asarray(x_um, dtype=float)
        y = np.asarray(y_um, dtype=float)
        parts = self.decompose(wg)
        lateral_mode = opposite(wg.mode)
        if not (parts.rib.converged(wg.mode) and parts.lateral.converged(lateral_mode)):
            # a cut-off index has no closed-form profile; the map is empty
            logger.debug(
                "strip %s%d has no guided field at w=%g, λ=%g",
                wg.mode, wg.mode_order, wg.w_rib_um, wg.wavelength_um,
            )
            return np.zeros((y.size, x.size), dtype=np.complex128)

        vertical = mode_1d(
            y + 0.5 * wg.t_rib_um,
            parts.rib.neff(wg.mode),
            wg.n_box, wg.n_core, wg.n_clad,
            wg.wavelength_um, wg.t_rib_um, 0, wg.mode,
            workers=self.workers,
        )
        n_side = parts.side.neff(wg.mode)
        horizontal = mode_1d(
            x + 0.5 * wg.w_rib_um,
            parts.lateral.neff(lateral_mode),
            n_side, parts.rib.neff(wg.mode), n_side,
            wg.wavelength_um, wg.w_rib_um, wg.mode_order, lateral_mode,
            workers=self.workers,
        )
        return np.outer(vertical.amplitude, horizontal.amplitude)
