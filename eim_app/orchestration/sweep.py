from __future__ import annotations

import logging
from typing import Iterator, Tuple

import numpy as np
import xarray as xr

from eim_app.adapters.registry import make_engine
from eim_app.adapters.solver_eim.engine import compute_mode_field
from eim_app.domain.models import (
    FieldConfig,
    SlotWaveguide,
    SolverScalars,
    StripWaveguide,
    SweepConfig,
    SweepResult,
    Waveguide,
    mode_label,
)
from eim_app.domain.ports import WaveguideEngine

logger = logging.getLogger(__name__)

__all__ = [
    "default_config",
    "field_axis",
    "field_map",
    "iter_waveguides",
    "run_sweep",
    "sweep_dims",
]


# -------------------------
# Configuration helpers
# -------------------------


def default_config() -> SweepConfig:
    """
    A 220 nm silicon-on-insulator strip at 1550 nm, fundamental TE mode.

    Field maps are enabled on a ±1 μm window.
    """
    return SweepConfig(
        kind="strip",
        t_core_um=0.22,
        t_slab_um=0.0,
        n_box=1.44,
        n_core=3.47,
        n_clad=1.44,
        mode="TE",
        wavelengths_um=[1.55],
        widths_um=[0.5],
        mode_orders=[0],
        field=FieldConfig(points=101, extent_um=1.0),
    )


def sweep_dims(cfg: SweepConfig) -> Tuple[str, ...]:
    if cfg.kind == "slot":
        return ("lambda_um", "gap_um", "width_um", "order")
    return ("lambda_um", "width_um", "order")


def _base_waveguide(cfg: SweepConfig) -> Waveguide:
    """Parameter bundle at the first grid point; the sweep copies it per point."""
    lam, width, order = cfg.wavelengths_um[0], cfg.widths_um[0], cfg.mode_orders[0]
    if cfg.kind == "slot":
        if cfg.n_slot is None or not cfg.gaps_um:
            raise ValueError("slot sweeps need n_slot and at least one slot width")
        return SlotWaveguide(
            wavelength_um=lam,
            t_core_um=cfg.t_core_um,
            w_core_um=width,
            w_slot_um=cfg.gaps_um[0],
            n_box=cfg.n_box,
            n_core=cfg.n_core,
            n_clad=cfg.n_clad,
            n_slot=cfg.n_slot,
            mode=cfg.mode,
            mode_order=order,
        )
    return StripWaveguide(
        wavelength_um=lam,
        t_rib_um=cfg.t_core_um,
        t_slab_um=cfg.t_slab_um,
        w_rib_um=width,
        n_box=cfg.n_box,
        n_core=cfg.n_core,
        n_clad=cfg.n_clad,
        mode=cfg.mode,
        mode_order=order,
    )


def iter_waveguides(cfg: SweepConfig) -> Iterator[Tuple[Tuple[int, ...], Waveguide]]:
    """
    Yield (grid index, waveguide) in sweep order: wavelength, [slot width,]
    core width, mode order. The grid index matches `sweep_dims(cfg)`.
    """
    base = _base_waveguide(cfg)
    slot = isinstance(base, SlotWaveguide)
    width_key = "w_core_um" if slot else "w_rib_um"
    gaps: list[float | None] = list(cfg.gaps_um) if slot else [None]
    for i_l, lam in enumerate(cfg.wavelengths_um):
        for i_g, gap in enumerate(gaps):
            for i_w, width in enumerate(cfg.widths_um):
                for i_j, order in enumerate(cfg.mode_orders):
                    update: dict[str, float | int] = {
                        "wavelength_um": lam,
                        width_key: width,
                        "mode_order": order,
                    }
                    if gap is not None:
                        update["w_slot_um"] = gap
                    idx = (i_l, i_g, i_w, i_j) if slot else (i_l, i_w, i_j)
                    yield idx, base.model_copy(update=update)


# -------------------------
# Sweeps
# -------------------------


def run_sweep(cfg: SweepConfig, engine: WaveguideEngine | None = None) -> SweepResult:
    """Solve every point of the sweep grid and pack n_eff into an xarray Dataset."""
    engine = engine or make_engine(cfg.kind)
    dims = sweep_dims(cfg)
    coords: dict[str, np.ndarray] = {
        "lambda_um": np.asarray(cfg.wavelengths_um, dtype=float),
        "width_um": np.asarray(cfg.widths_um, dtype=float),
        "order": np.asarray(cfg.mode_orders, dtype=int),
    }
    if cfg.kind == "slot":
        coords["gap_um"] = np.asarray(cfg.gaps_um, dtype=float)
    shape = tuple(coords[d].size for d in dims)
    logger.info("solving %s sweep: %d points on %s", cfg.kind, int(np.prod(shape)), dims)

    neff = np.empty(shape, dtype=float)
    guided = np.zeros(shape, dtype=bool)
    for idx, wg in iter_waveguides(cfg):
        sol = engine.solve_detailed(wg)
        neff[idx] = sol.neff
        guided[idx] = sol.converged

    ds = xr.Dataset(
        data_vars=dict(
            neff=(dims, neff),
            guided=(dims, guided),
        ),
        coords=coords,
        attrs=dict(
            kind=cfg.kind,
            mode=cfg.mode,
            t_core_um=cfg.t_core_um,
            t_slab_um=cfg.t_slab_um,
            n_box=cfg.n_box,
            n_core=cfg.n_core,
            n_clad=cfg.n_clad,
            note="effective index method",
        ),
    )
    if cfg.n_slot is not None:
        ds.attrs["n_slot"] = cfg.n_slot

    fallback = int(guided.size - np.count_nonzero(guided))
    if fallback:
        logger.info("%d of %d sweep points are unsupported (fallback index)", fallback, guided.size)
    scalars = SolverScalars(points=int(guided.size), fallback_points=fallback, notes=f"eim-{cfg.kind}")
    return SweepResult(data=ds, scalars=scalars)


# -------------------------
# Field maps
# -------------------------


def field_axis(field_cfg: FieldConfig) -> np.ndarray:
    return np.linspace(-field_cfg.extent_um, field_cfg.extent_um, field_cfg.points)


def field_map(wg: Waveguide, field_cfg: FieldConfig, *, workers: int | None = None) -> xr.DataArray:
    """
    Complex 2D mode field on a square window centred on the core.

    Dims are ("transverse_um", "lateral_um"): rows run vertically, columns
    laterally. Raises NotImplementedError for slot waveguides.
    """
    axis = field_axis(field_cfg)
    field = compute_mode_field(wg, axis, axis, workers=workers)
    attrs: dict[str, object] = dict(mode=mode_label(wg.mode, wg.mode_order), wavelength_um=wg.wavelength_um)
    if isinstance(wg, StripWaveguide):
        attrs.update(t_slab_um=wg.t_slab_um, t_rib_um=wg.t_rib_um, w_rib_um=wg.w_rib_um)
    return xr.DataArray(
        field,
        dims=("transverse_um", "lateral_um"),
        coords=dict(transverse_um=axis, lateral_um=axis.copy()),
        attrs=attrs,
        name="field",
    )
