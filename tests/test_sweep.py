from __future__ import annotations

import numpy as np
import pytest
import xarray as xr

from eim_app.domain.models import FieldConfig, SlotWaveguide, StripWaveguide, SweepConfig, SweepResult
from eim_app.orchestration.sweep import field_axis, field_map, iter_waveguides, run_sweep, sweep_dims


def test_strip_sweep_dataset_contract(strip_result: SweepResult) -> None:
    ds = strip_result.data
    assert isinstance(ds, xr.Dataset)
    assert ds["neff"].dims == ("lambda_um", "width_um", "order")
    assert ds["neff"].shape == (2, 3, 2)
    assert ds.attrs["kind"] == "strip" and ds.attrs["mode"] == "TE"
    np.testing.assert_allclose(ds.coords["width_um"].values, [0.1, 0.3, 0.5])

    # every n_eff lies between the cladding and the core index
    assert float(ds["neff"].min()) >= 1.44 and float(ds["neff"].max()) < 3.47


def test_strip_sweep_values_and_fallbacks(strip_result: SweepResult) -> None:
    ds = strip_result.data
    fundamental = ds["neff"].sel(lambda_um=1.55, order=0)
    assert float(fundamental.sel(width_um=0.1)) == pytest.approx(1.47821, abs=1e-3)
    assert float(fundamental.sel(width_um=0.5)) == pytest.approx(2.48433, abs=1e-3)
    # shorter wavelength, stronger confinement
    assert bool((ds["neff"].sel(lambda_um=1.31, order=0) > fundamental).all())

    high = ds.sel(order=5)
    assert bool((high["neff"] == 1.44).all()) and not bool(high["guided"].any())
    assert bool(ds["guided"].sel(order=0).all())
    assert strip_result.scalars.points == 12
    assert strip_result.scalars.fallback_points == 6


def test_slot_sweep_grid(slot_sweep_cfg: SweepConfig) -> None:
    assert sweep_dims(slot_sweep_cfg) == ("lambda_um", "gap_um", "width_um", "order")
    res = run_sweep(slot_sweep_cfg)
    neff = res.data["neff"]
    assert neff.shape == (1, 3, 2, 1)
    assert res.data.attrs["n_slot"] == 1.44
    # the even supermode index drops as the rails separate
    per_gap = neff.sel(lambda_um=1.55, width_um=0.25, order=0).values
    assert per_gap[0] > per_gap[1] > per_gap[2]


def test_iteration_order(slot_sweep_cfg: SweepConfig, strip_sweep_cfg: SweepConfig) -> None:
    pts = list(iter_waveguides(slot_sweep_cfg))
    assert len(pts) == 6
    assert all(isinstance(wg, SlotWaveguide) for _, wg in pts)
    assert [idx for idx, _ in pts[:3]] == [(0, 0, 0, 0), (0, 0, 1, 0), (0, 1, 0, 0)]
    assert pts[2][1].w_slot_um == 0.1 and pts[2][1].w_core_um == 0.2

    first = next(iter_waveguides(strip_sweep_cfg))[1]
    assert isinstance(first, StripWaveguide)
    assert (first.wavelength_um, first.w_rib_um, first.mode_order) == (1.31, 0.1, 0)


def test_field_map_dataarray(soi_strip: StripWaveguide) -> None:
    fc = FieldConfig(points=21, extent_um=1.0)
    da = field_map(soi_strip, fc)
    assert da.dims == ("transverse_um", "lateral_um")
    assert da.shape == (21, 21)
    assert da.name == "field"
    assert da.attrs["mode"] == "TE0" and da.attrs["w_rib_um"] == 0.5
    np.testing.assert_allclose(da.coords["lateral_um"].values, field_axis(fc))
    assert float(abs(da).max()) == pytest.approx(float(abs(da.isel(transverse_um=10, lateral_um=10))))


def test_field_map_rejects_slot(soi_slot: SlotWaveguide) -> None:
    with pytest.raises(NotImplementedError):
        field_map(soi_slot, FieldConfig(points=5, extent_um=1.0))


def test_points_are_copies_of_one_base_bundle(strip_sweep_cfg: SweepConfig) -> None:
    pts = [wg for _, wg in iter_waveguides(strip_sweep_cfg)]
    assert len(pts) == 12
    # only the swept fields change between points
    fixed = {"t_rib_um", "t_slab_um", "n_box", "n_core", "n_clad", "mode"}
    assert all(wg.model_dump(include=fixed) == pts[0].model_dump(include=fixed) for wg in pts)
    assert [wg.mode_order for wg in pts[:2]] == [0, 5]
    assert pts[-1].wavelength_um == 1.55 and pts[-1].w_rib_um == 0.5


def test_unvalidated_slot_config_is_rejected(slot_sweep_cfg: SweepConfig) -> None:
    broken = SweepConfig.model_construct(**{**dict(slot_sweep_cfg), "n_slot": None})
    with pytest.raises(ValueError, match="n_slot"):
        list(iter_waveguides(broken))


def test_closed_slot_sweep(slot_sweep_cfg: SweepConfig) -> None:
    cfg = slot_sweep_cfg.model_copy(update={"gaps_um": [0.0, 0.1]})
    res = run_sweep(cfg)
    neff = res.data["neff"].sel(lambda_um=1.55, order=0)
    assert bool(np.isfinite(neff).all())
    # touching rails act as one wider core
    assert bool((neff.isel(gap_um=0) > neff.isel(gap_um=1)).all())
