from __future__ import annotations

from typing import Any

import pytest

from eim_app.domain.models import SlotWaveguide, StripWaveguide, SweepConfig
from eim_app.orchestration.sweep import default_config, run_sweep


@pytest.fixture(scope="session")
def soi_strip() -> StripWaveguide:
    """220 nm × 500 nm silicon strip in oxide at 1550 nm, TE0."""
    return StripWaveguide(
        wavelength_um=1.55,
        t_rib_um=0.22,
        t_slab_um=0.0,
        w_rib_um=0.5,
        n_box=1.44,
        n_core=3.47,
        n_clad=1.44,
        mode="TE",
        mode_order=0,
    )


@pytest.fixture(scope="session")
def soi_slot() -> SlotWaveguide:
    """Two 250 nm silicon rails around a 100 nm oxide-filled slot."""
    return SlotWaveguide(
        wavelength_um=1.55,
        t_core_um=0.22,
        w_core_um=0.25,
        w_slot_um=0.1,
        n_box=1.44,
        n_core=3.47,
        n_clad=1.44,
        n_slot=1.44,
        mode="TE",
        mode_order=0,
    )


@pytest.fixture(scope="session")
def strip_sweep_cfg() -> SweepConfig:
    """Small strip sweep: 2 wavelengths × 3 widths × 2 orders."""
    cfg = default_config()
    return cfg.model_copy(
        update={
            "wavelengths_um": [1.31, 1.55],
            "widths_um": [0.1, 0.3, 0.5],
            "mode_orders": [0, 5],
        }
    )


@pytest.fixture(scope="session")
def slot_sweep_cfg() -> SweepConfig:
    return SweepConfig(
        kind="slot",
        t_core_um=0.22,
        n_box=1.44,
        n_core=3.47,
        n_clad=1.44,
        n_slot=1.44,
        mode="TE",
        wavelengths_um=[1.55],
        widths_um=[0.2, 0.25],
        gaps_um=[0.05, 0.1, 0.15],
        mode_orders=[0],
    )


@pytest.fixture(scope="session")
def strip_result(strip_sweep_cfg: SweepConfig) -> Any:
    return run_sweep(strip_sweep_cfg)
