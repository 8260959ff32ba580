#"""
#Domain models (v1.0.0)
#
#Pydantic v2 models define validated waveguide parameters and sweep
#configuration. Sweep results are carried as xarray Datasets with named
#coordinates.
#"""
from __future__ import annotations

from typing import Literal

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    NonNegativeFloat,
    NonNegativeInt,
    PositiveFloat,
    model_validator,
)

# --- Basic enums/types ---
Mode = Literal["TE", "TM"]
WaveguideKind = Literal["strip", "slot"]


def opposite(mode: Mode) -> Mode:
    """Polarization seen by the lateral slab when the device carries `mode`."""
    return "TM" if mode == "TE" else "TE"


def mode_label(mode: Mode, order: int) -> str:
    return f"{mode}{int(order)}"


# --- Per-solve parameter bundles (immutable) ---
class StripWaveguide(BaseModel):
    """Strip/rib waveguide cross-section.

    t_rib is the full core height under the rib (box to rib top); beside the
    rib the core is thinned to t_slab. t_slab = 0 is a plain strip.
    """

    model_config = ConfigDict(frozen=True)

    wavelength_um: float = Field(..., gt=0.0, description="Free-space wavelength (μm)")
    t_rib_um: float = Field(..., gt=0.0, description="Rib/core thickness (μm)")
    t_slab_um: float = Field(0.0, ge=0.0, description="Slab thickness (μm)")
    w_rib_um: float = Field(..., gt=0.0, description="Rib/core width (μm)")
    n_box: float = Field(..., gt=0.0)
    n_core: float = Field(..., gt=0.0)
    n_clad: float = Field(..., gt=0.0)
    mode: Mode = "TE"
    mode_order: int = Field(0, ge=0)

    @model_validator(mode="after")
    def _slab_below_rib(self) -> "StripWaveguide":
        if self.t_slab_um > self.t_rib_um:
            raise ValueError("t_slab_um must not exceed t_rib_um")
        return self


class SlotWaveguide(BaseModel):
    """Symmetric slot waveguide: core | slot | core, between box and cladding."""

    model_config = ConfigDict(frozen=True)

    wavelength_um: float = Field(..., gt=0.0, description="Free-space wavelength (μm)")
    t_core_um: float = Field(..., gt=0.0, description="Core thickness (μm)")
    w_core_um: float = Field(..., gt=0.0, description="Width of each core rail (μm)")
    w_slot_um: float = Field(..., ge=0.0, description="Slot width (μm); 0 joins the rails")
    n_box: float = Field(..., gt=0.0)
    n_core: float = Field(..., gt=0.0)
    n_clad: float = Field(..., gt=0.0)
    n_slot: float = Field(..., gt=0.0)
    mode: Mode = "TE"
    mode_order: int = Field(0, ge=0)


Waveguide = StripWaveguide | SlotWaveguide


# --- Sweep configuration ---
class FieldConfig(BaseModel):
    points: int = Field(..., ge=2, description="Samples per axis")
    extent_um: float = Field(..., gt=0.0, description="Half-extent of the square window (μm)")
    filename: str | None = None


class SweepConfig(BaseModel):
    kind: WaveguideKind = "strip"
    t_core_um: float = Field(..., gt=0.0, description="Rib/core thickness (μm)")
    t_slab_um: float = Field(0.0, ge=0.0)
    n_box: float = Field(..., gt=0.0)
    n_core: float = Field(..., gt=0.0)
    n_clad: float = Field(..., gt=0.0)
    n_slot: float | None = Field(None, gt=0.0)
    mode: Mode = "TE"
    wavelengths_um: list[PositiveFloat] = Field(..., min_length=1)
    widths_um: list[PositiveFloat] = Field(..., min_length=1)
    gaps_um: list[NonNegativeFloat] = []
    mode_orders: list[NonNegativeInt] = Field(default_factory=lambda: [0], min_length=1)
    field: FieldConfig | None = None
    version: str = "1.0.0"

    @model_validator(mode="after")
    def _slot_geometry(self) -> "SweepConfig":
        if self.t_slab_um > self.t_core_um:
            raise ValueError("t_slab_um must not exceed t_core_um")
        if self.kind == "slot":
            if self.n_slot is None:
                raise ValueError("slot waveguides require n_slot")
            if not self.gaps_um:
                raise ValueError("slot waveguides require at least one slot width")
        return self


# --- Results ---
class SolverScalars(BaseModel):
    points: int
    fallback_points: int = 0
    notes: str = ""


# SweepResult carries an xarray.Dataset in runtime, not validated here to avoid heavy import.
class SweepResult(BaseModel):
    data: object  # xarray.Dataset expected at runtime
    scalars: SolverScalars
    schema_version: str = "1.0.0"
