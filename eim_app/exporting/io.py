from __future__ import annotations

import io
from typing import Any

import numpy as np
import pandas as pd
import xarray as xr

from eim_app.domain.models import mode_label

STRIP_COLUMNS = ["t_slab", "t_rib", "width", "wavelength", "mode", "neff"]
SLOT_COLUMNS = ["t_core", "w_core", "w_slot", "wavelength", "mode", "neff"]
FIELD_COLUMNS = ["t_slab", "t_rib", "width", "mode", "transverse", "lateral", "amplitude"]


def sweep_table(ds: xr.Dataset) -> pd.DataFrame:
    """Flatten a sweep Dataset into one row per solved point.

    Rows follow the sweep order (wavelength, [slot width,] width, order).
    Strip columns: t_slab, t_rib, width, wavelength, mode, neff.
    Slot columns: t_core, w_core, w_slot, wavelength, mode, neff.
    """
    df = ds["neff"].to_dataframe().reset_index()
    mode = str(ds.attrs.get("mode", "TE"))
    labels = [mode_label(mode, j) for j in df["order"].to_numpy(dtype=int)]  # type: ignore[arg-type]
    if ds.attrs.get("kind") == "slot":
        out = pd.DataFrame(
            {
                "t_core": float(ds.attrs["t_core_um"]),
                "w_core": df["width_um"].to_numpy(dtype=float),
                "w_slot": df["gap_um"].to_numpy(dtype=float),
                "wavelength": df["lambda_um"].to_numpy(dtype=float),
                "mode": labels,
                "neff": df["neff"].to_numpy(dtype=float),
            },
            columns=SLOT_COLUMNS,
        )
    else:
        out = pd.DataFrame(
            {
                "t_slab": float(ds.attrs.get("t_slab_um", 0.0)),
                "t_rib": float(ds.attrs["t_core_um"]),
                "width": df["width_um"].to_numpy(dtype=float),
                "wavelength": df["lambda_um"].to_numpy(dtype=float),
                "mode": labels,
                "neff": df["neff"].to_numpy(dtype=float),
            },
            columns=STRIP_COLUMNS,
        )
    return out


def field_table(da: xr.DataArray) -> pd.DataFrame:
    """Long-form |field| table: one row per (transverse, lateral) sample, row-major."""
    amp = np.abs(np.asarray(da.values))
    tr = da.coords["transverse_um"].values
    la = da.coords["lateral_um"].values
    T, L = np.meshgrid(tr, la, indexing="ij")
    n = amp.size
    return pd.DataFrame(
        {
            "t_slab": np.full(n, float(da.attrs.get("t_slab_um", 0.0))),
            "t_rib": np.full(n, float(da.attrs.get("t_rib_um", np.nan))),
            "width": np.full(n, float(da.attrs.get("w_rib_um", np.nan))),
            "mode": [str(da.attrs.get("mode", ""))] * n,
            "transverse": T.ravel(),
            "lateral": L.ravel(),
            "amplitude": amp.ravel(),
        },
        columns=FIELD_COLUMNS,
    )


def figure_to_png_bytes(fig: Any) -> bytes:
    """Export a Plotly figure to PNG bytes via Kaleido.
    Raises RuntimeError with a helpful message when Kaleido is not available.
    """
    try:
        return fig.to_image(format="png", engine="kaleido")
    except Exception as e:  # noqa: BLE001
        raise RuntimeError(
            "Static image export requires the optional 'export' extra: pip install -e '.[export]'"
        ) from e


def to_csv_text(df: pd.DataFrame, *, header: bool = True, float_format: str | None = "%.6g") -> str:
    buf = io.StringIO()
    df.to_csv(buf, index=False, header=header, float_format=float_format)
    return buf.getvalue()


def to_csv_bytes(df: pd.DataFrame, *, header: bool = True, float_format: str | None = "%.6g") -> bytes:
    return to_csv_text(df, header=header, float_format=float_format).encode("utf-8")
