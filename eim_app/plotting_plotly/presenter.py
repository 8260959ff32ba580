#"""
#Plotly-based presenter implementing PlotPresenter.
#"""
from __future__ import annotations
import numpy as np
import xarray as xr
import plotly.graph_objects as go
from eim_app.domain.ports import PlotPresenter
from eim_app.domain.models import SweepResult, mode_label


class PlotPresenterPlotly(PlotPresenter):
    def neff_plot(self, result: SweepResult) -> go.Figure:
        ds: xr.Dataset = result.data  # type: ignore
        neff = ds["neff"]
        if "gap_um" in neff.dims:
            # one curve per slot width would explode; show the first slot width
            neff = neff.isel(gap_um=0)
        mode = str(ds.attrs.get("mode", "TE"))
        fig = go.Figure()
        for lam in neff.coords["lambda_um"].values:
            for j in neff.coords["order"].values:
                line = neff.sel(lambda_um=lam, order=j)
                fig.add_trace(go.Scatter(x=line.coords["width_um"].values,
                                         y=line.values,
                                         mode="lines+markers",
                                         name=f"{mode_label(mode, int(j))} @ λ={float(lam):.4g} μm"))  # type: ignore[arg-type]
        fig.update_layout(
            xaxis_title="Core width (μm)",
            yaxis_title="Effective index n_eff",
            template="plotly_white",
            title=f"Effective index ({ds.attrs.get('kind', 'strip')} waveguide)",
        )
        return fig

    def field_map(self, field: xr.DataArray) -> go.Figure:
        amp = np.abs(np.asarray(field.values))
        fig = go.Figure(
            data=go.Heatmap(
                x=field.coords["lateral_um"].values,
                y=field.coords["transverse_um"].values,
                z=amp,
                colorbar=dict(title="|E|"),
            )
        )
        fig.update_layout(
            xaxis_title="Lateral position (μm)",
            yaxis_title="Transverse position (μm)",
            template="plotly_white",
            title=f"Mode field {field.attrs.get('mode', '')}",
        )
        return fig
