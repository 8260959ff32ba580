from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Any, Callable, List, Sequence

from pydantic import ValidationError

from eim_app.adapters.presets_local.store import LocalPresetStore
from eim_app.domain.models import FieldConfig, SweepConfig, SweepResult
from eim_app.exporting.io import (
    field_table,
    figure_to_png_bytes,
    sweep_table,
    to_csv_bytes,
    to_csv_text,
)
from eim_app.orchestration.sweep import field_map, iter_waveguides, run_sweep
from eim_app.plotting_plotly.presenter import PlotPresenterPlotly

logger = logging.getLogger("eim_app")

DEFAULT_FIELD_LOG = "mode2D_strip.csv"


class ConfigError(Exception):
    """Invalid command line configuration; `context` prefixes the message."""

    def __init__(self, context: str, message: str) -> None:
        super().__init__(message)
        self.context = context


def _list_of(cast: Callable[[str], Any], what: str) -> Callable[[str], List[Any]]:
    def parse(text: str) -> List[Any]:
        try:
            return [cast(tok) for tok in text.split(",") if tok.strip()]
        except ValueError as e:
            raise argparse.ArgumentTypeError(f"invalid {what} list {text!r}") from e

    return parse


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="eim",
        description="Effective index method for strip and slot waveguides. "
        "Writes t_*,width,wavelength,mode,neff rows as CSV to stdout.",
    )
    g = p.add_argument_group("waveguide control")
    g.add_argument("-t", "--type", dest="kind", choices=("strip", "slot"), help="waveguide type")
    g.add_argument("-r", "--t-core", type=float, help="rib/core thickness (μm)")
    g.add_argument("-s", "--t-slab", type=float, help="slab thickness (μm)")
    g.add_argument("-w", "--widths", type=_list_of(float, "width"), help="rib/core width(s)")
    g.add_argument("-S", "--gaps", type=_list_of(float, "slot width"), help="slot width(s)")
    g.add_argument(
        "-n", "--indices", type=_list_of(float, "index"),
        help="refractive indices n_box,n_core,n_clad[,n_slot]",
    )
    g.add_argument("-m", "--mode", choices=("TE", "TM"), help="mode polarization")
    g.add_argument("-j", "--orders", type=_list_of(int, "mode order"), help="mode order(s)")
    g.add_argument("-l", "--wavelengths", type=_list_of(float, "wavelength"), help="wavelength(s) (μm)")

    o = p.add_argument_group("output control")
    o.add_argument("-O", "--field", action="store_true", help="enable 2D mode field calculation")
    o.add_argument("-o", "--field-file", help=f"mode field CSV (default {DEFAULT_FIELD_LOG})")
    o.add_argument("-e", "--extent", type=float, help="half-extent of the field window (μm)")
    o.add_argument("-p", "--points", type=int, help="number of points per axis")
    o.add_argument("--plot", type=Path, help="n_eff versus width figure (.png or .html)")
    o.add_argument(
        "--plot-field", type=Path,
        help="|E| heatmap of the first sweep point (.png or .html); needs -O",
    )

    c = p.add_argument_group("configuration")
    c.add_argument("--preset", help="start from a saved preset")
    c.add_argument("--save-preset", help="save the resulting configuration as a preset")
    c.add_argument("--preset-dir", type=Path, default=None, help="preset directory (default ./presets)")
    c.add_argument("-v", "--verbose", action="store_true", help="debug logging")
    return p


def _indices(values: Sequence[float]) -> dict[str, float]:
    names = ("n_box", "n_core", "n_clad", "n_slot")
    if len(values) < 3:
        raise ConfigError("n", f"{names[len(values)]} missing")
    if len(values) > 4:
        raise ConfigError("n", "at most four indices: n_box,n_core,n_clad,n_slot")
    return dict(zip(names, values))


def config_from_args(args: argparse.Namespace, base: SweepConfig | None = None) -> SweepConfig:
    """Merge command line options over an optional preset and validate."""
    data: dict[str, Any] = base.model_dump() if base is not None else {}
    if args.indices is not None:
        data.update(_indices(args.indices))
    overrides = {
        "kind": args.kind,
        "t_core_um": args.t_core,
        "t_slab_um": args.t_slab,
        "mode": args.mode,
        "wavelengths_um": args.wavelengths,
        "widths_um": args.widths,
        "gaps_um": args.gaps,
        "mode_orders": args.orders,
    }
    data.update({k: v for k, v in overrides.items() if v is not None})

    if args.field:
        current = data.get("field") or {}
        points = args.points if args.points is not None else current.get("points")
        extent = args.extent if args.extent is not None else current.get("extent_um")
        if not points:
            raise ConfigError("setup", "Must set number of mode points")
        if not extent:
            raise ConfigError("setup", "Must set mode extent")
        data["field"] = dict(
            points=points,
            extent_um=extent,
            filename=args.field_file or current.get("filename"),
        )
    if args.plot_field is not None and not data.get("field"):
        raise ConfigError("setup", "Field plot requires mode field calculation (-O)")

    for key, what in (
        ("wavelengths_um", "wavelength"),
        ("widths_um", "width"),
        ("mode_orders", "mode order"),
    ):
        if not data.get(key):
            raise ConfigError("setup", f"Must specify at least one {what}")
    for key in ("n_box", "n_core", "n_clad"):
        if not data.get(key):
            raise ConfigError("setup", "Must specify refractive index")
    if not data.get("t_core_um"):
        raise ConfigError("setup", "Must specify core thickness")
    if data.get("kind") == "slot" and not data.get("gaps_um"):
        raise ConfigError("setup", "Must specify at least one slot width")

    try:
        return SweepConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigError("setup", "; ".join(err["msg"] for err in e.errors())) from e


def write_field_maps(cfg: SweepConfig, field_cfg: FieldConfig) -> Path | None:
    if cfg.kind == "slot":
        logger.warning("2D mode field calculation not implemented for slot waveguides.")
        return None
    path = Path(field_cfg.filename or DEFAULT_FIELD_LOG)
    with path.open("wb") as f:
        header = True
        for _, wg in iter_waveguides(cfg):
            f.write(to_csv_bytes(field_table(field_map(wg, field_cfg)), header=header))
            header = False
    logger.info("mode field written to %s", path)
    return path


def write_figure(fig: Any, path: Path) -> Path:
    """PNG through Kaleido for a .png suffix, standalone HTML otherwise."""
    if path.suffix.lower() == ".png":
        path.write_bytes(figure_to_png_bytes(fig))
    else:
        fig.write_html(str(path), include_plotlyjs="cdn")
    logger.info("figure written to %s", path)
    return path


def write_plots(cfg: SweepConfig, result: SweepResult, args: argparse.Namespace) -> None:
    presenter = PlotPresenterPlotly()
    if args.plot is not None:
        write_figure(presenter.neff_plot(result), args.plot)
    if args.plot_field is not None and cfg.field is not None:
        if cfg.kind == "slot":
            logger.warning("2D mode field calculation not implemented for slot waveguides.")
            return
        _, wg = next(iter_waveguides(cfg))
        write_figure(presenter.field_map(field_map(wg, cfg.field)), args.plot_field)


def main(argv: Sequence[str] | None = None) -> int:
    """CLI entry: solve the requested sweep and print it as CSV."""
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="[%(levelname)s] %(name)s: %(message)s",
        stream=sys.stderr,
    )

    try:
        store = LocalPresetStore(args.preset_dir) if (args.preset or args.save_preset) else None
        base = store.load(args.preset) if (store and args.preset) else None
        cfg = config_from_args(args, base)
        if store and args.save_preset:
            store.save(args.save_preset, cfg)
    except ConfigError as e:
        sys.stderr.write(f"[ERROR] {e.context}: {e}\n")
        return 1
    except KeyError as e:
        sys.stderr.write(f"[ERROR] preset: {e.args[0]}\n")
        return 1
    except ValueError as e:
        sys.stderr.write(f"[ERROR] preset: {e}\n")
        return 1

    try:
        result = run_sweep(cfg)
        sys.stdout.write(to_csv_text(sweep_table(result.data)))  # type: ignore[arg-type]
        if cfg.field is not None:
            write_field_maps(cfg, cfg.field)
    except (ValueError, OSError) as e:
        sys.stderr.write(f"[ERROR] calculation: {e}\n")
        return 1

    try:
        write_plots(cfg, result, args)
    except (RuntimeError, OSError) as e:
        sys.stderr.write(f"[ERROR] export: {e}\n")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
