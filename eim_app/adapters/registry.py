# eim_app/adapters/registry.py
"""
Waveguide kind → engine.

Every engine is built from the same two options: `concurrent` solves the TE
and TM slab roots on separate threads, `workers` splits field evaluation
across a thread pool. Engines that evaluate no fields ignore `workers`.
"""
from __future__ import annotations

from typing import Callable, Dict, List, Optional

from eim_app.adapters.solver_eim.slot import SlotEngine
from eim_app.adapters.solver_eim.strip import StripEngine
from eim_app.domain.ports import WaveguideEngine

__all__ = ["list_engines", "make_engine"]

EngineFactory = Callable[[bool, Optional[int]], WaveguideEngine]


def _strip(concurrent: bool, workers: int | None) -> WaveguideEngine:
    return StripEngine(concurrent=concurrent, workers=workers)


def _slot(concurrent: bool, workers: int | None) -> WaveguideEngine:
    # slot field maps are not available, so there is nothing to spread over workers
    return SlotEngine(concurrent=concurrent)


_FACTORIES: Dict[str, EngineFactory] = {
    "strip": _strip,
    "slot": _slot,
}


def list_engines() -> List[str]:
    return list(_FACTORIES)


def make_engine(name: str, *, concurrent: bool = False, workers: int | None = None) -> WaveguideEngine:
    factory = _FACTORIES.get(name)
    if factory is None:
        raise KeyError(f"Unknown engine '{name}'. Available: {', '.join(_FACTORIES)}")
    if workers is not None and workers < 1:
        raise ValueError("workers must be >= 1")
    return factory(concurrent, workers)
