# """
# Ports (interfaces) for adapters. Orchestration and the CLI depend ONLY on these.
# """
from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

import numpy as np

from .models import SweepResult


class WaveguideEngine(ABC):
    @abstractmethod
    def solve(self, wg: Any) -> float:
        """Return the effective index of the requested mode (fallback index if unguided)."""

    @abstractmethod
    def solve_detailed(self, wg: Any) -> Any:
        """Return the effective index together with its convergence flag."""

    @abstractmethod
    def mode_2d(self, wg: Any, x_um: np.ndarray, y_um: np.ndarray) -> np.ndarray:
        """Complex field map indexed [row=y][col=x], positions from the core centre."""


class PlotPresenter(ABC):
    @abstractmethod
    def neff_plot(self, result: SweepResult) -> Any:
        """Figure: n_eff versus core width, one trace per wavelength and mode order."""

    @abstractmethod
    def field_map(self, field: Any) -> Any:
        """Figure: heatmap of |E| over the cross-section."""
