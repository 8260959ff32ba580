# eim_app/adapters/solver_eim/bisection.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Literal

RootStatus = Literal["CONVERGED", "DIVERGED", "INVALID_RANGE"]


@dataclass(frozen=True)
class RootResult:
    root: float
    status: RootStatus
    iterations: int
    residual: float  # |f| at the returned point

    @property
    def converged(self) -> bool:
        return self.status == "CONVERGED"


def bisection(
    f: Callable[[float], float],
    a: float,
    b: float,
    *,
    tol: float = 1e-4,
    max_iter: int = 100,
) -> RootResult:
    """
    Bisection root search of f on [a, b].

    The bracket must straddle a sign change. Otherwise the result carries
    status INVALID_RANGE with root=a and residual=min(|f(a)|, |f(b)|); the
    caller treats that as "no root here" and substitutes its own fallback.

    Iteration stops as soon as |f(mid)| < tol. If the iteration budget runs
    out, one last midpoint is evaluated and the status is CONVERGED only when
    the remaining half-width is <= tol. A midpoint within tol of either
    original endpoint is reported as DIVERGED: a root pinned to the bracket
    edge is a boundary artefact, not an interior solution.

    f is never evaluated outside [a, b].
    """
    a0, b0 = float(a), float(b)
    lo, hi = a0, b0
    f_lo = f(lo)
    f_hi = f(hi)

    if f_lo * f_hi > 0.0:
        return RootResult(
            root=a0,
            status="INVALID_RANGE",
            iterations=0,
            residual=min(abs(f_lo), abs(f_hi)),
        )

    it = 0
    while it < max_iter:
        mid = 0.5 * (lo + hi)
        f_mid = f(mid)
        if abs(f_mid) < tol:
            return RootResult(root=mid, status="CONVERGED", iterations=it, residual=abs(f_mid))
        # keep the half that still holds the sign change
        if f_lo * f_mid < 0.0:
            hi, f_hi = mid, f_mid
        else:
            lo, f_lo = mid, f_mid
        it += 1

    mid = 0.5 * (lo + hi)
    f_mid = f(mid)
    status: RootStatus = "CONVERGED" if 0.5 * (hi - lo) <= tol else "DIVERGED"
    if abs(mid - a0) < tol or abs(mid - b0) < tol:
        status = "DIVERGED"
    return RootResult(root=mid, status=status, iterations=it, residual=abs(f_mid))
