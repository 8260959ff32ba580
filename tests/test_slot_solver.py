from __future__ import annotations

import math

import pytest

from eim_app.adapters.solver_eim.slot import (
    slot_cosh_equation,
    slot_sinh_equation,
    solve_slot_slab,
    solve_slot_slab_detailed,
)

LAM = 1.55
N_CLAD, N_RAIL, N_SLOT = 1.44, 2.84, 1.44  # rail index ≈ vertical TE index of 220 nm Si


def test_even_and_odd_modes_are_guided_and_ordered() -> None:
    sol = solve_slot_slab_detailed(N_CLAD, N_RAIL, N_SLOT, LAM, 0.1, 0.25, 0)
    assert sol.even.converged
    even, odd = sol.as_tuple()
    lo = max(N_CLAD, N_SLOT)
    assert lo < even < N_RAIL
    assert lo <= odd <= even


def test_roots_satisfy_slot_equations() -> None:
    a, b = 0.05, 0.05 + 0.25
    sol = solve_slot_slab_detailed(N_CLAD, N_RAIL, 1.0, LAM, 0.1, 0.25, 0)
    assert sol.even.converged
    assert abs(slot_cosh_equation(N_CLAD, N_RAIL, 1.0, LAM, a, b, 0, sol.neff_even)) < 1e-4
    if sol.odd.converged:
        assert abs(slot_sinh_equation(N_CLAD, N_RAIL, 1.0, LAM, a, b, 0, sol.neff_odd)) < 1e-4


def test_odd_branch_is_finite_at_the_slot_index() -> None:
    # γ_slot = 0 at neff = n_slot; γ coth(γ a) → 1/a
    v = slot_sinh_equation(N_CLAD, N_RAIL, N_SLOT, LAM, 0.05, 0.3, 0, N_SLOT)
    assert math.isfinite(v)


def test_wider_slot_lowers_even_index() -> None:
    narrow, _ = solve_slot_slab(N_CLAD, N_RAIL, N_SLOT, LAM, 0.05, 0.25, 0)
    wide, _ = solve_slot_slab(N_CLAD, N_RAIL, N_SLOT, LAM, 0.3, 0.25, 0)
    assert wide < narrow


@pytest.mark.parametrize(
    "n_clad,n_core,n_slot,j",
    [
        (1.44, 2.84, 1.44, 8),  # order far beyond cutoff
        (1.44, 1.40, 1.0, 0),  # rails below the cladding: no guided band
        (1.0, 1.30, 1.50, 0),  # slot index above the rails
    ],
)
def test_unsupported_modes_fall_back_to_max_index(
    n_clad: float, n_core: float, n_slot: float, j: int
) -> None:
    even, odd = solve_slot_slab(n_clad, n_core, n_slot, LAM, 0.1, 0.25, j)
    assert even == max(n_clad, n_slot)
    assert odd == max(n_clad, n_slot)


def test_closed_slot_is_finite() -> None:
    # w_slot = 0: the rails touch; coth(0) saturates the odd branch
    sol = solve_slot_slab_detailed(N_CLAD, N_RAIL, N_SLOT, LAM, 0.0, 0.25, 0)
    even, odd = sol.as_tuple()
    assert math.isfinite(even) and math.isfinite(odd)
    assert even >= odd
    assert sol.even.converged
    assert math.isfinite(slot_sinh_equation(N_CLAD, N_RAIL, N_SLOT, LAM, 0.0, 0.25, 0, 2.0))
