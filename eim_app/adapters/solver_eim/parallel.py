# eim_app/adapters/solver_eim/parallel.py
"""
Partition-map-join helpers for independent work items.

Work is split into contiguous chunks, one pool task per chunk. Every task is
joined before anything is re-raised; when several chunks fail, only the
first failure (in chunk order) propagates. Results keep the input order.
"""
from __future__ import annotations

import os
from concurrent.futures import Future, ThreadPoolExecutor, wait
from typing import Any, Callable, Sequence, TypeVar

T = TypeVar("T")
R = TypeVar("R")

__all__ = ["chunk_bounds", "default_workers", "parallel_map", "run_concurrently"]


def default_workers() -> int:
    return os.cpu_count() or 1


def chunk_bounds(size: int, workers: int) -> list[tuple[int, int]]:
    """
    Contiguous [start, stop) ranges covering range(size).

    At most `workers` chunks; the last chunk absorbs the remainder.
    """
    if size < 0:
        raise ValueError("size must be >= 0")
    if workers < 1:
        raise ValueError("workers must be >= 1")
    if size == 0:
        return []
    n = min(workers, size)
    step = size // n
    bounds = []
    start = 0
    for i in range(n):
        stop = size if i == n - 1 else start + step
        bounds.append((start, stop))
        start = stop
    return bounds


def _join(futures: Sequence[Future[Any]]) -> list[Any]:
    wait(futures)
    first: BaseException | None = None
    out: list[Any] = []
    for fut in futures:
        exc = fut.exception()
        if exc is not None:
            if first is None:
                first = exc
            out.append(None)
        else:
            out.append(fut.result())
    if first is not None:
        raise first
    return out


def parallel_map(
    func: Callable[[T], R], items: Sequence[T], workers: int | None = None
) -> list[R]:
    """Apply func to every item, chunked across a thread pool. Order is preserved."""
    items = list(items)
    nworkers = default_workers() if workers is None else int(workers)
    bounds = chunk_bounds(len(items), nworkers)
    if len(bounds) <= 1:
        return [func(it) for it in items]

    def _run_chunk(lo: int, hi: int) -> list[R]:
        return [func(items[k]) for k in range(lo, hi)]

    with ThreadPoolExecutor(max_workers=len(bounds)) as pool:
        futures = [pool.submit(_run_chunk, lo, hi) for lo, hi in bounds]
        chunks = _join(futures)

    out: list[R] = []
    for chunk in chunks:
        out.extend(chunk)
    return out


def run_concurrently(*funcs: Callable[[], Any]) -> tuple[Any, ...]:
    """Run zero-argument callables on separate threads; return their results in order."""
    if not funcs:
        return ()
    with ThreadPoolExecutor(max_workers=len(funcs)) as pool:
        futures = [pool.submit(fn) for fn in funcs]
        return tuple(_join(futures))
