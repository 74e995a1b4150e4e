"""Bounded worker pool for per-node work (scalar multiplication dominates cost)."""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from typing import Callable, List, Sequence, TypeVar

from errors import InvalidInput

T = TypeVar("T")
R = TypeVar("R")


def parallel_map(fn: Callable[[T], R], items: Sequence[T], max_workers: int | None = None) -> List[R]:
    """Apply ``fn`` to every item on a bounded thread pool, preserving input order.

    The first exception raised by ``fn`` propagates to the caller unchanged.
    """
    if max_workers is not None and max_workers < 1:
        raise InvalidInput(f"max_workers must be >= 1, got {max_workers}")
    if not items:
        return []
    if max_workers == 1 or len(items) == 1:
        return [fn(item) for item in items]
    workers = min(max_workers, len(items)) if max_workers else None
    with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="pvss") as executor:
        return list(executor.map(fn, items))
