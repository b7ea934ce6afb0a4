"""Bounded, cancellable fan-out over a thread pool."""

from __future__ import annotations

import threading
from concurrent.futures import FIRST_COMPLETED, ThreadPoolExecutor, wait
from typing import Callable, Sequence, TypeVar

from codeqa.errors import AnalysisCancelledError

T = TypeVar("T")
R = TypeVar("R")

POLL_INTERVAL = 0.1  # seconds between cancellation checks


def check_cancelled(cancel: threading.Event | None) -> None:
    if cancel is not None and cancel.is_set():
        raise AnalysisCancelledError("Analysis cancelled")


def map_ordered(
    fn: Callable[[T], R],
    items: Sequence[T],
    max_workers: int,
    cancel: threading.Event | None = None,
) -> list[R]:
    """Apply `fn` to every item on up to `max_workers` threads.

    Results come back in input order whatever the completion order. When
    `cancel` is set, queued work is dropped, running calls are abandoned
    (not awaited) and AnalysisCancelledError is raised.
    """
    check_cancelled(cancel)
    if not items:
        return []

    executor = ThreadPoolExecutor(max_workers=max(1, max_workers))
    future_to_index = {executor.submit(fn, item): i for i, item in enumerate(items)}
    results: list[R | None] = [None] * len(items)
    pending = set(future_to_index)
    abandoned = False

    try:
        while pending:
            if cancel is not None and cancel.is_set():
                abandoned = True
                raise AnalysisCancelledError("Analysis cancelled")
            done, pending = wait(pending, timeout=POLL_INTERVAL, return_when=FIRST_COMPLETED)
            for future in done:
                results[future_to_index[future]] = future.result()
    finally:
        executor.shutdown(wait=not abandoned, cancel_futures=True)

    return results  # type: ignore[return-value]
