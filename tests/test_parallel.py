"""Tests for the bounded thread-pool fan-out."""

from __future__ import annotations

import threading
import time

import pytest

from codeqa.errors import AnalysisCancelledError
from codeqa.parallel import check_cancelled, map_ordered


class TestMapOrdered:
    def test_preserves_input_order(self):
        def slow_for_small(n):
            time.sleep(0.01 * (5 - n))
            return n * n

        assert map_ordered(slow_for_small, [0, 1, 2, 3, 4], max_workers=5) == [0, 1, 4, 9, 16]

    def test_empty(self):
        assert map_ordered(str, [], max_workers=4) == []

    def test_bounded_workers(self):
        lock = threading.Lock()
        active = 0
        peak = 0

        def work(_):
            nonlocal active, peak
            with lock:
                active += 1
                peak = max(peak, active)
            time.sleep(0.02)
            with lock:
                active -= 1

        map_ordered(work, range(10), max_workers=2)
        assert peak <= 2

    def test_errors_propagate(self):
        def boom(n):
            if n == 2:
                raise RuntimeError("bad item")
            return n

        with pytest.raises(RuntimeError, match="bad item"):
            map_ordered(boom, [1, 2, 3], max_workers=2)

    def test_cancel_before_start(self):
        cancel = threading.Event()
        cancel.set()
        calls = []
        with pytest.raises(AnalysisCancelledError):
            map_ordered(calls.append, [1, 2], max_workers=2, cancel=cancel)
        assert calls == []

    def test_cancel_while_running(self):
        cancel = threading.Event()
        release = threading.Event()

        def work(n):
            if n == 0:
                cancel.set()
            release.wait(timeout=2)
            return n

        try:
            with pytest.raises(AnalysisCancelledError):
                map_ordered(work, list(range(4)), max_workers=1, cancel=cancel)
        finally:
            release.set()


class TestCheckCancelled:
    def test_no_event(self):
        check_cancelled(None)

    def test_unset_event(self):
        check_cancelled(threading.Event())
