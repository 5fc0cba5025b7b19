"""Frame-rate statistics and a ring-buffer slot tracker."""

from __future__ import annotations

import itertools
import logging
import math
import threading
import time
from typing import Callable

_log = logging.getLogger(__name__)

WatchFn = Callable[[str, str], None]


def _default_watch(name: str, value: str) -> None:
    _log.debug("%s%s", name, value)


class StatsLogger:
    """Tracks frame rate between calls and reports current, maximum and minimum."""

    def __init__(
        self,
        name: str,
        refresh_rate: int = 100,
        watch: WatchFn | None = None,
        clock: Callable[[], int] = time.perf_counter_ns,
    ) -> None:
        self.refresh_rate = refresh_rate
        self.name_fps = name + " FPS: "
        self.name_max_fps = name + " MAX FPS: "
        self.name_min_fps = name + " MIN FPS: "
        self._watch = watch or _default_watch
        self._clock = clock
        self._frame_count = 0
        self.max_fps = -9999.0
        self.min_fps = 9999.0
        self._start = clock()

    def log_stats(self) -> float:
        """Record a frame, report the statistics and return the current FPS."""
        self._frame_count += 1
        if self._frame_count > self.refresh_rate:
            self._frame_count = 0
            self.max_fps = -math.inf
            self.min_fps = math.inf
        now = self._clock()
        elapsed_ms = (now - self._start) // 1_000_000
        fps = math.inf if elapsed_ms == 0 else 1.0 / elapsed_ms * 1000.0
        self.max_fps = max(self.max_fps, fps)
        self.min_fps = min(self.min_fps, fps)
        self._watch(self.name_fps, f"{fps:f}")
        self._watch(self.name_max_fps, f"{self.max_fps:f}")
        self._watch(self.name_min_fps, f"{self.min_fps:f}")
        self._start = now
        return fps


class RingProxy:
    """Tracks readable and writable slots of a fixed-size ring."""

    _ids = itertools.count(1)

    def __init__(self, size: int, ring_name: str = "", watch: WatchFn | None = None) -> None:
        ring_id = next(self._ids)
        self.size = size
        self.name = ring_name or f"Ring_{ring_id}"
        self.name_empty = self.name + " Empty Slots:"
        self.name_filled = self.name + " Filled Slots:"
        self._watch = watch or _default_watch
        self._lock = threading.Lock()
        self._condition: threading.Condition | None = None
        self._filled_once = False
        self.free_count = size
        self._next_readable = 0
        self._next_writable = 0

    def log_ring(self) -> None:
        """Report the number of empty and filled slots."""
        self._watch(self.name_empty, str(self.free_count))
        self._watch(self.name_filled, str(self.size - self.free_count))

    def set_condition_variable(self, condition: threading.Condition | None) -> None:
        """Notify ``condition`` whenever a slot has been written."""
        self._condition = condition

    def get_next_readable(self) -> int | None:
        """Return the next slot to read, or None before the ring first filled."""
        with self._lock:
            if self.free_count == self.size and not self._filled_once:
                return None
            return self._next_readable

    def set_read(self) -> None:
        """Mark the current readable slot as consumed."""
        with self._lock:
            if self.free_count >= self.size:
                raise RuntimeError(f"{self.name}: no filled slot to release")
            self.free_count += 1
            self._next_readable = (self._next_readable + 1) % self.size

    def get_next_writable(self) -> int | None:
        """Return the next slot to write, or None when the ring is full."""
        with self._lock:
            if self.free_count == 0:
                return None
            return self._next_writable

    def set_wrote(self) -> None:
        """Mark the current writable slot as filled."""
        with self._lock:
            if self.free_count == 0:
                raise RuntimeError(f"{self.name}: no free slot to fill")
            self.free_count -= 1
            self._next_writable = (self._next_writable + 1) % self.size
            if self.free_count == 0:
                self._filled_once = True
            condition = self._condition
        if condition is not None:
            with condition:
                condition.notify()

    def is_readable(self) -> bool:
        """True once the ring has filled and some slot holds data."""
        with self._lock:
            if not self._filled_once:
                return False
            return self.free_count < self.size

    def is_writeable(self) -> bool:
        """True if a free slot exists."""
        with self._lock:
            return self.free_count > 0

    def is_ready(self) -> bool:
        """True once every slot has been filled at least once."""
        return self._filled_once