"""Optional memory and garbage-collector reporting.

When enabled, a ``gc.callbacks`` hook logs a ``gc-stats`` line after every
collection and a timer logs ``process-stats`` every ``interval`` seconds.
Both only write through the site logger.
"""

from __future__ import annotations

import gc
import logging
import sys
import threading
import time
from typing import Any, Dict, Optional

try:  # not available on Windows
    import resource
except ImportError:  # pragma: no cover - platform specific
    resource = None  # type: ignore[assignment]


def process_stats() -> Dict[str, Any]:
    stats: Dict[str, Any] = {
        "gc_count": list(gc.get_count()),
        "gc_objects": len(gc.get_objects()),
        "threads": threading.active_count(),
    }
    if resource is not None:
        usage = resource.getrusage(resource.RUSAGE_SELF)
        # ru_maxrss is in kilobytes on Linux and bytes on macOS
        scale = 1 if sys.platform == "darwin" else 1024
        stats["max_rss_bytes"] = usage.ru_maxrss * scale
        stats["user_time"] = usage.ru_utime
        stats["system_time"] = usage.ru_stime
    return stats


class MemoryDiagnostics:
    """Periodic ``process-stats`` and per-collection ``gc-stats`` reporter."""

    def __init__(self, logger: logging.Logger, prefix: str, interval: float = 60.0) -> None:
        self.logger = logger
        self.prefix = prefix
        self.interval = interval
        self._lock = threading.Lock()
        self._timer: Optional[threading.Timer] = None
        self._running = False
        self._gc_started: Optional[float] = None

    @property
    def running(self) -> bool:
        return self._running

    def start(self) -> "MemoryDiagnostics":
        with self._lock:
            if self._running:
                return self
            self._running = True
            gc.callbacks.append(self._on_gc)
            self._schedule()
        return self

    def stop(self) -> None:
        with self._lock:
            if not self._running:
                return
            self._running = False
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None
            try:
                gc.callbacks.remove(self._on_gc)
            except ValueError:
                pass

    def _schedule(self) -> None:
        timer = threading.Timer(self.interval, self._tick)
        timer.daemon = True
        timer.name = "booksite-diagnostics"
        self._timer = timer
        timer.start()

    def _tick(self) -> None:
        self.report()
        with self._lock:
            if self._running:
                self._schedule()

    def report(self) -> Dict[str, Any]:
        stats = process_stats()
        self.logger.debug("%s : process-stats %s", self.prefix, stats)
        return stats

    def _on_gc(self, phase: str, info: Dict[str, Any]) -> None:
        if phase == "start":
            self._gc_started = time.perf_counter()
            return
        duration_ms = None
        if self._gc_started is not None:
            duration_ms = round((time.perf_counter() - self._gc_started) * 1000, 3)
            self._gc_started = None
        stats = dict(info, duration_ms=duration_ms)
        self.logger.debug("%s : gc-stats %s", self.prefix, stats)


__all__ = ["MemoryDiagnostics", "process_stats"]
