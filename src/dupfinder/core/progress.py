"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

core/progress.py
Thread-safe cancellation token and progress sink shared by worker pools.
"""
import threading
from typing import Optional

from dupfinder.core.interfaces import ProgressCallback


class CancellationToken:
    """Cooperative cancellation flag. Callable, so it can be passed as a stopped_flag."""

    def __init__(self):
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    def __call__(self) -> bool:
        return self._event.is_set()


class ProgressCounter:
    """
    Counts finished work items from several threads and reports
    a scaled fraction through the callback.

    Reported fraction = offset + scale * processed / total.
    """

    def __init__(
        self,
        total: int,
        callback: Optional[ProgressCallback],
        message: str,
        scale: float = 1.0,
        offset: float = 0.0,
    ):
        self.total = total
        self.callback = callback
        self.message = message
        self.scale = scale
        self.offset = offset
        self.processed = 0
        self._lock = threading.Lock()

    def advance(self, step: int = 1) -> float:
        """Adds step finished items and emits the new fraction. Returns it."""
        with self._lock:
            self.processed += step
            fraction = self.offset
            if self.total > 0:
                fraction += self.scale * min(self.processed, self.total) / self.total
            # Emit under the lock so fractions reach the callback in order
            if self.callback:
                self.callback(fraction, self.message)
            return fraction
