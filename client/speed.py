"""Sliding-window transfer speed measurement."""

import time
from collections import deque
from typing import Callable, Deque, Tuple

from common.constants import SPEED_WINDOW_SECONDS


class SpeedMeter:
    """
    Tracks bytes received over the last `window` seconds.

    Usage:
        meter = SpeedMeter()
        meter.record(len(piece))
        bytes_per_second = meter.rate()
    """

    def __init__(
        self,
        window: float = SPEED_WINDOW_SECONDS,
        clock: Callable[[], float] = time.monotonic
    ):
        self.window = window
        self._clock = clock
        self._samples: Deque[Tuple[float, int]] = deque()
        self._window_bytes = 0

    def record(self, nbytes: int) -> None:
        now = self._clock()
        self._samples.append((now, nbytes))
        self._window_bytes += nbytes
        self._trim(now)

    def rate(self) -> float:
        """Average bytes per second over the window."""
        self._trim(self._clock())
        return self._window_bytes / self.window

    def reset(self) -> None:
        self._samples.clear()
        self._window_bytes = 0

    def _trim(self, now: float) -> None:
        cutoff = now - self.window
        while self._samples and self._samples[0][0] <= cutoff:
            _, nbytes = self._samples.popleft()
            self._window_bytes -= nbytes
