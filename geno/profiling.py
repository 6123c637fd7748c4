"""A small wall-clock timer that reports elapsed time with a message."""

from __future__ import annotations

import sys
import time
from typing import IO, Callable, Optional


class Timer:
    """Measures the time from creation to :meth:`stop` and prints it."""

    def __init__(
        self,
        message: str,
        stream: Optional[IO[str]] = None,
        clock: Callable[[], int] = time.perf_counter_ns,
    ) -> None:
        self.message = message
        self.stream = stream
        self._clock = clock
        self._start = clock()
        self.stopped = False

    def stop(self) -> str:
        """Print and return the message followed by the elapsed time."""
        diff = float((self._clock() - self._start) // 1000)
        if diff >= 1_000_000.0:
            elapsed = f"{diff / 1_000_000:g}s"
        elif diff >= 1000.0:
            elapsed = f"{diff / 1000.0:g}ms"
        else:
            elapsed = f"{diff:g}us"
        line = f"{self.message} {elapsed}\n"
        (self.stream if self.stream is not None else sys.stdout).write(line)
        self.stopped = True
        return line

    def __enter__(self) -> "Timer":
        return self

    def __exit__(self, *args) -> None:
        if not self.stopped:
            self.stop()