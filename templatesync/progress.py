"""Busy indicator printed while a long copy or balance pass runs."""

from __future__ import annotations

import sys
import threading
import time
from typing import Optional, TextIO


class ProgressIndicator:
    """Draws a moving bar on a background thread until ``running`` is cleared.

    The worker only reads the ``running`` flag once per tick and never touches the
    files being processed.
    """

    def __init__(self, stream: TextIO | None = None, *, interval: float = 0.2, width: int = 60) -> None:
        self.stream = stream if stream is not None else sys.stderr
        self.interval = interval
        self.width = width
        self.running = False
        self._thread: Optional[threading.Thread] = None

    def start(self) -> None:
        if self.running:
            return
        self.running = True
        self._thread = threading.Thread(target=self._run, name="templatesync-progress", daemon=True)
        self._thread.start()

    def stop(self) -> None:
        self.running = False
        if self._thread is not None:
            self._thread.join(timeout=self.interval * 5)
            self._thread = None
            self.stream.write("\n")
            self.stream.flush()

    def __enter__(self) -> "ProgressIndicator":
        self.start()
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.stop()

    def _run(self) -> None:
        ticks_per_second = max(int(round(1 / self.interval)), 1) if self.interval > 0 else 1
        position = 0
        ticks = 0
        while self.running:
            if position > self.width:
                position = 0
            bar = "=" * position + ">"
            seconds = ticks // ticks_per_second
            self.stream.write(f"\r{bar:<{self.width + 1}} {seconds:5} [sec]")
            self.stream.flush()
            position += 1
            ticks += 1
            time.sleep(self.interval)


__all__ = ["ProgressIndicator"]
