"""
Upload progress reporting.

Two sources feed the same `UploadProgress`:

- measured: `ProgressBuffer` reports how much of the file the multipart body
  stream has consumed;
- simulated: `simulate_progress` adds a fixed step on a timer, so a user gets
  feedback even when the body is sent in one go.

Both stop at the cap (95 % by default) until the response arrives, then the
caller snaps to 100. `indicative` stays True as long as only simulated ticks
were observed: the number is then an estimate, not a measurement.
"""

import asyncio
import io
from typing import Callable, Optional


class UploadProgress:
    """Percentage shown next to an upload."""

    def __init__(self, cap: int = 95, on_change: Optional[Callable[[int], None]] = None):
        self.cap = cap
        self.on_change = on_change
        self.percent = 0
        self.indicative = True

    def advance_to(self, percent: int, measured: bool = False) -> None:
        if measured:
            self.indicative = False
        percent = min(int(percent), self.cap)
        if percent > self.percent:
            self._set(percent)

    def tick(self, step: int) -> None:
        self.advance_to(self.percent + step)

    def complete(self) -> None:
        self._set(100)

    def reset(self) -> None:
        self.indicative = True
        self._set(0)

    def _set(self, percent: int) -> None:
        self.percent = percent
        if self.on_change is not None:
            self.on_change(percent)


class ProgressBuffer(io.BytesIO):
    """In-memory file whose reads advance an `UploadProgress`."""

    def __init__(self, data: bytes, progress: UploadProgress):
        super().__init__(data)
        self.total = len(data)
        self.progress = progress

    def read(self, size: Optional[int] = -1) -> bytes:
        chunk = super().read(size)
        if self.total:
            self.progress.advance_to(self.tell() * 100 // self.total, measured=True)
        return chunk


async def simulate_progress(progress: UploadProgress, step: int, interval: float) -> None:
    """Timer-driven ramp; runs until cancelled or the cap is reached."""
    while progress.percent < progress.cap:
        await asyncio.sleep(interval)
        progress.tick(step)
