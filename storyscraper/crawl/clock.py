"""Time source for the politeness delay, swappable in tests."""

from __future__ import annotations

import time
from typing import Protocol


class Clock(Protocol):
    def sleep(self, seconds: float) -> None: ...


class SystemClock:
    def sleep(self, seconds: float) -> None:
        time.sleep(seconds)
