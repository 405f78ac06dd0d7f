"""Clock sources for expiry and resolution gating."""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Protocol


class Clock(Protocol):
    def now(self) -> int:
        """Current unix timestamp in seconds."""
        ...


class SystemClock:
    def now(self) -> int:
        return int(time.time())


@dataclass
class FixedClock:
    """Manually driven clock for tests and offline replays."""

    timestamp: int = 0

    def now(self) -> int:
        return self.timestamp

    def advance(self, seconds: int) -> int:
        if seconds < 0:
            raise ValueError(f"cannot move the clock backwards: {seconds}")
        self.timestamp += seconds
        return self.timestamp
