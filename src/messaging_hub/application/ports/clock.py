from __future__ import annotations

from datetime import datetime, timezone
from typing import Protocol


class Clock(Protocol):
    def now(self) -> datetime: ...


class SystemClock:
    """UTC wall clock. Message age and typing expiry are measured against it."""

    def now(self) -> datetime:
        return datetime.now(timezone.utc)


system_clock = SystemClock()
