# mlm_system/utils/time_machine.py
"""
Ledger clock - source of joinedAt and createdAt timestamps.

Runs on UTC wall time until a fixed time is pinned with setTime(); tests
and simulations pin and advance it so transaction ordering is reproducible.
"""
from datetime import datetime, timezone, timedelta
from typing import Optional
import logging

logger = logging.getLogger(__name__)


class LedgerClock:
    """UTC clock that can be frozen at a chosen instant."""

    def __init__(self):
        self._pinned: Optional[datetime] = None

    @property
    def now(self) -> datetime:
        if self._pinned is not None:
            return self._pinned
        return datetime.now(timezone.utc)

    def setTime(self, newTime: datetime):
        """Freeze the clock; naive values are taken as UTC."""
        if newTime.tzinfo is None:
            newTime = newTime.replace(tzinfo=timezone.utc)
        self._pinned = newTime
        logger.info(f"Ledger clock pinned at {newTime}")

    def advanceTime(self, days: int = 0, hours: int = 0, seconds: int = 0):
        """Move a pinned clock forward."""
        if self._pinned is None:
            raise ValueError("Ledger clock is not pinned; call setTime() first")
        self._pinned += timedelta(days=days, hours=hours, seconds=seconds)
        logger.debug(f"Ledger clock advanced to {self._pinned}")

    def resetToRealTime(self):
        self._pinned = None
        logger.info("Ledger clock back on wall time")


timeMachine = LedgerClock()
