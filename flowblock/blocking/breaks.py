"""
Temporary breaks — per-domain, time-boxed exemptions from blocking.

Expired entries are removed by the check that notices them; there is no sweeper.
"""

from __future__ import annotations

import logging
import time
from typing import Callable, Dict, Optional

from ..storage.repository import Repository

logger = logging.getLogger(__name__)


class BreakRegistry:

    def __init__(self, repo: Repository, clock: Callable[[], float] = time.time):
        self._repo = repo
        self._clock = clock

    def is_exempt(self, domain: str, now: Optional[float] = None) -> bool:
        now = self._clock() if now is None else now
        breaks = self._repo.get_temporary_breaks()
        expiry = breaks.get(domain)
        if expiry is None:
            return False
        if now < expiry:
            return True
        del breaks[domain]
        self._repo.save_temporary_breaks(breaks)
        return False

    def grant(self, domain: str, duration_seconds: float) -> float:
        """Exempt *domain* for *duration_seconds*; overwrites any existing break. Returns expiry."""
        expiry = self._clock() + duration_seconds
        breaks = self._repo.get_temporary_breaks()
        breaks[domain] = expiry
        self._repo.save_temporary_breaks(breaks)
        logger.info("Temporary break for %s until %.0f", domain, expiry)
        return expiry

    def active(self, now: Optional[float] = None) -> Dict[str, float]:
        """Unexpired breaks (read-only; does not prune)."""
        now = self._clock() if now is None else now
        return {d: exp for d, exp in self._repo.get_temporary_breaks().items() if now < exp}
