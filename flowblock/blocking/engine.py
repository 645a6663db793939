"""
Blocking Decision Engine — composes the domain matcher, schedule gate, break
registry and the blocklist/global switch into one verdict per navigation.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Callable, Optional

from ..errors import InvalidUrl
from ..models import BlockedSite
from ..storage.repository import Repository
from . import domains, schedule
from .breaks import BreakRegistry

logger = logging.getLogger(__name__)


class Verdict(str, Enum):
    ALLOW = "allow"
    DENY = "deny"


@dataclass
class Decision:
    verdict: Verdict
    reason: str
    domain: Optional[str] = None
    site_id: Optional[str] = None      # first matching blocklist entry, on deny

    @property
    def denied(self) -> bool:
        return self.verdict is Verdict.DENY


class BlockingEngine:
    """
    Evaluates, in order: parseable URL → global switch → schedule → temporary
    break → blocklist. The first check that lets the navigation through wins.
    """

    def __init__(
        self,
        repo: Repository,
        breaks: BreakRegistry,
        clock: Callable[[], float] = time.time,
    ):
        self._repo = repo
        self._breaks = breaks
        self._clock = clock

    def evaluate(self, url: str) -> Decision:
        """Compute the verdict without recording anything (expired breaks may be pruned)."""
        try:
            domain = domains.normalize(url)
        except InvalidUrl:
            return Decision(Verdict.ALLOW, "invalid_url")

        if not self._repo.get_settings()["enabled"]:
            return Decision(Verdict.ALLOW, "disabled", domain)

        now = self._clock()
        if not schedule.is_active(self._repo.get_weekly_schedule(), datetime.fromtimestamp(now)):
            return Decision(Verdict.ALLOW, "outside_schedule", domain)

        if self._breaks.is_exempt(domain, now):
            return Decision(Verdict.ALLOW, "temporary_break", domain)

        site = self._first_match(domain, self._repo.get_blocked_sites())
        if site is None:
            return Decision(Verdict.ALLOW, "not_listed", domain)
        return Decision(Verdict.DENY, "blocked", domain, site.id)

    def decide(self, url: str) -> Decision:
        decision = self.evaluate(url)
        if decision.denied:
            self.record_block(decision.domain)
        logger.debug("%s %s (%s)", decision.verdict.value, url, decision.reason)
        return decision

    def record_block(self, domain: str) -> Optional[BlockedSite]:
        """
        Increment the first matching site's block_count, then the global total.

        Two sequential writes, not a transaction: a crash in between, or a
        concurrent decide() on the same site, can lose a count.
        """
        sites = self._repo.get_blocked_sites()
        site = self._first_match(domain, sites)
        if site is None:
            return None
        site.block_count += 1
        self._repo.save_blocked_sites(sites)

        stats = self._repo.get_stats()
        stats.total_blocks += 1
        self._repo.save_stats(stats)
        return site

    @staticmethod
    def _first_match(domain: str, sites: list[BlockedSite]) -> Optional[BlockedSite]:
        for site in sites:
            if domains.matches(domain, site.domain):
                return site
        return None
