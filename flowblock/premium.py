"""
Premium flag. Activation is a key-format check only; there is no entitlement
verification.
"""

from __future__ import annotations

import time
from typing import Any, Callable, Dict

from .storage.repository import Repository

LICENSE_PREFIX = "FLOW-"

FREE_SITE_LIMIT = 5


def is_premium(repo: Repository) -> bool:
    return bool(repo.get_settings()["is_premium"])


def premium_status(repo: Repository) -> Dict[str, Any]:
    """max_sites is None when unlimited."""
    premium = is_premium(repo)
    return {
        "is_premium": premium,
        "site_count": len(repo.get_blocked_sites()),
        "max_sites": None if premium else FREE_SITE_LIMIT,
    }


def can_add_more_sites(repo: Repository) -> bool:
    status = premium_status(repo)
    return status["max_sites"] is None or status["site_count"] < status["max_sites"]


def activate_premium(
    repo: Repository, license_key: str, clock: Callable[[], float] = time.time
) -> bool:
    if not license_key.startswith(LICENSE_PREFIX):
        return False
    repo.update_settings({
        "is_premium": True,
        "license_key": license_key,
        "premium_activated_at": clock(),
    })
    return True
