"""
User-tunable settings — persisted under the "settings" key of the state store.

get_settings(store) returns defaults merged with whatever is saved.
update_settings(store, patch) mutates and saves.
"""

from __future__ import annotations

import logging
from typing import Any

from .storage.kv import KeyValueStore

logger = logging.getLogger(__name__)

SETTINGS_KEY = "settings"

DEFAULTS: dict[str, Any] = {
    "enabled": True,                     # global blocking switch
    "strict_mode": False,
    "default_session_length": 25,        # minutes
    "break_length": 5,                   # minutes
    "notifications_enabled": True,
    "theme": "auto",                     # light | dark | auto
    "blocked_page_style": "motivational",  # minimal | motivational | serene
    "is_premium": False,
    "license_key": "",
    "premium_activated_at": 0.0,
}


def _coerce(key: str, value: Any) -> Any:
    # coerce to the same type as the default
    return type(DEFAULTS[key])(value)


def get_settings(store: KeyValueStore) -> dict[str, Any]:
    """Return the current settings: defaults overlaid with the persisted record."""
    current = dict(DEFAULTS)
    saved = store.get(SETTINGS_KEY) or {}
    for k, v in saved.items():
        if k not in DEFAULTS:
            continue
        try:
            current[k] = _coerce(k, v)
        except (TypeError, ValueError):
            logger.warning("Ignoring malformed setting %s=%r", k, v)
    return current


def update_settings(store: KeyValueStore, patch: dict[str, Any]) -> dict[str, Any]:
    """Apply *patch* (unknown keys ignored), persist, return full settings."""
    current = get_settings(store)
    for k, v in patch.items():
        if k in DEFAULTS:
            current[k] = _coerce(k, v)
    store.set(SETTINGS_KEY, current)
    return dict(current)
