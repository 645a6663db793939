"""
Central configuration for the FlowBlock engine.
All values can be overridden via environment variables or a local config.json.
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from pathlib import Path

_ROOT = Path(__file__).parent.parent
_CONFIG_FILE = _ROOT / "config.json"


@dataclass
class Config:
    # API
    api_host: str = "127.0.0.1"
    api_port: int = 8766

    # Storage
    data_dir: Path = field(default_factory=lambda: _ROOT / "data")
    state_db: str = "state.db"

    # Session timer
    alarm_name: str = "flowblock-session-end"
    default_break_seconds: int = 300         # "take a 5 minute break" on the blocked page

    # Navigation
    blocked_page_url: str = "http://127.0.0.1:8766/blocked"

    # Notifications / logging
    desktop_notifications: bool = True
    log_level: str = "INFO"

    def __post_init__(self):
        self.data_dir = Path(self.data_dir)

    @property
    def state_db_path(self) -> Path:
        self.data_dir.mkdir(parents=True, exist_ok=True)
        return self.data_dir / self.state_db

    @classmethod
    def load(cls) -> "Config":
        cfg = cls()
        if _CONFIG_FILE.exists():
            overrides = json.loads(_CONFIG_FILE.read_text())
            for k, v in overrides.items():
                if hasattr(cfg, k):
                    setattr(cfg, k, v)
        # environment variable overrides (FLOWBLOCK_*)
        for k in cfg.__dataclass_fields__:  # type: ignore[attr-defined]
            env_key = f"FLOWBLOCK_{k.upper()}"
            if env_key in os.environ:
                setattr(cfg, k, _coerce(getattr(cfg, k), os.environ[env_key]))
        cfg.data_dir = Path(cfg.data_dir)
        return cfg


def _coerce(current, raw: str):
    if isinstance(current, bool):
        return raw.strip().lower() in ("1", "true", "yes", "on")
    return type(current)(raw)


# Module-level singleton
config = Config.load()
