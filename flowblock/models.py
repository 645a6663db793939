"""
Persisted records — plain dataclasses that round-trip through the key-value store
as JSON-compatible dicts.
"""

from __future__ import annotations

import time
import uuid
from dataclasses import asdict, dataclass, field, fields
from enum import Enum
from typing import Any, Dict, List, Optional


def generate_id() -> str:
    return f"{int(time.time() * 1000)}-{uuid.uuid4().hex[:9]}"


def _known(cls, data: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    """Keep only the keys *cls* declares, so stale or foreign keys are dropped."""
    names = {f.name for f in fields(cls)}
    return {k: v for k, v in (data or {}).items() if k in names}


class SessionType(str, Enum):
    FOCUS = "focus"
    BREAK = "break"


@dataclass
class BlockedSite:
    id: str
    domain: str                        # normalised: lower-case, no scheme, no www.
    created_at: float
    category: Optional[str] = None
    block_count: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "BlockedSite":
        return cls(**_known(cls, data))


@dataclass
class FocusSession:
    id: str
    start_time: float
    duration: float                    # minutes
    type: SessionType = SessionType.FOCUS
    end_time: Optional[float] = None
    completed: bool = False

    @property
    def scheduled_end(self) -> float:
        return self.start_time + self.duration * 60

    def elapsed_minutes(self) -> int:
        """Actual minutes between start and end, not the nominal duration."""
        if self.end_time is None:
            return 0
        return round((self.end_time - self.start_time) / 60)

    def to_dict(self) -> Dict[str, Any]:
        d = asdict(self)
        d["type"] = self.type.value
        return d

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "FocusSession":
        kwargs = _known(cls, data)
        kwargs["type"] = SessionType(kwargs.get("type", SessionType.FOCUS.value))
        return cls(**kwargs)


@dataclass
class PausedSession:
    paused_at: float
    remaining_seconds: int

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PausedSession":
        return cls(**_known(cls, data))


@dataclass
class PomodoroState:
    enabled: bool = False
    work_duration: int = 25
    break_duration: int = 5
    long_break_duration: int = 15
    sessions_until_long_break: int = 4
    current_cycle: int = 1
    is_on_break: bool = False
    total_cycles_completed: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "PomodoroState":
        return cls(**_known(cls, data))


@dataclass
class ScheduleSlot:
    id: str
    day: int                           # 0 = Sunday … 6 = Saturday
    start_time: str                    # "HH:MM", zero-padded
    end_time: str                      # "HH:MM", zero-padded
    enabled: bool = True

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ScheduleSlot":
        kwargs = _known(cls, data)
        kwargs["day"] = int(kwargs["day"])
        kwargs["start_time"] = str(kwargs["start_time"])
        kwargs["end_time"] = str(kwargs["end_time"])
        return cls(**kwargs)


@dataclass
class WeeklySchedule:
    enabled: bool = False
    slots: List[ScheduleSlot] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {"enabled": self.enabled, "slots": [s.to_dict() for s in self.slots]}

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "WeeklySchedule":
        data = data or {}
        return cls(
            enabled=bool(data.get("enabled", False)),
            slots=[ScheduleSlot.from_dict(s) for s in data.get("slots", [])],
        )


@dataclass
class Stats:
    total_focus_time: int = 0          # minutes
    total_blocks: int = 0
    current_streak: int = 0
    longest_streak: int = 0
    sessions_completed: int = 0
    last_session_date: Optional[str] = None   # ISO date of the last completed focus session

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "Stats":
        return cls(**_known(cls, data))
