"""
Pydantic schemas for the local API and the command surface.
"""

from __future__ import annotations

from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, Field, field_validator

from ..blocking.schedule import normalize_hhmm

# ── Navigation / breaks ────────────────────────────────────────────────────

class NavigationCheckIn(BaseModel):
    url: str


class NavigationOut(BaseModel):
    verdict: str = Field(..., description="allow | deny")
    reason: str
    domain: Optional[str] = None
    redirect_url: Optional[str] = None


class BreakGrantIn(BaseModel):
    domain: str = Field(..., min_length=1, description="Domain or full URL")
    duration_seconds: Optional[int] = Field(None, ge=1, le=24 * 3600)


class BreakOut(BaseModel):
    domain: str
    expires_at: float


# ── Sessions ───────────────────────────────────────────────────────────────

class FocusSessionOut(BaseModel):
    id: str
    start_time: float
    end_time: Optional[float] = None
    duration: float
    completed: bool
    type: str


class SessionStartIn(BaseModel):
    duration: float = Field(25, gt=0, le=24 * 60, description="Minutes")
    type: Literal["focus", "break"] = "focus"


class SessionEndIn(BaseModel):
    session_id: str
    completed: bool


class PausedSessionOut(BaseModel):
    paused_at: float
    remaining_seconds: int


class RemainingOut(BaseModel):
    remaining: int
    state: str


# ── Pomodoro ───────────────────────────────────────────────────────────────

class PomodoroStateOut(BaseModel):
    enabled: bool
    work_duration: int
    break_duration: int
    long_break_duration: int
    sessions_until_long_break: int
    current_cycle: int
    is_on_break: bool
    total_cycles_completed: int


class PomodoroStartIn(BaseModel):
    work_duration: int = Field(25, ge=1, le=180)
    break_duration: int = Field(5, ge=1, le=60)
    long_break_duration: int = Field(15, ge=1, le=120)


class PomodoroStartOut(BaseModel):
    session: FocusSessionOut
    pomodoro_state: PomodoroStateOut


class PomodoroSettingsPatch(BaseModel):
    work_duration: Optional[int] = Field(None, ge=1, le=180)
    break_duration: Optional[int] = Field(None, ge=1, le=60)
    long_break_duration: Optional[int] = Field(None, ge=1, le=120)
    sessions_until_long_break: Optional[int] = Field(None, ge=1, le=12)


class PomodoroTransitionOut(BaseModel):
    next_session: FocusSessionOut
    pomodoro_state: PomodoroStateOut
    message: str


# ── Blocklist ──────────────────────────────────────────────────────────────

class BlockedSiteOut(BaseModel):
    id: str
    domain: str
    category: Optional[str] = None
    created_at: float
    block_count: int


class SiteIn(BaseModel):
    domain: str = Field(..., min_length=1)
    category: Optional[str] = None


class SiteIdIn(BaseModel):
    id: str


class SitesImportIn(BaseModel):
    sites: List[SiteIn]
    replace: bool = True


# ── Settings / stats ───────────────────────────────────────────────────────

class SettingsPatch(BaseModel):
    enabled: Optional[bool] = None
    strict_mode: Optional[bool] = None
    default_session_length: Optional[int] = Field(None, ge=1, le=180)
    break_length: Optional[int] = Field(None, ge=1, le=60)
    notifications_enabled: Optional[bool] = None
    theme: Optional[Literal["light", "dark", "auto"]] = None
    blocked_page_style: Optional[Literal["minimal", "motivational", "serene"]] = None


class StatsOut(BaseModel):
    total_focus_time: int
    total_blocks: int
    current_streak: int
    longest_streak: int
    sessions_completed: int
    last_session_date: Optional[str] = None


class StatusOut(BaseModel):
    enabled: bool
    current_session: Optional[FocusSessionOut] = None
    timer_state: str
    stats: StatsOut
    blocked_sites: List[BlockedSiteOut]
    settings: Dict[str, Any]


# ── Weekly schedule ────────────────────────────────────────────────────────

class ScheduleSlotIn(BaseModel):
    id: Optional[str] = None
    day: int = Field(..., ge=0, le=6, description="0 = Sunday … 6 = Saturday")
    start_time: str = Field(..., description="HH:MM")
    end_time: str = Field(..., description="HH:MM")
    enabled: bool = True

    @field_validator("start_time", "end_time")
    @classmethod
    def _clock_time(cls, v: str) -> str:
        return normalize_hhmm(v)


class ScheduleSlotOut(BaseModel):
    id: str
    day: int
    start_time: str
    end_time: str
    enabled: bool


class WeeklyScheduleIn(BaseModel):
    enabled: Optional[bool] = None
    slots: Optional[List[ScheduleSlotIn]] = None


class WeeklyScheduleOut(BaseModel):
    enabled: bool
    slots: List[ScheduleSlotOut]


class SlotIdIn(BaseModel):
    slot_id: str


class ScheduleActiveOut(BaseModel):
    active: bool
    schedule_enabled: bool


# ── Analytics / premium ────────────────────────────────────────────────────

class DailyFocusOut(BaseModel):
    day: str
    minutes: float


class AnalyticsOut(BaseModel):
    weekly_sessions: List[FocusSessionOut]
    daily_focus: List[DailyFocusOut]
    weekly_total_minutes: float
    top_blocked_sites: List[BlockedSiteOut]
    stats: StatsOut


class LicenseIn(BaseModel):
    license_key: str


class PremiumStatusOut(BaseModel):
    is_premium: bool
    site_count: int
    max_sites: Optional[int] = None


# ── Generic command surface ────────────────────────────────────────────────

class CommandIn(BaseModel):
    type: str = Field(..., description="Operation name, e.g. start_session")
    payload: Dict[str, Any] = Field(default_factory=dict)
