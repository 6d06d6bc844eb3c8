"""
Pedometer request/response schemas.
"""
from typing import Literal, Optional

from pydantic import BaseModel, Field


# ── Requests ────────────────────────────────────────────────────

class StartSessionRequest(BaseModel):
    """Client-side capability check and permission prompt outcome."""

    sensor_available: bool = Field(True, description="DeviceMotion (or equivalent) is supported")
    permission_granted: bool = Field(True, description="User granted motion-sensor access")


class MotionSampleRequest(BaseModel):
    """accelerationIncludingGravity reading; a null axis means the event is dropped."""

    x: Optional[float] = None
    y: Optional[float] = None
    z: Optional[float] = None
    timestamp_ms: Optional[float] = Field(None, description="Client monotonic clock (ms); server epoch clock if omitted")


class LifecycleEventRequest(BaseModel):
    event_type: Literal["visibility_hidden", "visibility_visible", "pagehide"] = Field(
        ..., description="Page lifecycle signal; hidden / pagehide flush progress"
    )


# ── Responses ───────────────────────────────────────────────────

class LedgerResponse(BaseModel):
    daily_steps: int = Field(..., ge=0)
    weekly_steps: int = Field(..., ge=0)
    consecutive_days: int = Field(..., ge=0)
    mission_index: int = Field(..., ge=0)

    model_config = {"from_attributes": True}


class MissionResponse(BaseModel):
    id: int
    goal: int
    text: str
    icon: str = ""

    model_config = {"from_attributes": True}


class CurrentMissionResponse(MissionResponse):
    progress_percent: float = Field(..., ge=0, le=100, description="min(daily_steps / goal, 1) * 100")


class BonusMissionResponse(BaseModel):
    id: int
    type: str
    goal: int
    text: str
    icon: str = ""
    unlock_threshold: Optional[int] = None
    target_steps: Optional[int] = None


class BonusMissionStateResponse(BonusMissionResponse):
    current: int = Field(..., ge=0, description="Streak days or weekly steps, per type")
    unlocked: bool
    completed: bool


class AchievementResponse(BaseModel):
    mission_id: int
    is_bonus: bool
    text: str
    icon: str = ""


class StepResultResponse(BaseModel):
    step_counted: bool
    ledger: LedgerResponse
    achievements: list[AchievementResponse] = Field(default_factory=list)


class SessionStateResponse(BaseModel):
    is_counting: bool
    ledger: LedgerResponse
    current_mission: Optional[CurrentMissionResponse] = None
    all_missions_complete: bool
    transition_pending: bool
    bonus_missions: list[BonusMissionStateResponse] = Field(default_factory=list)


class MissionCatalogResponse(BaseModel):
    missions: list[MissionResponse] = Field(default_factory=list)
    bonus_missions: list[BonusMissionResponse] = Field(default_factory=list)
