"""
Pedometer HTTP API — session lifecycle, motion samples, lifecycle flushes and state for the renderer.
"""
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, status

from stepquest.infrastructure.pedometer.constants import LifecycleEventType
from stepquest.infrastructure.pedometer.errors import PermissionDenied, PersistenceReadFailure, SensorUnavailable
from stepquest.infrastructure.pedometer.mission_config import BonusMission, Mission
from stepquest.infrastructure.pedometer.mission_evaluator import AchievementEvent
from stepquest.infrastructure.pedometer.schemas import (
    AchievementResponse,
    BonusMissionResponse,
    BonusMissionStateResponse,
    CurrentMissionResponse,
    LedgerResponse,
    LifecycleEventRequest,
    MissionCatalogResponse,
    MissionResponse,
    MotionSampleRequest,
    SessionStateResponse,
    StartSessionRequest,
    StepResultResponse,
)
from stepquest.infrastructure.pedometer.sensor import ReportedSensorSource
from stepquest.infrastructure.pedometer.service import PedometerEngine
from stepquest.infrastructure.pedometer.store import SqlKeyValueStore

router = APIRouter()

_engine: PedometerEngine | None = None


def get_pedometer_engine() -> PedometerEngine:
    global _engine
    if _engine is None:
        _engine = PedometerEngine(SqlKeyValueStore())
    return _engine


# ── mapping helpers ─────────────────────────────────────────────

def _bonus_response(bonus: BonusMission) -> BonusMissionResponse:
    return BonusMissionResponse(
        id=bonus.id,
        type=bonus.kind.value,
        goal=bonus.goal,
        text=bonus.text,
        icon=bonus.icon,
        unlock_threshold=bonus.unlock_threshold,
        target_steps=bonus.target_steps,
    )


def _achievement_response(event: AchievementEvent) -> AchievementResponse:
    return AchievementResponse(
        mission_id=event.mission.id,
        is_bonus=event.is_bonus,
        text=event.mission.text,
        icon=event.mission.icon,
    )


def _state_response(engine: PedometerEngine) -> SessionStateResponse:
    ledger = engine.snapshot()
    evaluator = engine.evaluator
    current: Optional[CurrentMissionResponse] = None
    mission: Optional[Mission] = evaluator.current_mission(ledger)
    if mission is not None:
        current = CurrentMissionResponse(
            id=mission.id,
            goal=mission.goal,
            text=mission.text,
            icon=mission.icon,
            progress_percent=min(ledger.daily_steps / mission.goal, 1) * 100,
        )
    bonus_states = []
    for bonus in evaluator.bonus_missions:
        base = _bonus_response(bonus)
        bonus_states.append(
            BonusMissionStateResponse(
                **base.model_dump(),
                current=bonus.progress_value(ledger.consecutive_days, ledger.weekly_steps),
                unlocked=bonus.is_unlocked(ledger.weekly_steps),
                completed=bonus.id in evaluator.completed_bonus_ids,
            )
        )
    return SessionStateResponse(
        is_counting=engine.is_counting,
        ledger=LedgerResponse.model_validate(ledger),
        current_mission=current,
        all_missions_complete=evaluator.all_missions_complete(ledger),
        transition_pending=engine.transition.pending,
        bonus_missions=bonus_states,
    )


# ── session lifecycle ───────────────────────────────────────────

@router.post(
    "/session/start",
    response_model=SessionStateResponse,
    summary="Start counting — capability/permission check, then day/week rollover",
)
def start_session(
    body: StartSessionRequest,
    engine: PedometerEngine = Depends(get_pedometer_engine),
):
    sensor = ReportedSensorSource(available=body.sensor_available, permission_granted=body.permission_granted)
    try:
        engine.start(sensor)
    except SensorUnavailable as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except PermissionDenied as e:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(e))
    except PersistenceReadFailure as e:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(e))
    return _state_response(engine)


@router.post("/session/stop", response_model=SessionStateResponse, summary="Stop counting and flush")
def stop_session(engine: PedometerEngine = Depends(get_pedometer_engine)):
    engine.stop()
    return _state_response(engine)


@router.post(
    "/reset",
    response_model=SessionStateResponse,
    summary="Reset daily, weekly, streak and mission progress",
)
def reset_progress(engine: PedometerEngine = Depends(get_pedometer_engine)):
    engine.reset()
    return _state_response(engine)


# ── samples & host signals ──────────────────────────────────────

@router.post("/samples", response_model=StepResultResponse, summary="Submit one motion sample")
def submit_sample(
    body: MotionSampleRequest,
    engine: PedometerEngine = Depends(get_pedometer_engine),
):
    """Samples must arrive in sensor order. A sample with a null axis is dropped without error."""
    result = engine.handle_event(body.model_dump(include={"x", "y", "z"}), now_ms=body.timestamp_ms)
    return StepResultResponse(
        step_counted=result.step_counted,
        ledger=LedgerResponse.model_validate(result.ledger),
        achievements=[_achievement_response(a) for a in result.achievements],
    )


@router.post(
    "/lifecycle",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="visibility_hidden / pagehide flush the current progress",
)
def record_lifecycle(
    body: LifecycleEventRequest,
    engine: PedometerEngine = Depends(get_pedometer_engine),
):
    if body.event_type == LifecycleEventType.PAGEHIDE:
        engine.on_page_hide()
    else:
        engine.on_visibility_change(hidden=body.event_type == LifecycleEventType.VISIBILITY_HIDDEN)


# ── read side ───────────────────────────────────────────────────

@router.get("/state", response_model=SessionStateResponse, summary="Ledger, current mission and bonus progress")
def get_state(
    now_ms: Optional[float] = None,
    engine: PedometerEngine = Depends(get_pedometer_engine),
):
    """
    Runs a due mission transition first. Pass now_ms on the same clock as the samples'
    timestamp_ms; without it the server epoch clock is used.
    """
    engine.tick(now_ms)
    return _state_response(engine)


@router.get("/missions", response_model=MissionCatalogResponse, summary="Mission catalogue")
def get_missions(engine: PedometerEngine = Depends(get_pedometer_engine)):
    return MissionCatalogResponse(
        missions=[MissionResponse.model_validate(m) for m in engine.catalog.missions],
        bonus_missions=[_bonus_response(b) for b in engine.catalog.bonus_missions],
    )
