"""
Calendar rollover — applied once when a counting session starts.

Daily reset + streak evaluation when the date key changed, weekly reset when the
week key changed. Gaps longer than a day are treated like a single day: only the
last recorded day's total is checked against the target, missed days are not back-filled.
"""
import logging
from dataclasses import dataclass
from datetime import date, datetime

from stepquest.infrastructure.pedometer.calendar_keys import date_key, week_key
from stepquest.infrastructure.pedometer.constants import DEFAULT_CONSECUTIVE_TARGET
from stepquest.infrastructure.pedometer.ledger import CalendarMarkers, Ledger

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RolloverResult:
    ledger: Ledger
    markers: CalendarMarkers
    day_changed: bool
    week_changed: bool


def reconcile(
    markers: CalendarMarkers,
    ledger: Ledger,
    now: date | datetime,
    consecutive_target: int = DEFAULT_CONSECUTIVE_TARGET,
) -> RolloverResult:
    """
    Pure function: (persisted markers, persisted ledger, now) -> reconciled ledger + markers.
    Calling it again with the returned markers and ledger for the same day is a no-op.
    """
    today = date_key(now)
    this_week = week_key(now)
    result = ledger.copy()

    # Absent markers (first run) count as "same day / same week"
    week_changed = markers.last_week_key is not None and markers.last_week_key != this_week
    if week_changed:
        result.weekly_steps = 0

    day_changed = markers.last_date_key is not None and markers.last_date_key != today
    if day_changed:
        if ledger.daily_steps >= consecutive_target:
            result.consecutive_days = ledger.consecutive_days + 1
        else:
            result.consecutive_days = 0
        result.daily_steps = 0
        result.mission_index = 0

    if day_changed or week_changed:
        logger.info(
            "rollover %s -> %s (%s -> %s) day_changed=%s week_changed=%s streak=%s weekly=%s",
            markers.last_date_key, today, markers.last_week_key, this_week,
            day_changed, week_changed, result.consecutive_days, result.weekly_steps,
        )

    return RolloverResult(
        ledger=result,
        markers=CalendarMarkers(last_date_key=today, last_week_key=this_week),
        day_changed=day_changed,
        week_changed=week_changed,
    )
