"""
Progress ledger — daily / weekly counters, streak and the sequential-mission cursor.
Only increment and zero operations are exposed, so counters stay non-negative.
"""
from dataclasses import dataclass, replace
from typing import Optional


@dataclass
class Ledger:
    daily_steps: int = 0
    weekly_steps: int = 0
    consecutive_days: int = 0
    mission_index: int = 0
    # Monotonic instant (ms) of the last counted step; None until the first one
    last_step_at_ms: Optional[float] = None

    def copy(self) -> "Ledger":
        return replace(self)


@dataclass(frozen=True)
class CalendarMarkers:
    """Persisted rollover anchors. None = never recorded (first run)."""

    last_date_key: Optional[str] = None
    last_week_key: Optional[str] = None


class ProgressLedger:
    def __init__(self, state: Ledger | None = None):
        self.state = state if state is not None else Ledger()

    def record_step(self) -> None:
        self.state.daily_steps += 1
        self.state.weekly_steps += 1

    def advance_mission(self, mission_count: int) -> None:
        """Move the cursor forward, clamped at mission_count (= all complete)."""
        self.state.mission_index = min(self.state.mission_index + 1, mission_count)

    def apply_rollover(self, reconciled: Ledger) -> None:
        self.state = reconciled.copy()

    def reset_all(self) -> None:
        self.state = Ledger()

    def snapshot(self) -> Ledger:
        return self.state.copy()
