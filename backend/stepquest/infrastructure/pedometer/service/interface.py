"""
Pedometer session service interface.
Session lifecycle (start/stop/reset), sample handling and flush triggers.
"""
from datetime import datetime
from typing import Any, Callable, Mapping, Protocol

from stepquest.infrastructure.pedometer.ledger import Ledger
from stepquest.infrastructure.pedometer.mission_evaluator import AchievementEvent
from stepquest.infrastructure.pedometer.motion_filter import MotionSample
from stepquest.infrastructure.pedometer.sensor import SensorSource

Listener = Callable[[Ledger, list[AchievementEvent]], None]


class PedometerService(Protocol):
    is_counting: bool

    def start(self, sensor: SensorSource, now: datetime | None = None) -> None:
        """Capability + permission check, then rollover. Raises SensorUnavailable / PermissionDenied."""
        ...

    def stop(self) -> None:
        """Deregister the sample callback and flush."""
        ...

    def reset(self, now: datetime | None = None) -> None:
        """Zero every counter (daily, weekly, streak, mission cursor) and flush."""
        ...

    def handle_sample(self, sample: MotionSample | None, now_ms: float | None = None) -> Any:
        """Process one motion sample; returns the step result."""
        ...

    def handle_event(self, data: Mapping[str, Any] | None, now_ms: float | None = None) -> Any:
        """Raw {x, y, z} payload variant of handle_sample; malformed payloads are dropped."""
        ...

    def tick(self, now_ms: float | None = None) -> bool:
        """Run a due mission transition."""
        ...

    def on_visibility_change(self, hidden: bool) -> None:
        ...

    def on_page_hide(self) -> None:
        ...

    def subscribe(self, listener: Listener) -> None:
        ...

    def unsubscribe(self, listener: Listener) -> None:
        ...
