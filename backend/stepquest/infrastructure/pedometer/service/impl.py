"""
Pedometer session engine.

sample -> MotionFilter -> StepDetector -> ProgressLedger -> MissionEvaluator -> subscribers.
The calendar rollover runs synchronously inside start(), before any sample is accepted.
Flush points: every counted step, mission transition, stop, reset, visibility loss, pagehide.
"""
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, Mapping

from stepquest.core.config import Settings, get_settings
from stepquest.infrastructure.pedometer.calendar_keys import date_key, week_key
from stepquest.infrastructure.pedometer.errors import (
    MalformedSample,
    PermissionDenied,
    PersistenceReadFailure,
    PersistenceWriteFailure,
    SensorUnavailable,
)
from stepquest.infrastructure.pedometer.ledger import CalendarMarkers, Ledger, ProgressLedger
from stepquest.infrastructure.pedometer.mission_config import MissionCatalog, get_mission_catalog
from stepquest.infrastructure.pedometer.mission_evaluator import AchievementEvent, MissionEvaluator
from stepquest.infrastructure.pedometer.motion_filter import MotionFilter, MotionSample
from stepquest.infrastructure.pedometer.repository import LedgerRepository
from stepquest.infrastructure.pedometer.rollover import reconcile
from stepquest.infrastructure.pedometer.sensor import SensorSource
from stepquest.infrastructure.pedometer.service.interface import Listener
from stepquest.infrastructure.pedometer.step_detector import StepDetector
from stepquest.infrastructure.pedometer.store import KeyValueStore
from stepquest.infrastructure.pedometer.transition import DeferredTransition

logger = logging.getLogger(__name__)


def local_now() -> datetime:
    """Timezone-aware local time; week keys anchor on UTC midnight of Jan 1."""
    return datetime.now().astimezone()


@dataclass
class StepResult:
    step_counted: bool
    ledger: Ledger
    achievements: list[AchievementEvent] = field(default_factory=list)


class PedometerEngine:
    def __init__(
        self,
        store: KeyValueStore,
        catalog: MissionCatalog | None = None,
        settings: Settings | None = None,
        clock: Callable[[], datetime] = local_now,
    ):
        self.settings = settings or get_settings()
        self.catalog = catalog or get_mission_catalog()
        self.clock = clock
        self.repository = LedgerRepository(store)
        self.ledger = ProgressLedger()
        self.markers = CalendarMarkers()
        self.motion_filter = MotionFilter(alpha=self.settings.alpha)
        self.detector = StepDetector(
            self.ledger,
            threshold=self.settings.threshold,
            step_interval_ms=self.settings.step_interval_ms,
            vertical_weight=self.settings.vertical_weight,
        )
        self.evaluator = MissionEvaluator(self.catalog.missions, self.catalog.bonus_missions)
        self.transition = DeferredTransition()
        self.is_counting = False
        self._listeners: list[Listener] = []
        # Set while the last flush failed: memory is ahead of the store
        self._unsaved = False

        # Show persisted progress before the first session starts (no rollover yet)
        try:
            self.ledger.state, self.markers = self.repository.load()
        except PersistenceReadFailure as e:
            logger.warning("could not load persisted progress: %s", e)

    # ── lifecycle ─────────────────────────────────────────────────

    def start(self, sensor: SensorSource, now: datetime | None = None) -> None:
        if self.is_counting:
            return
        if not sensor.is_available():
            logger.info("start refused: motion sensor unavailable")
            raise SensorUnavailable()
        if not sensor.request_permission():
            logger.info("start refused: motion permission denied")
            raise PermissionDenied()

        now = now or self.clock()
        if self._unsaved:
            persisted_ledger, persisted_markers = self.ledger.snapshot(), self.markers
        else:
            persisted_ledger, persisted_markers = self.repository.load()
        result = reconcile(
            persisted_markers,
            persisted_ledger,
            now,
            consecutive_target=self.settings.consecutive_target,
        )
        self.ledger.apply_rollover(result.ledger)
        self.markers = result.markers
        self.evaluator.seed_bonus_completions(persisted_ledger, result.ledger)
        self.motion_filter.reset()
        self.ledger.state.last_step_at_ms = None
        self.is_counting = True
        self._flush(now)
        logger.info(
            "counting started date=%s daily=%s weekly=%s streak=%s mission_index=%s",
            self.markers.last_date_key, self.ledger.state.daily_steps, self.ledger.state.weekly_steps,
            self.ledger.state.consecutive_days, self.ledger.state.mission_index,
        )

    def stop(self) -> None:
        if not self.is_counting:
            return
        self.is_counting = False
        # A pending transition completes on stop; the lock never outlives the session
        self.transition.run_now()
        self.evaluator.release()
        self._flush()
        logger.info("counting stopped daily=%s", self.ledger.state.daily_steps)

    def reset(self, now: datetime | None = None) -> None:
        self.transition.cancel()
        self.evaluator.release()
        if self.is_counting:
            self.stop()
        self.evaluator.forget_bonus_completions()
        self.ledger.reset_all()
        self._flush(now)
        self._notify([])
        logger.info("all progress reset")

    # ── samples ───────────────────────────────────────────────────

    def handle_event(self, data: Mapping[str, Any] | None, now_ms: float | None = None) -> StepResult:
        try:
            sample = MotionSample.from_mapping(data)
        except MalformedSample:
            return StepResult(step_counted=False, ledger=self.ledger.snapshot())
        return self.handle_sample(sample, now_ms)

    def handle_sample(self, sample: MotionSample | None, now_ms: float | None = None) -> StepResult:
        if not self.is_counting or sample is None:
            return StepResult(step_counted=False, ledger=self.ledger.snapshot())
        now_ms = self._now_ms() if now_ms is None else now_ms
        self.transition.run_due(now_ms)

        linear = self.motion_filter.filter(sample)
        if not self.detector.detect(linear, now_ms):
            return StepResult(step_counted=False, ledger=self.ledger.snapshot())

        self.ledger.record_step()
        achievements = self.evaluator.evaluate(self.ledger.state)
        if any(not a.is_bonus for a in achievements):
            self.transition.schedule(now_ms + self.settings.transition_delay_ms, self._advance_mission)
        self._flush()
        snapshot = self.ledger.snapshot()
        self._notify(achievements)
        return StepResult(step_counted=True, ledger=snapshot, achievements=achievements)

    def tick(self, now_ms: float | None = None) -> bool:
        return self.transition.run_due(self._now_ms() if now_ms is None else now_ms)

    def _advance_mission(self) -> None:
        self.ledger.advance_mission(len(self.catalog.missions))
        self.evaluator.release()
        self._flush()
        logger.info("mission transition -> index=%s", self.ledger.state.mission_index)
        self._notify([])

    # ── host signals ──────────────────────────────────────────────

    def on_visibility_change(self, hidden: bool) -> None:
        if hidden:
            self._flush()

    def on_page_hide(self) -> None:
        self._flush()

    # ── renderer subscriptions ────────────────────────────────────

    def subscribe(self, listener: Listener) -> None:
        if listener not in self._listeners:
            self._listeners.append(listener)

    def unsubscribe(self, listener: Listener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def _notify(self, achievements: list[AchievementEvent]) -> None:
        snapshot = self.ledger.snapshot()
        for listener in list(self._listeners):
            try:
                listener(snapshot, list(achievements))
            except Exception:
                logger.exception("pedometer listener failed")

    # ── helpers ───────────────────────────────────────────────────

    def _now_ms(self) -> float:
        return self.clock().timestamp() * 1000

    def _flush(self, now: datetime | None = None) -> None:
        # Markers always follow the current date, so steps after midnight stay with the new day
        now = now or self.clock()
        self.markers = CalendarMarkers(last_date_key=date_key(now), last_week_key=week_key(now))
        try:
            self.repository.save(self.ledger.state, self.markers)
        except PersistenceWriteFailure as e:
            # In-memory state stands; the next successful flush catches up
            self._unsaved = True
            logger.warning("pedometer flush failed: %s", e)
            return
        self._unsaved = False

    def snapshot(self) -> Ledger:
        return self.ledger.snapshot()
