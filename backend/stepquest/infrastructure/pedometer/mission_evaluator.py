"""
Achievement detection for sequential and bonus missions.

Sequential: only the mission at the ledger cursor is eligible, and nothing else is
evaluated while its celebration/transition is pending (single-flight lock).
Bonus: every bonus mission is checked on every step and fires once per completion;
completion flags live here, never in the renderer.
"""
import logging
from dataclasses import dataclass
from typing import Sequence, Union

from stepquest.infrastructure.pedometer.ledger import Ledger
from stepquest.infrastructure.pedometer.mission_config import BonusKind, BonusMission, Mission

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AchievementEvent:
    mission: Union[Mission, BonusMission]
    is_bonus: bool


def is_bonus_satisfied(bonus: BonusMission, ledger: Ledger) -> bool:
    if not bonus.is_unlocked(ledger.weekly_steps):
        return False
    if bonus.kind is BonusKind.CONSECUTIVE:
        return ledger.consecutive_days >= bonus.goal
    return ledger.weekly_steps >= bonus.goal


class MissionEvaluator:
    def __init__(self, missions: Sequence[Mission], bonus_missions: Sequence[BonusMission]):
        self.missions = tuple(missions)
        self.bonus_missions = tuple(bonus_missions)
        self.transition_pending = False
        self.completed_bonus_ids: set[int] = set()

    def current_mission(self, ledger: Ledger) -> Mission | None:
        if 0 <= ledger.mission_index < len(self.missions):
            return self.missions[ledger.mission_index]
        return None

    def all_missions_complete(self, ledger: Ledger) -> bool:
        return ledger.mission_index >= len(self.missions)

    def release(self) -> None:
        self.transition_pending = False

    def forget_bonus_completions(self) -> None:
        self.completed_bonus_ids.clear()

    def seed_bonus_completions(self, before: Ledger, after: Ledger) -> None:
        """
        Mark bonus missions already celebrated in an earlier session: satisfied both by the
        persisted ledger and by the reconciled one. Marked silently.
        """
        self.completed_bonus_ids = {
            b.id
            for b in self.bonus_missions
            if is_bonus_satisfied(b, before) and is_bonus_satisfied(b, after)
        }

    def evaluate(self, ledger: Ledger) -> list[AchievementEvent]:
        events: list[AchievementEvent] = []

        if not self.transition_pending:
            mission = self.current_mission(ledger)
            if mission is not None and ledger.daily_steps >= mission.goal:
                self.transition_pending = True
                events.append(AchievementEvent(mission=mission, is_bonus=False))
                logger.info("mission achieved id=%s daily=%s", mission.id, ledger.daily_steps)

        for bonus in self.bonus_missions:
            if is_bonus_satisfied(bonus, ledger):
                if bonus.id not in self.completed_bonus_ids:
                    self.completed_bonus_ids.add(bonus.id)
                    events.append(AchievementEvent(mission=bonus, is_bonus=True))
                    logger.info(
                        "bonus mission achieved id=%s streak=%s weekly=%s",
                        bonus.id, ledger.consecutive_days, ledger.weekly_steps,
                    )
            else:
                # Condition no longer holds (new week, broken streak): may fire again later
                self.completed_bonus_ids.discard(bonus.id)
        return events
