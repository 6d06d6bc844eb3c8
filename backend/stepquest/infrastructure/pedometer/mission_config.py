"""
Data-driven mission catalogue — sequential missions and bonus missions.
Goals can be changed by editing config/missions.json (or the file named by
STEPQUEST_MISSIONS_CONFIG_PATH) without touching code.
"""
import enum
import json
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

logger = logging.getLogger(__name__)

_DEFAULT_CONFIG_PATH = Path(__file__).resolve().parent / "config" / "missions.json"


class BonusKind(str, enum.Enum):
    CONSECUTIVE = "consecutive"
    WEEKLY = "weekly"


@dataclass(frozen=True)
class Mission:
    """Sequential daily mission; consumed strictly in list order."""

    id: int
    goal: int
    text: str
    icon: str = ""


@dataclass(frozen=True)
class BonusMission:
    """
    Long-horizon goal evaluated independently of the sequential list.
    With unlock_threshold set, the mission stays inert until weekly steps reach it.
    """

    id: int
    kind: BonusKind
    goal: int
    text: str
    icon: str = ""
    unlock_threshold: Optional[int] = None
    target_steps: Optional[int] = None

    def is_unlocked(self, weekly_steps: int) -> bool:
        return self.unlock_threshold is None or weekly_steps >= self.unlock_threshold

    def progress_value(self, consecutive_days: int, weekly_steps: int) -> int:
        return consecutive_days if self.kind is BonusKind.CONSECUTIVE else weekly_steps


@dataclass(frozen=True)
class MissionCatalog:
    missions: tuple[Mission, ...] = ()
    bonus_missions: tuple[BonusMission, ...] = ()


def _get_config_path() -> Path:
    path = os.getenv("STEPQUEST_MISSIONS_CONFIG_PATH", "")
    if path and os.path.isfile(path):
        return Path(path)
    return _DEFAULT_CONFIG_PATH


def _load_raw_config(path: Path) -> dict[str, Any]:
    """Load the JSON file. Missing or unreadable file -> empty structure."""
    if not path.is_file():
        logger.warning("missions config not found at %s", path)
        return {}
    try:
        with open(path, "r", encoding="utf-8") as f:
            return json.load(f)
    except (json.JSONDecodeError, OSError) as e:
        logger.warning("Failed to load missions config: %s", e)
        return {}


def _positive_int(value: Any) -> int | None:
    try:
        n = int(value)
    except (TypeError, ValueError):
        return None
    return n if n > 0 else None


def _build_missions(raw_list: list[Any]) -> tuple[Mission, ...]:
    missions = []
    for m in raw_list:
        if not isinstance(m, dict):
            continue
        mission_id = _positive_int(m.get("id"))
        goal = _positive_int(m.get("goal"))
        if mission_id is None or goal is None:
            logger.warning("skipping invalid mission entry: %r", m)
            continue
        missions.append(
            Mission(id=mission_id, goal=goal, text=str(m.get("text", "")), icon=str(m.get("icon", "")))
        )
    return tuple(missions)


def _build_bonus_missions(raw_list: list[Any]) -> tuple[BonusMission, ...]:
    bonus = []
    for m in raw_list:
        if not isinstance(m, dict):
            continue
        mission_id = _positive_int(m.get("id"))
        goal = _positive_int(m.get("goal"))
        try:
            kind = BonusKind(m.get("type"))
        except ValueError:
            kind = None
        if mission_id is None or goal is None or kind is None:
            logger.warning("skipping invalid bonus mission entry: %r", m)
            continue
        bonus.append(
            BonusMission(
                id=mission_id,
                kind=kind,
                goal=goal,
                text=str(m.get("text", "")),
                icon=str(m.get("icon", "")),
                unlock_threshold=_positive_int(m.get("unlock_threshold")),
                target_steps=_positive_int(m.get("target_steps")),
            )
        )
    return tuple(bonus)


def build_catalog(raw: dict[str, Any]) -> MissionCatalog:
    return MissionCatalog(
        missions=_build_missions(raw.get("missions") or []),
        bonus_missions=_build_bonus_missions(raw.get("bonus_missions") or []),
    )


# Built once per process; reload_mission_catalog() re-reads the file
_catalog_cached: MissionCatalog | None = None


def get_mission_catalog() -> MissionCatalog:
    global _catalog_cached
    if _catalog_cached is None:
        _catalog_cached = build_catalog(_load_raw_config(_get_config_path()))
    return _catalog_cached


def reload_mission_catalog() -> MissionCatalog:
    global _catalog_cached
    _catalog_cached = None
    return get_mission_catalog()
