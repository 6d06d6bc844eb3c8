"""
Pedometer tuning constants and persisted key layout.
Defaults for the environment-driven Settings (see stepquest.core.config).
"""
# Step threshold on the weighted linear-acceleration magnitude. Larger = harder to count (device dependent)
THRESHOLD = 4.0

# Minimum gap between two steps (ms). Natural stride cadence is roughly 300-700ms
STEP_INTERVAL_MS = 500

# Low-pass coefficient for gravity extraction, in (0, 1). Larger = slower gravity tracking
ALPHA = 0.9

# Weight applied to the z (vertical) axis when computing the magnitude
VERTICAL_WEIGHT = 1.2

# Celebration pause before the next sequential mission becomes active (ms)
TRANSITION_DELAY_MS = 1500

# Daily step total a day needs for the streak to continue
DEFAULT_CONSECUTIVE_TARGET = 100


class StorageKey:
    """Logical persisted keys — six independent string-valued entries."""

    STEPS = "pedometerSteps"
    DATE = "pedometerDate"
    MISSION_INDEX = "missionIndex"
    CONSECUTIVE = "consecutiveDays"
    WEEKLY_STEPS = "weeklySteps"
    WEEK_NUMBER = "pedometerWeekNumber"

    ALL = (STEPS, DATE, MISSION_INDEX, CONSECUTIVE, WEEKLY_STEPS, WEEK_NUMBER)


class LifecycleEventType:
    """Host page lifecycle signals that trigger a flush."""

    VISIBILITY_HIDDEN = "visibility_hidden"
    VISIBILITY_VISIBLE = "visibility_visible"
    PAGEHIDE = "pagehide"
