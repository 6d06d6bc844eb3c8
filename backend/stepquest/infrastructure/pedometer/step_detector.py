"""
Threshold + debounce step detection on filtered linear acceleration.
"""
import math

from stepquest.infrastructure.pedometer.constants import STEP_INTERVAL_MS, THRESHOLD, VERTICAL_WEIGHT
from stepquest.infrastructure.pedometer.ledger import ProgressLedger
from stepquest.infrastructure.pedometer.motion_filter import Vector3


def weighted_magnitude(acceleration: Vector3, vertical_weight: float = VERTICAL_WEIGHT) -> float:
    """sqrt(x^2 + y^2 + (z*k)^2) — vertical bounce counts more than lateral shake."""
    z = acceleration.z * vertical_weight
    return math.sqrt(acceleration.x * acceleration.x + acceleration.y * acceleration.y + z * z)


class StepDetector:
    """
    Emits a step iff magnitude > threshold and more than step_interval_ms has passed
    since the last step. The last-step instant lives on the ledger.
    """

    def __init__(
        self,
        ledger: ProgressLedger,
        threshold: float = THRESHOLD,
        step_interval_ms: int = STEP_INTERVAL_MS,
        vertical_weight: float = VERTICAL_WEIGHT,
    ):
        self.ledger = ledger
        self.threshold = threshold
        self.step_interval_ms = step_interval_ms
        self.vertical_weight = vertical_weight

    def detect(self, acceleration: Vector3 | None, now_ms: float) -> bool:
        # Missing reading: no-op
        if acceleration is None:
            return False
        if weighted_magnitude(acceleration, self.vertical_weight) <= self.threshold:
            return False
        last = self.ledger.state.last_step_at_ms
        if last is not None and now_ms - last <= self.step_interval_ms:
            return False
        self.ledger.state.last_step_at_ms = now_ms
        return True
