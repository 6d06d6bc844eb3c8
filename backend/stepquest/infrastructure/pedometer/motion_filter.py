"""
Gravity separation for the accelerometer stream.
A single-pole low-pass filter tracks gravity; the remainder is linear acceleration.
"""
import math
from dataclasses import dataclass
from typing import Any, Mapping

from stepquest.infrastructure.pedometer.constants import ALPHA
from stepquest.infrastructure.pedometer.errors import MalformedSample


@dataclass(frozen=True)
class Vector3:
    x: float
    y: float
    z: float


@dataclass(frozen=True)
class MotionSample(Vector3):
    """accelerationIncludingGravity-style reading in device units."""

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any] | None) -> "MotionSample":
        """
        Build a sample from a raw event payload ({"x":..,"y":..,"z":..}).
        Raises MalformedSample when the payload or any axis is missing / not a finite number.
        """
        if not data:
            raise MalformedSample("empty motion event")
        axes = []
        for axis in ("x", "y", "z"):
            raw = data.get(axis)
            if raw is None or isinstance(raw, bool):
                raise MalformedSample(f"missing axis {axis}")
            try:
                value = float(raw)
            except (TypeError, ValueError):
                raise MalformedSample(f"non-numeric axis {axis}") from None
            if not math.isfinite(value):
                raise MalformedSample(f"non-finite axis {axis}")
            axes.append(value)
        return cls(*axes)


ZERO = Vector3(0.0, 0.0, 0.0)


class MotionFilter:
    """
    gravity' = alpha * gravity + (1 - alpha) * sample
    linear   = sample - gravity'

    The gravity estimate is session scoped: call reset() when a counting session starts.
    """

    def __init__(self, alpha: float = ALPHA):
        if not 0.0 < alpha < 1.0:
            raise ValueError(f"alpha must be in (0, 1), got {alpha}")
        self.alpha = alpha
        self.gravity = ZERO

    def reset(self) -> None:
        self.gravity = ZERO

    def filter(self, sample: Vector3) -> Vector3:
        a = self.alpha
        g = self.gravity
        self.gravity = Vector3(
            a * g.x + (1 - a) * sample.x,
            a * g.y + (1 - a) * sample.y,
            a * g.z + (1 - a) * sample.z,
        )
        return Vector3(
            sample.x - self.gravity.x,
            sample.y - self.gravity.y,
            sample.z - self.gravity.z,
        )
