from stepquest.infrastructure.pedometer.service.impl import PedometerEngine, StepResult
from stepquest.infrastructure.pedometer.service.interface import PedometerService

__all__ = ["PedometerEngine", "PedometerService", "StepResult"]
