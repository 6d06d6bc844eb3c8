"""
Pedometer error taxonomy.
Sensor/permission errors stop a session from starting; persistence errors are logged only;
malformed samples are dropped silently.
"""


class PedometerError(Exception):
    """Base class for pedometer core errors."""


class SensorUnavailable(PedometerError):
    def __init__(self, message: str = "Motion sensor is not available on this device."):
        super().__init__(message)


class PermissionDenied(PedometerError):
    def __init__(
        self,
        message: str = "Motion sensor permission was denied. Enable motion access in the device settings.",
    ):
        super().__init__(message)


class PersistenceReadFailure(PedometerError):
    """The store could not be read; persisted progress is unknown."""


class PersistenceWriteFailure(PedometerError):
    """One or more keys of a snapshot flush could not be written."""

    def __init__(self, keys: list[str]):
        self.keys = list(keys)
        super().__init__(f"failed to persist keys: {', '.join(self.keys)}")


class MalformedSample(PedometerError):
    """A motion event without usable x/y/z data."""
