"""
Motion sensor capability / permission contract consumed at session start.
"""
from typing import Protocol


class SensorSource(Protocol):
    def is_available(self) -> bool:
        """Capability check — False means the device has no motion sensor."""
        ...

    def request_permission(self) -> bool:
        """One-time user grant. False = declined."""
        ...


class ReportedSensorSource:
    """Capability and permission outcome as reported by the client."""

    def __init__(self, available: bool = True, permission_granted: bool = True):
        self.available = available
        self.permission_granted = permission_granted

    def is_available(self) -> bool:
        return self.available

    def request_permission(self) -> bool:
        return self.permission_granted
