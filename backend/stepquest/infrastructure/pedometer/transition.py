"""
Cancellable deferred action for the post-achievement mission transition.
Single-threaded: the host drives it by calling run_due() with the current time.
"""
from typing import Callable, Optional


class DeferredTransition:
    def __init__(self):
        self._due_at_ms: Optional[float] = None
        self._action: Optional[Callable[[], None]] = None

    @property
    def pending(self) -> bool:
        return self._action is not None

    @property
    def due_at_ms(self) -> Optional[float]:
        return self._due_at_ms

    def schedule(self, due_at_ms: float, action: Callable[[], None]) -> None:
        if self.pending:
            raise RuntimeError("a transition is already scheduled")
        self._due_at_ms = due_at_ms
        self._action = action

    def cancel(self) -> bool:
        was_pending = self.pending
        self._due_at_ms = None
        self._action = None
        return was_pending

    def run_due(self, now_ms: float) -> bool:
        """Run the action if its due time has been reached. Returns True if it ran."""
        if self._action is None or self._due_at_ms is None or now_ms < self._due_at_ms:
            return False
        return self.run_now()

    def run_now(self) -> bool:
        action = self._action
        if action is None:
            return False
        self.cancel()
        action()
        return True
