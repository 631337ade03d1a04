from dataclasses import dataclass


@dataclass
class DeferredTransition:
    """Cancellable deadline for a delayed step transition.

    The handle never runs anything on its own. Whoever drives the session
    checks ``is_due`` and calls ``fire`` exactly once.
    """

    due_at: float
    cancelled: bool = False
    fired: bool = False

    def cancel(self):
        self.cancelled = True

    @property
    def pending(self) -> bool:
        return not self.cancelled and not self.fired

    def is_due(self, now: float) -> bool:
        return self.pending and now >= self.due_at

    def fire(self) -> bool:
        if not self.pending:
            return False
        self.fired = True
        return True
