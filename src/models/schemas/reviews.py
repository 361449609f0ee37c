from enum import Enum


class ReviewStatus(str, Enum):
    """Lifecycle of a single review run.

    pending -> running -> done | error, plus pending -> error when the run
    could not be scheduled. ``done`` and ``error`` are terminal.
    """
    PENDING = "pending"
    RUNNING = "running"
    DONE = "done"
    ERROR = "error"

    @property
    def is_terminal(self) -> bool:
        return self in (ReviewStatus.DONE, ReviewStatus.ERROR)

    def can_transition_to(self, target: "ReviewStatus") -> bool:
        return target in _LEGAL_TRANSITIONS[self]


_LEGAL_TRANSITIONS = {
    ReviewStatus.PENDING: frozenset({ReviewStatus.RUNNING, ReviewStatus.ERROR}),
    ReviewStatus.RUNNING: frozenset({ReviewStatus.DONE, ReviewStatus.ERROR}),
    ReviewStatus.DONE: frozenset(),
    ReviewStatus.ERROR: frozenset(),
}
