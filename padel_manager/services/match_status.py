"""
Match status lifecycle:

    scheduled -> in_progress -> completed
    scheduled -> completed            (score entered without a live phase)
    scheduled | in_progress -> cancelled

completed and cancelled are terminal.
"""
from enum import Enum
from typing import Any, Dict, FrozenSet

from padel_manager.models.match import MatchStatus

SCHEDULED = MatchStatus.scheduled.value
IN_PROGRESS = MatchStatus.in_progress.value
COMPLETED = MatchStatus.completed.value
CANCELLED = MatchStatus.cancelled.value

TERMINAL_STATUSES: FrozenSet[str] = frozenset({COMPLETED, CANCELLED})

ALLOWED_TRANSITIONS: Dict[str, FrozenSet[str]] = {
    SCHEDULED: frozenset({IN_PROGRESS, COMPLETED, CANCELLED}),
    IN_PROGRESS: frozenset({COMPLETED, CANCELLED}),
    COMPLETED: frozenset(),
    CANCELLED: frozenset(),
}


class StatusTransitionError(ValueError):
    """Raised for an unknown status or a move the lifecycle does not allow."""


def status_value(status: Any) -> str:
    return status.value if isinstance(status, Enum) else str(status)


def is_terminal(status: Any) -> bool:
    return status_value(status) in TERMINAL_STATUSES


def validate_status_transition(current: Any, new: Any) -> None:
    current = status_value(current)
    new = status_value(new)
    if new not in ALLOWED_TRANSITIONS:
        raise StatusTransitionError(f"Invalid match status: {new}")
    if current in TERMINAL_STATUSES:
        raise StatusTransitionError(f"Match is {current}; no further changes are allowed")
    if new == current:
        return
    if new not in ALLOWED_TRANSITIONS.get(current, frozenset()):
        raise StatusTransitionError(f"Cannot change match status from {current} to {new}")


def is_completion(current: Any, new: Any) -> bool:
    """True when this change moves the match into completed (standings must be applied once)."""
    return status_value(current) != COMPLETED and status_value(new) == COMPLETED
