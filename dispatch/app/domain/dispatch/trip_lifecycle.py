"""
Trip status state machine.

    pending -> confirmed -> in-progress -> completed
    pending | confirmed -> cancelled
    pending -> rejected

completed, cancelled and rejected are terminal. Requesting the current state
again is an invalid transition, not a no-op, so double submissions surface.
"""

from typing import Dict, FrozenSet, List, Optional

from dispatch.app.core.exceptions import (
    InvalidTransitionError, IncompleteAssignmentError, TransitionReasonRequiredError
)
from dispatch.app.models.trip_enums import TripStatus


ALLOWED_TRANSITIONS: Dict[TripStatus, FrozenSet[TripStatus]] = {
    TripStatus.PENDING: frozenset({TripStatus.CONFIRMED, TripStatus.CANCELLED, TripStatus.REJECTED}),
    TripStatus.CONFIRMED: frozenset({TripStatus.IN_PROGRESS, TripStatus.CANCELLED}),
    TripStatus.IN_PROGRESS: frozenset({TripStatus.COMPLETED}),
    TripStatus.COMPLETED: frozenset(),
    TripStatus.CANCELLED: frozenset(),
    TripStatus.REJECTED: frozenset(),
}

# Trips that hold their driver and vehicle exclusively
ACTIVE_STATUSES: FrozenSet[TripStatus] = frozenset({TripStatus.CONFIRMED, TripStatus.IN_PROGRESS})

TERMINAL_STATUSES: FrozenSet[TripStatus] = frozenset(
    status for status, targets in ALLOWED_TRANSITIONS.items() if not targets
)

# Transitions that must carry a reason for the audit trail
REASON_REQUIRED: FrozenSet[TripStatus] = frozenset({TripStatus.CANCELLED, TripStatus.REJECTED})

# Transitions that hand the bound driver and vehicle back to the pool
RELEASING_STATUSES: FrozenSet[TripStatus] = frozenset(
    {TripStatus.COMPLETED, TripStatus.CANCELLED, TripStatus.REJECTED}
)


def can_transition(current: TripStatus, target: TripStatus) -> bool:
    return target in ALLOWED_TRANSITIONS[current]


def ensure_transition_allowed(current: TripStatus, target: TripStatus, reason: Optional[str] = None):
    """
    Validate a status change.

    Raises:
        InvalidTransitionError: target not reachable from current
        TransitionReasonRequiredError: cancellation/rejection without a reason
    """
    if not can_transition(current, target):
        raise InvalidTransitionError(current.value, target.value)
    if target in REASON_REQUIRED and not (reason and reason.strip()):
        raise TransitionReasonRequiredError(target.value)


def missing_assignment_fields(driver_id, vehicle_id, estimated_cost) -> List[str]:
    missing = []
    if driver_id is None:
        missing.append("assigned_driver_id")
    if vehicle_id is None:
        missing.append("assigned_vehicle_id")
    if estimated_cost is None:
        missing.append("estimated_cost")
    return missing


def ensure_assignment_complete(driver_id, vehicle_id, estimated_cost):
    """Raises IncompleteAssignmentError unless driver, vehicle and cost are all set."""
    missing = missing_assignment_fields(driver_id, vehicle_id, estimated_cost)
    if missing:
        raise IncompleteAssignmentError(missing)
