"""
Appointment status state machine.

BOOKED is the only entry state. CANCEL and ATTEND each move a BOOKED
appointment into a terminal status; every other combination is rejected
with a clear error listing what the current status allows.

Usage:
    status = next_status(AppointmentStatus.BOOKED, LifecycleTrigger.CANCEL)
    assert status == AppointmentStatus.CANCELLED
"""

import logging
from dataclasses import dataclass
from enum import Enum

from office_hours.errors import InvalidStateTransition
from office_hours.schemas.appointment_schema import AppointmentStatus

logger = logging.getLogger(__name__)


class LifecycleTrigger(str, Enum):
    """Operations that move an appointment between statuses."""
    CANCEL = "cancel"
    ATTEND = "attend"


@dataclass(frozen=True)
class Transition:
    """A single valid status transition."""
    from_status: AppointmentStatus
    to_status: AppointmentStatus
    trigger: LifecycleTrigger


TRANSITIONS: list[Transition] = [
    Transition(AppointmentStatus.BOOKED, AppointmentStatus.CANCELLED, LifecycleTrigger.CANCEL),
    Transition(AppointmentStatus.BOOKED, AppointmentStatus.ATTENDED, LifecycleTrigger.ATTEND),
]

TERMINAL_STATUSES = frozenset({AppointmentStatus.CANCELLED, AppointmentStatus.ATTENDED})


def valid_triggers(status: AppointmentStatus) -> list[LifecycleTrigger]:
    """Return all triggers valid from ``status``."""
    return [t.trigger for t in TRANSITIONS if t.from_status == status]


def is_terminal(status: AppointmentStatus) -> bool:
    return status in TERMINAL_STATUSES


def next_status(status: AppointmentStatus, trigger: LifecycleTrigger) -> AppointmentStatus:
    """
    Resolve the status reached by applying ``trigger``.

    Raises:
        InvalidStateTransition: If no transition exists from ``status``.
    """
    for t in TRANSITIONS:
        if t.from_status == status and t.trigger == trigger:
            logger.debug(
                "Appointment transition: %s -> %s (trigger: %s)",
                status.value, t.to_status.value, trigger.value,
            )
            return t.to_status

    valid = [t.value for t in valid_triggers(status)]
    raise InvalidStateTransition(
        f"Cannot {trigger.value} an appointment that is '{status.value}'. "
        f"Valid actions: {valid}"
    )
