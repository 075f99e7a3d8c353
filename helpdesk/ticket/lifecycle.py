# helpdesk/ticket/lifecycle.py
"""Ticket status state machine.

The whole rule set is ALLOWED_TRANSITIONS; ``apply_transition`` is the only
place that moves a ticket between states and keeps ``resolved_at`` in step.
"""

import enum
from datetime import datetime
from types import MappingProxyType

from helpdesk.core.errors import ValidationError


class TicketStatus(str, enum.Enum):
    OPEN = "OPEN"
    IN_PROGRESS = "IN_PROGRESS"
    RESOLVED = "RESOLVED"
    CLOSED = "CLOSED"


ALLOWED_TRANSITIONS = MappingProxyType({
    TicketStatus.OPEN: frozenset({TicketStatus.IN_PROGRESS, TicketStatus.RESOLVED, TicketStatus.CLOSED}),
    TicketStatus.IN_PROGRESS: frozenset({TicketStatus.OPEN, TicketStatus.RESOLVED, TicketStatus.CLOSED}),
    TicketStatus.RESOLVED: frozenset({TicketStatus.IN_PROGRESS, TicketStatus.CLOSED}),
    TicketStatus.CLOSED: frozenset({TicketStatus.OPEN}),  # reopen
})

RESOLVED_STATES = frozenset({TicketStatus.RESOLVED, TicketStatus.CLOSED})
ACTIVE_STATES = frozenset({TicketStatus.OPEN, TicketStatus.IN_PROGRESS})


def is_allowed(current: TicketStatus, new: TicketStatus) -> bool:
    return new in ALLOWED_TRANSITIONS[TicketStatus(current)]


def apply_transition(ticket, new_status: TicketStatus, now: datetime) -> None:
    """Move ``ticket`` to ``new_status`` in place.

    ``ticket`` needs ``status`` and ``resolved_at`` attributes. Raises
    ValidationError, leaving the ticket untouched, when the move is not in
    the table.
    """
    current = TicketStatus(ticket.status)
    new_status = TicketStatus(new_status)
    if not is_allowed(current, new_status):
        raise ValidationError(
            f"Invalid status transition from {current.value} to {new_status.value}"
        )

    if new_status in RESOLVED_STATES and ticket.resolved_at is None:
        ticket.resolved_at = now
    if current in RESOLVED_STATES and new_status in ACTIVE_STATES:
        ticket.resolved_at = None

    ticket.status = new_status
