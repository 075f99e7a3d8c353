# helpdesk/ticket/services.py
import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from helpdesk.core.config import get_settings
from helpdesk.core.database import utcnow
from helpdesk.core.errors import DomainError, NotFoundError, ValidationError
from helpdesk.core.pagination import PageResult, paginate
from helpdesk.ticket import lifecycle
from helpdesk.ticket.lifecycle import TicketStatus
from helpdesk.ticket.models import Ticket

logger = logging.getLogger(__name__)


@dataclass
class BulkCloseResult:
    """Ids closed by a bulk run, and the reason each failed id was skipped."""

    closed: list[int] = field(default_factory=list)
    failed: dict[int, str] = field(default_factory=dict)


@dataclass(frozen=True)
class TicketStatistics:
    open: int
    in_progress: int
    resolved: int
    closed: int
    total: int


def _live(db: Session):
    return db.query(Ticket).filter(Ticket.is_deleted.is_(False))


def _newest_first(query):
    return query.order_by(Ticket.created_at.desc(), Ticket.id.desc())


def _oldest_first(query):
    return query.order_by(Ticket.created_at.asc(), Ticket.id.asc())


def _check_title(title: str | None) -> None:
    if title is None or not title.strip():
        raise ValidationError("Ticket title cannot be null or empty")
    max_length = get_settings().TICKET_TITLE_MAX_LENGTH
    if len(title) > max_length:
        raise ValidationError(f"Ticket title cannot exceed {max_length} characters")


def _check_description(description: str | None) -> None:
    max_length = get_settings().TICKET_DESCRIPTION_MAX_LENGTH
    if description is not None and len(description) > max_length:
        raise ValidationError(f"Ticket description cannot exceed {max_length} characters")


# Basic CRUD

def list_tickets(db: Session, offset: int = 0, limit: int | None = None) -> PageResult:
    limit = limit or get_settings().DEFAULT_PAGE_SIZE
    return paginate(_newest_first(_live(db)), offset, limit)


def get_ticket(db: Session, ticket_id: int) -> Ticket:
    ticket = _live(db).filter(Ticket.id == ticket_id).first()
    if not ticket:
        raise NotFoundError("Ticket", ticket_id)
    return ticket


def create_ticket(db: Session, title: str, owner_id: int | None, description: str | None = None) -> Ticket:
    _check_title(title)
    if owner_id is None:
        raise ValidationError("Ticket must be associated with a user")
    _check_description(description)
    if exists_by_title_and_owner(db, title, owner_id):
        raise ValidationError(f"Ticket with title '{title}' already exists for this user")

    db_ticket = Ticket(
        title=title,
        description=description,
        owner_id=owner_id,
        status=TicketStatus.OPEN,
        created_at=utcnow(),
    )
    db.add(db_ticket)
    db.commit()
    db.refresh(db_ticket)
    logger.info("Created ticket %s for owner %s", db_ticket.id, owner_id)
    return db_ticket


def update_ticket(
    db: Session,
    ticket_id: int,
    title: str | None = None,
    description: str | None = None,
) -> Ticket:
    db_ticket = get_ticket(db, ticket_id)
    if title is not None:
        _check_title(title)
    _check_description(description)

    if title is not None:
        db_ticket.title = title
    if description is not None:
        db_ticket.description = description
    db.commit()
    db.refresh(db_ticket)
    return db_ticket


def delete_ticket(db: Session, ticket_id: int) -> Ticket:
    db_ticket = get_ticket(db, ticket_id)
    db_ticket.is_deleted = True
    db_ticket.deleted_at = utcnow()
    db.commit()
    db.refresh(db_ticket)
    logger.info("Deleted ticket %s", ticket_id)
    return db_ticket


def delete_tickets_by_owner(db: Session, owner_id: int) -> int:
    now = utcnow()
    tickets = _live(db).filter(Ticket.owner_id == owner_id).all()
    for ticket in tickets:
        ticket.is_deleted = True
        ticket.deleted_at = now
    db.commit()
    logger.info("Deleted %d tickets of owner %s", len(tickets), owner_id)
    return len(tickets)


# Status management

def transition_ticket(db: Session, ticket_id: int, new_status: TicketStatus, now: datetime | None = None) -> Ticket:
    db_ticket = get_ticket(db, ticket_id)
    old_status = db_ticket.status
    lifecycle.apply_transition(db_ticket, new_status, now or utcnow())
    db.commit()
    db.refresh(db_ticket)
    logger.info("Ticket %s moved from %s to %s", ticket_id, TicketStatus(old_status).value, db_ticket.status.value)
    return db_ticket


def _close_each(db: Session, tickets: list[Ticket], now: datetime) -> BulkCloseResult:
    result = BulkCloseResult()
    for ticket in tickets:
        ticket_id = ticket.id
        try:
            lifecycle.apply_transition(ticket, TicketStatus.CLOSED, now)
            db.commit()
        except DomainError as exc:
            db.rollback()
            result.failed[ticket_id] = exc.message
        except SQLAlchemyError as exc:
            db.rollback()
            result.failed[ticket_id] = str(exc)
        else:
            result.closed.append(ticket_id)
            continue
        logger.warning("Could not close ticket %s: %s", ticket_id, result.failed[ticket_id])

    logger.info("Bulk close: %d closed, %d failed", len(result.closed), len(result.failed))
    return result


def bulk_close_resolved(db: Session, now: datetime | None = None) -> BulkCloseResult:
    tickets = find_by_status(db, TicketStatus.RESOLVED)
    return _close_each(db, tickets, now or utcnow())


def auto_close_stale(db: Session, days_old: int, now: datetime | None = None) -> BulkCloseResult:
    if days_old < 0:
        raise ValidationError("days_old cannot be negative")
    now = now or utcnow()
    cutoff = now - timedelta(days=days_old)
    tickets = (
        _oldest_first(_live(db))
        .filter(
            Ticket.status == TicketStatus.RESOLVED,
            Ticket.resolved_at.is_not(None),
            Ticket.resolved_at < cutoff,
        )
        .all()
    )
    return _close_each(db, tickets, now)


# Queries

def find_by_owner(db: Session, owner_id: int) -> list[Ticket]:
    return _newest_first(_live(db).filter(Ticket.owner_id == owner_id)).all()


def find_by_owner_page(db: Session, owner_id: int, offset: int = 0, limit: int | None = None) -> PageResult:
    limit = limit or get_settings().DEFAULT_PAGE_SIZE
    return paginate(_newest_first(_live(db).filter(Ticket.owner_id == owner_id)), offset, limit)


def find_by_owner_and_status(db: Session, owner_id: int, status: TicketStatus) -> list[Ticket]:
    return _newest_first(_live(db).filter(Ticket.owner_id == owner_id, Ticket.status == status)).all()


def find_by_status(db: Session, status: TicketStatus) -> list[Ticket]:
    return _oldest_first(_live(db).filter(Ticket.status == status)).all()


def find_by_status_page(db: Session, status: TicketStatus, offset: int = 0, limit: int | None = None) -> PageResult:
    limit = limit or get_settings().DEFAULT_PAGE_SIZE
    return paginate(_oldest_first(_live(db).filter(Ticket.status == status)), offset, limit)


def find_unresolved_page(db: Session, offset: int = 0, limit: int | None = None) -> PageResult:
    limit = limit or get_settings().DEFAULT_PAGE_SIZE
    query = _newest_first(_live(db).filter(Ticket.status != TicketStatus.CLOSED))
    return paginate(query, offset, limit)


def find_open(db: Session) -> list[Ticket]:
    return find_by_status(db, TicketStatus.OPEN)


def exists_by_title_and_owner(db: Session, title: str, owner_id: int) -> bool:
    query = _live(db).filter(Ticket.title == title, Ticket.owner_id == owner_id)
    return db.query(query.exists()).scalar()


def is_owned_by(db: Session, ticket_id: int, owner_id: int) -> bool:
    ticket = _live(db).filter(Ticket.id == ticket_id).first()
    return ticket is not None and ticket.owner_id == owner_id


# Statistics

def count_by_owner_and_status(db: Session, owner_id: int, status: TicketStatus) -> int:
    return _live(db).filter(Ticket.owner_id == owner_id, Ticket.status == status).count()


def _statistics(query) -> TicketStatistics:
    counts = dict(
        query.with_entities(Ticket.status, func.count(Ticket.id)).group_by(Ticket.status).all()
    )
    return TicketStatistics(
        open=counts.get(TicketStatus.OPEN, 0),
        in_progress=counts.get(TicketStatus.IN_PROGRESS, 0),
        resolved=counts.get(TicketStatus.RESOLVED, 0),
        closed=counts.get(TicketStatus.CLOSED, 0),
        total=sum(counts.values()),
    )


def owner_statistics(db: Session, owner_id: int) -> TicketStatistics:
    return _statistics(_live(db).filter(Ticket.owner_id == owner_id))


def overall_statistics(db: Session) -> TicketStatistics:
    return _statistics(_live(db))


def average_resolution_hours(db: Session) -> float:
    tickets = (
        _live(db)
        .filter(
            Ticket.status == TicketStatus.CLOSED,
            Ticket.resolved_at.is_not(None),
            Ticket.created_at.is_not(None),
        )
        .all()
    )
    if not tickets:
        return 0.0
    total_hours = sum((t.resolved_at - t.created_at).total_seconds() / 3600 for t in tickets)
    return total_hours / len(tickets)
