# helpdesk/ticket/routes.py
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from helpdesk.core.database import get_db
from helpdesk.core.pagination import Page
from helpdesk.ticket.lifecycle import TicketStatus
from helpdesk.ticket.schemas import (
    BulkCloseOut,
    TicketCreate,
    TicketOut,
    TicketStatisticsOut,
    TicketStatusUpdate,
    TicketUpdate,
)
from helpdesk.ticket import services as ticket_service
from helpdesk.core.config import get_settings, Settings

router = APIRouter(prefix="/tickets", tags=["Tickets"])


def _limit(limit: int | None, settings: Settings) -> int:
    return min(limit or settings.DEFAULT_PAGE_SIZE, settings.MAX_PAGE_SIZE)


@router.post("/", response_model=TicketOut, status_code=201)
def create(ticket: TicketCreate, db: Session = Depends(get_db)):
    return ticket_service.create_ticket(db, **ticket.model_dump())


@router.get("/", response_model=Page[TicketOut])
def list_all(
    offset: int = Query(default=0, ge=0),
    limit: int | None = Query(default=None, ge=1),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    return ticket_service.list_tickets(db, offset, _limit(limit, settings))


@router.get("/unresolved", response_model=Page[TicketOut])
def unresolved(
    offset: int = Query(default=0, ge=0),
    limit: int | None = Query(default=None, ge=1),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    return ticket_service.find_unresolved_page(db, offset, _limit(limit, settings))


@router.get("/open", response_model=list[TicketOut])
def open_tickets(db: Session = Depends(get_db)):
    return ticket_service.find_open(db)


@router.get("/exists")
def exists(title: str, owner_id: int, db: Session = Depends(get_db)):
    return ticket_service.exists_by_title_and_owner(db, title, owner_id)


@router.get("/statistics/overall", response_model=TicketStatisticsOut)
def overall_statistics(db: Session = Depends(get_db)):
    return ticket_service.overall_statistics(db)


@router.get("/statistics/average-resolution-time")
def average_resolution_time(db: Session = Depends(get_db)):
    return ticket_service.average_resolution_hours(db)


@router.post("/close-resolved", response_model=BulkCloseOut)
def close_resolved(db: Session = Depends(get_db)):
    return ticket_service.bulk_close_resolved(db)


@router.post("/auto-close-old", response_model=BulkCloseOut)
def auto_close_old(
    days_old: int | None = Query(default=None, ge=0),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    days = settings.AUTO_CLOSE_DAYS if days_old is None else days_old
    return ticket_service.auto_close_stale(db, days)


@router.get("/status/{status}", response_model=list[TicketOut])
def by_status(status: TicketStatus, db: Session = Depends(get_db)):
    return ticket_service.find_by_status(db, status)


@router.get("/status/{status}/paged", response_model=Page[TicketOut])
def by_status_paged(
    status: TicketStatus,
    offset: int = Query(default=0, ge=0),
    limit: int | None = Query(default=None, ge=1),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    return ticket_service.find_by_status_page(db, status, offset, _limit(limit, settings))


@router.get("/user/{owner_id}", response_model=Page[TicketOut])
def by_owner(
    owner_id: int,
    offset: int = Query(default=0, ge=0),
    limit: int | None = Query(default=None, ge=1),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    return ticket_service.find_by_owner_page(db, owner_id, offset, _limit(limit, settings))


@router.get("/user/{owner_id}/all", response_model=list[TicketOut])
def all_by_owner(
    owner_id: int,
    status: TicketStatus | None = Query(default=None, description="Filter by status"),
    db: Session = Depends(get_db),
):
    if status:
        return ticket_service.find_by_owner_and_status(db, owner_id, status)
    return ticket_service.find_by_owner(db, owner_id)


@router.get("/user/{owner_id}/statistics", response_model=TicketStatisticsOut)
def owner_statistics(owner_id: int, db: Session = Depends(get_db)):
    return ticket_service.owner_statistics(db, owner_id)


@router.get("/user/{owner_id}/count-by-status")
def count_by_status(owner_id: int, status: TicketStatus, db: Session = Depends(get_db)):
    return ticket_service.count_by_owner_and_status(db, owner_id, status)


@router.delete("/user/{owner_id}")
def delete_by_owner(owner_id: int, db: Session = Depends(get_db)):
    return {"deleted": ticket_service.delete_tickets_by_owner(db, owner_id)}


@router.get("/{ticket_id}", response_model=TicketOut)
def get(ticket_id: int, db: Session = Depends(get_db)):
    return ticket_service.get_ticket(db, ticket_id)


@router.put("/{ticket_id}", response_model=TicketOut)
def update(ticket_id: int, ticket: TicketUpdate, db: Session = Depends(get_db)):
    return ticket_service.update_ticket(db, ticket_id, **ticket.model_dump())


@router.patch("/{ticket_id}/status", response_model=TicketOut)
def update_status(ticket_id: int, payload: TicketStatusUpdate, db: Session = Depends(get_db)):
    return ticket_service.transition_ticket(db, ticket_id, payload.status)


@router.get("/{ticket_id}/owned-by/{owner_id}")
def owned_by(ticket_id: int, owner_id: int, db: Session = Depends(get_db)):
    return ticket_service.is_owned_by(db, ticket_id, owner_id)


@router.delete("/{ticket_id}", response_model=TicketOut)
def delete(ticket_id: int, db: Session = Depends(get_db)):
    return ticket_service.delete_ticket(db, ticket_id)
