# helpdesk/ticket/schemas.py
from datetime import datetime

from pydantic import BaseModel, Field

from helpdesk.ticket.lifecycle import TicketStatus


class TicketBase(BaseModel):
    title: str = Field(..., min_length=1)
    description: str | None = None


class TicketCreate(TicketBase):
    owner_id: int


class TicketUpdate(BaseModel):
    title: str | None = None
    description: str | None = None


class TicketStatusUpdate(BaseModel):
    status: TicketStatus


class TicketOut(TicketBase):
    id: int
    status: TicketStatus
    owner_id: int
    created_at: datetime
    resolved_at: datetime | None = None

    model_config = {"from_attributes": True}


class TicketStatisticsOut(BaseModel):
    open: int
    in_progress: int
    resolved: int
    closed: int
    total: int

    model_config = {"from_attributes": True}


class BulkCloseOut(BaseModel):
    closed: list[int]
    failed: dict[int, str]

    model_config = {"from_attributes": True}
