# helpdesk/ticket/models.py
from sqlalchemy import Boolean, Column, DateTime, Enum, Integer, String
from helpdesk.core.database import Base, utcnow
from helpdesk.ticket.lifecycle import TicketStatus


class Ticket(Base):
    __tablename__ = "tickets"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(1000), index=True, nullable=False)
    description = Column(String(5000), nullable=True)
    status = Column(Enum(TicketStatus), default=TicketStatus.OPEN, nullable=False, index=True)
    # Key into the external user directory
    owner_id = Column(Integer, index=True, nullable=False)
    created_at = Column(DateTime, nullable=False, default=utcnow, index=True)
    resolved_at = Column(DateTime, nullable=True)
    deleted_at = Column(DateTime, nullable=True)
    is_deleted = Column(Boolean, nullable=False, default=False, index=True)
