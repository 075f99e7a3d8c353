# helpdesk/location/models.py
from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, String
from helpdesk.core.database import Base, utcnow


class Location(Base):
    __tablename__ = "locations"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, index=True, nullable=False)
    code = Column(String(2), nullable=True)  # provinces only
    # Parent kept as a plain id; children are looked up through this column.
    parent_id = Column(Integer, ForeignKey("locations.id"), index=True, nullable=True)
    level = Column(Integer, nullable=False, default=1)
    created_at = Column(DateTime, nullable=False, default=utcnow)
    deleted_at = Column(DateTime, nullable=True)
    is_deleted = Column(Boolean, nullable=False, default=False, index=True)

    def __repr__(self) -> str:
        return f"<Location id={self.id} name={self.name!r} level={self.level}>"
