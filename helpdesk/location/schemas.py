# helpdesk/location/schemas.py
from datetime import datetime

from pydantic import BaseModel, Field


class LocationBase(BaseModel):
    name: str = Field(..., min_length=1)
    code: str | None = None
    parent_id: int | None = None
    level: int = Field(default=1, ge=1)


class LocationCreate(LocationBase):
    pass


class LocationUpdate(LocationBase):
    pass


class LocationOut(LocationBase):
    id: int
    created_at: datetime

    model_config = {"from_attributes": True}
