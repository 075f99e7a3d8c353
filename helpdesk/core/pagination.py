# helpdesk/core/pagination.py
from typing import Any, Generic, TypeVar

from pydantic import BaseModel
from sqlalchemy.orm import Query

T = TypeVar("T")


class PageResult:
    """One page of ORM rows plus the total row count of the query.

    Not a dataclass: FastAPI passes dataclass responses through asdict().
    """

    __slots__ = ("items", "total", "offset", "limit")

    def __init__(self, items: list[Any], total: int, offset: int, limit: int) -> None:
        self.items = items
        self.total = total
        self.offset = offset
        self.limit = limit


class Page(BaseModel, Generic[T]):
    items: list[T]
    total: int
    offset: int
    limit: int

    model_config = {"from_attributes": True}


def paginate(query: Query, offset: int, limit: int) -> PageResult:
    offset = max(offset, 0)
    limit = max(limit, 1)
    total = query.order_by(None).count()
    items = query.offset(offset).limit(limit).all()
    return PageResult(items=items, total=total, offset=offset, limit=limit)
