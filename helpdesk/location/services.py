# helpdesk/location/services.py
import logging

from sqlalchemy import case
from sqlalchemy.orm import Session

from helpdesk.core.config import get_settings
from helpdesk.core.database import utcnow
from helpdesk.core.errors import ConflictError, NotFoundError, ValidationError
from helpdesk.core.pagination import PageResult, paginate
from helpdesk.location import hierarchy
from helpdesk.location.hierarchy import LocationCandidate
from helpdesk.location.models import Location

logger = logging.getLogger(__name__)


def _live(db: Session):
    return db.query(Location).filter(Location.is_deleted.is_(False))


def _get_live(db: Session, location_id: int) -> Location | None:
    return _live(db).filter(Location.id == location_id).first()


def _get_any(db: Session, location_id: int) -> Location | None:
    # Soft-deleted rows stay addressable for traversal and audit.
    return db.get(Location, location_id)


def _children_query(db: Session, parent_id: int):
    return _live(db).filter(Location.parent_id == parent_id)


def _sibling_name_taken(db: Session, name: str, parent_id: int | None, exclude_id: int | None = None) -> bool:
    query = _live(db).filter(Location.name == name)
    if parent_id is None:
        query = query.filter(Location.parent_id.is_(None))
    else:
        query = query.filter(Location.parent_id == parent_id)
    if exclude_id is not None:
        query = query.filter(Location.id != exclude_id)
    return db.query(query.exists()).scalar()


def _clean_code(code: str | None) -> str | None:
    if code is None or not code.strip():
        return None
    return code.strip()


def _validate(db: Session, candidate: LocationCandidate) -> None:
    parent_level = None
    if candidate.parent_id is not None:
        parent = _get_live(db, candidate.parent_id)
        parent_level = parent.level if parent else None
    hierarchy.validate_hierarchy(
        candidate,
        parent_level,
        code_max_length=get_settings().LOCATION_CODE_MAX_LENGTH,
    )


# Basic CRUD

def list_locations(db: Session) -> list[Location]:
    return _live(db).order_by(Location.level, Location.name).all()


def get_location(db: Session, location_id: int) -> Location:
    location = _get_live(db, location_id)
    if not location:
        raise NotFoundError("Location", location_id)
    return location


def create_location(
    db: Session,
    name: str,
    level: int,
    code: str | None = None,
    parent_id: int | None = None,
) -> Location:
    code = _clean_code(code)
    candidate = LocationCandidate(name=name, level=level, code=code, parent_id=parent_id)
    _validate(db, candidate)
    if _sibling_name_taken(db, name, parent_id):
        raise ValidationError(f"Location with name '{name}' already exists under this parent")

    db_location = Location(name=name, code=code, parent_id=parent_id, level=level)
    db.add(db_location)
    db.commit()
    db.refresh(db_location)
    logger.info("Created location %s (%r, level %s)", db_location.id, name, level)
    return db_location


def update_location(
    db: Session,
    location_id: int,
    name: str,
    level: int,
    code: str | None = None,
    parent_id: int | None = None,
) -> Location:
    db_location = get_location(db, location_id)
    code = _clean_code(code)

    if hierarchy.creates_cycle(location_id, parent_id, lambda i: _get_any(db, i)):
        raise ValidationError("Location cannot be moved under itself or one of its descendants")

    candidate = LocationCandidate(name=name, level=level, code=code, parent_id=parent_id)
    _validate(db, candidate)
    if _sibling_name_taken(db, name, parent_id, exclude_id=location_id):
        raise ValidationError(f"Location with name '{name}' already exists under this parent")
    if level != db_location.level and has_children(db, location_id):
        raise ConflictError("Cannot change the level of a location that has child locations")

    db_location.name = name
    db_location.code = code
    db_location.parent_id = parent_id
    db_location.level = level
    db.commit()
    db.refresh(db_location)
    logger.info("Updated location %s", location_id)
    return db_location


def delete_location(db: Session, location_id: int) -> Location:
    db_location = get_location(db, location_id)
    if has_children(db, location_id):
        raise ConflictError("Cannot delete location that has child locations")

    db_location.is_deleted = True
    db_location.deleted_at = utcnow()
    db.commit()
    db.refresh(db_location)
    logger.info("Deleted location %s", location_id)
    return db_location


# Lookups

def find_by_name(db: Session, name: str) -> Location | None:
    return _live(db).filter(Location.name == name).order_by(Location.level, Location.id).first()


def exists_by_name_and_parent(db: Session, name: str, parent_id: int | None) -> bool:
    return _sibling_name_taken(db, name, parent_id)


def find_roots(db: Session) -> list[Location]:
    return (
        _live(db)
        .filter(Location.parent_id.is_(None), Location.level == hierarchy.ROOT_LEVEL)
        .order_by(Location.name.asc())
        .all()
    )


def find_root_by_code_or_name(db: Session, code_or_name: str) -> Location | None:
    return (
        _live(db)
        .filter(Location.parent_id.is_(None))
        .filter((Location.code == code_or_name) | (Location.name == code_or_name))
        # a code match wins over a name match
        .order_by(case((Location.code == code_or_name, 0), else_=1), Location.id)
        .first()
    )


def find_children(db: Session, parent_id: int) -> list[Location]:
    get_location(db, parent_id)
    return _children_query(db, parent_id).order_by(Location.name.asc()).all()


def find_children_page(db: Session, parent_id: int, offset: int = 0, limit: int | None = None) -> PageResult:
    get_location(db, parent_id)
    limit = limit or get_settings().DEFAULT_PAGE_SIZE
    query = _children_query(db, parent_id).order_by(Location.name.asc())
    return paginate(query, offset, limit)


def find_by_ids(db: Session, ids: list[int]) -> list[Location]:
    if not ids:
        return []
    return _live(db).filter(Location.id.in_(ids)).order_by(Location.id).all()


def search_by_name(db: Session, fragment: str) -> list[Location]:
    return _live(db).filter(Location.name.ilike(f"%{fragment}%")).order_by(Location.name).all()


# Hierarchy

def find_ancestor_root(db: Session, location_id: int) -> Location:
    start = get_location(db, location_id)
    return hierarchy.walk_to_root(start, lambda i: _get_any(db, i))


def find_descendants(db: Session, location_id: int) -> list[Location]:
    get_location(db, location_id)
    return hierarchy.collect_descendants(location_id, lambda i: _children_query(db, i).all())


def is_root(db: Session, location_id: int) -> bool:
    location = _get_live(db, location_id)
    return location is not None and location.level == hierarchy.ROOT_LEVEL


def has_children(db: Session, location_id: int) -> bool:
    return db.query(_children_query(db, location_id).exists()).scalar()


def check_hierarchy(
    db: Session,
    name: str,
    level: int,
    code: str | None = None,
    parent_id: int | None = None,
) -> bool:
    """Dry-run of the structural checks; True when the location would be accepted."""
    try:
        _validate(db, LocationCandidate(name=name, level=level, code=_clean_code(code), parent_id=parent_id))
    except ValidationError:
        return False
    return True
