# helpdesk/location/routes.py
from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session
from helpdesk.core.config import Settings, get_settings
from helpdesk.core.database import get_db
from helpdesk.core.pagination import Page
from helpdesk.location.schemas import LocationCreate, LocationOut, LocationUpdate
from helpdesk.location import services as location_service

router = APIRouter(prefix="/locations", tags=["Locations"])


@router.get("/", response_model=list[LocationOut])
def list_all(db: Session = Depends(get_db)):
    return location_service.list_locations(db)


@router.post("/", response_model=LocationOut, status_code=201)
def create(location: LocationCreate, db: Session = Depends(get_db)):
    return location_service.create_location(db, **location.model_dump())


@router.get("/provinces", response_model=list[LocationOut])
def provinces(db: Session = Depends(get_db)):
    return location_service.find_roots(db)


@router.get("/province/search/{code_or_name}", response_model=LocationOut)
def province_by_code_or_name(code_or_name: str, db: Session = Depends(get_db)):
    province = location_service.find_root_by_code_or_name(db, code_or_name)
    if not province:
        raise HTTPException(status_code=404, detail="Location not found")
    return province


@router.get("/name/{name}", response_model=LocationOut)
def by_name(name: str, db: Session = Depends(get_db)):
    location = location_service.find_by_name(db, name)
    if not location:
        raise HTTPException(status_code=404, detail="Location not found")
    return location


@router.get("/exists")
def exists(name: str, parent_id: int | None = None, db: Session = Depends(get_db)):
    return location_service.exists_by_name_and_parent(db, name, parent_id)


@router.get("/bulk", response_model=list[LocationOut])
def bulk(ids: list[int] = Query(default=[]), db: Session = Depends(get_db)):
    return location_service.find_by_ids(db, ids)


@router.get("/search", response_model=list[LocationOut])
def search(name: str = Query(..., min_length=1), db: Session = Depends(get_db)):
    return location_service.search_by_name(db, name)


@router.post("/validate-hierarchy")
def validate_hierarchy(location: LocationCreate, db: Session = Depends(get_db)):
    return location_service.check_hierarchy(db, **location.model_dump())


@router.get("/{location_id}", response_model=LocationOut)
def get(location_id: int, db: Session = Depends(get_db)):
    return location_service.get_location(db, location_id)


@router.put("/{location_id}", response_model=LocationOut)
def update(location_id: int, location: LocationUpdate, db: Session = Depends(get_db)):
    return location_service.update_location(db, location_id, **location.model_dump())


@router.delete("/{location_id}", status_code=204)
def delete(location_id: int, db: Session = Depends(get_db)):
    location_service.delete_location(db, location_id)


@router.get("/{parent_id}/children", response_model=Page[LocationOut])
def children(
    parent_id: int,
    offset: int = Query(default=0, ge=0),
    limit: int | None = Query(default=None, ge=1),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    limit = min(limit or settings.DEFAULT_PAGE_SIZE, settings.MAX_PAGE_SIZE)
    return location_service.find_children_page(db, parent_id, offset, limit)


@router.get("/{parent_id}/direct-children", response_model=list[LocationOut])
def direct_children(parent_id: int, db: Session = Depends(get_db)):
    return location_service.find_children(db, parent_id)


@router.get("/{location_id}/descendants", response_model=list[LocationOut])
def descendants(location_id: int, db: Session = Depends(get_db)):
    return location_service.find_descendants(db, location_id)


@router.get("/{location_id}/province", response_model=LocationOut)
def province_of(location_id: int, db: Session = Depends(get_db)):
    return location_service.find_ancestor_root(db, location_id)


@router.get("/{location_id}/is-province")
def is_province(location_id: int, db: Session = Depends(get_db)):
    return location_service.is_root(db, location_id)


@router.get("/{location_id}/has-children")
def has_children(location_id: int, db: Session = Depends(get_db)):
    return location_service.has_children(db, location_id)
