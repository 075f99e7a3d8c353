# tests/test_locations.py
import pytest

from helpdesk.core.errors import ConflictError, NotFoundError, ValidationError
from helpdesk.location import services as location_service


@pytest.fixture
def tree(db):
    """Kigali City > Gasabo > Kimironko > Bibare > Umudugudu, plus a second province."""
    kigali = location_service.create_location(db, "Kigali City", 1, code="01")
    east = location_service.create_location(db, "Eastern", 1, code="05")
    gasabo = location_service.create_location(db, "Gasabo", 2, parent_id=kigali.id)
    kicukiro = location_service.create_location(db, "Kicukiro", 2, parent_id=kigali.id)
    kimironko = location_service.create_location(db, "Kimironko", 3, parent_id=gasabo.id)
    bibare = location_service.create_location(db, "Bibare", 4, parent_id=kimironko.id)
    village = location_service.create_location(db, "Umudugudu", 5, parent_id=bibare.id)
    return {
        "kigali": kigali.id,
        "east": east.id,
        "gasabo": gasabo.id,
        "kicukiro": kicukiro.id,
        "kimironko": kimironko.id,
        "bibare": bibare.id,
        "village": village.id,
    }


def test_levels_follow_parents(db, tree):
    for location in location_service.list_locations(db):
        if location.parent_id is None:
            assert location.level == 1
        else:
            parent = location_service.get_location(db, location.parent_id)
            assert location.level == parent.level + 1


def test_non_root_without_parent_rejected(db):
    with pytest.raises(ValidationError, match="Non-root location requires a parent"):
        location_service.create_location(db, "Orphan", 2)


def test_create_with_missing_parent_rejected(db):
    with pytest.raises(ValidationError, match="Parent location not found"):
        location_service.create_location(db, "Gasabo", 2, parent_id=999)


def test_duplicate_sibling_name(db, tree):
    with pytest.raises(ValidationError, match="already exists"):
        location_service.create_location(db, "Gasabo", 2, parent_id=tree["kigali"])
    # same name under a different parent is fine
    other = location_service.create_location(db, "Gasabo", 2, parent_id=tree["east"])
    assert other.parent_id == tree["east"]


def test_duplicate_root_name(db, tree):
    with pytest.raises(ValidationError):
        location_service.create_location(db, "Kigali City", 1)


def test_find_roots_ordered_by_name(db, tree):
    assert [r.name for r in location_service.find_roots(db)] == ["Eastern", "Kigali City"]


def test_find_children(db, tree):
    children = location_service.find_children(db, tree["kigali"])
    assert [c.name for c in children] == ["Gasabo", "Kicukiro"]

    page = location_service.find_children_page(db, tree["kigali"], offset=1, limit=1)
    assert page.total == 2
    assert [c.name for c in page.items] == ["Kicukiro"]


def test_find_ancestor_root(db, tree):
    for key in ("village", "bibare", "gasabo", "kigali"):
        root = location_service.find_ancestor_root(db, tree[key])
        assert root.id == tree["kigali"]
        assert root.parent_id is None


def test_find_ancestor_root_missing(db):
    with pytest.raises(NotFoundError):
        location_service.find_ancestor_root(db, 404)


def test_find_descendants(db, tree):
    found = location_service.find_descendants(db, tree["kigali"])
    ids = [loc.id for loc in found]
    assert len(ids) == len(set(ids))
    assert set(ids) == {tree[k] for k in ("gasabo", "kicukiro", "kimironko", "bibare", "village")}
    assert location_service.find_descendants(db, tree["village"]) == []


def test_is_root_and_has_children(db, tree):
    assert location_service.is_root(db, tree["kigali"])
    assert not location_service.is_root(db, tree["gasabo"])
    assert not location_service.is_root(db, 404)
    assert location_service.has_children(db, tree["gasabo"])
    assert not location_service.has_children(db, tree["village"])


def test_delete_with_children_conflicts(db, tree):
    with pytest.raises(ConflictError, match="child locations"):
        location_service.delete_location(db, tree["bibare"])


def test_delete_leaf_hides_it(db, tree):
    location_service.delete_location(db, tree["kicukiro"])
    assert [c.name for c in location_service.find_children(db, tree["kigali"])] == ["Gasabo"]

    location_service.delete_location(db, tree["east"])
    assert [r.name for r in location_service.find_roots(db)] == ["Kigali City"]

    with pytest.raises(NotFoundError):
        location_service.get_location(db, tree["east"])
    with pytest.raises(NotFoundError):
        location_service.delete_location(db, tree["east"])


def test_deleted_name_can_be_reused(db, tree):
    location_service.delete_location(db, tree["kicukiro"])
    again = location_service.create_location(db, "Kicukiro", 2, parent_id=tree["kigali"])
    assert again.id != tree["kicukiro"]


def test_update_moves_node(db, tree):
    moved = location_service.update_location(db, tree["kicukiro"], "Kicukiro", 2, parent_id=tree["east"])
    assert moved.parent_id == tree["east"]
    assert location_service.find_ancestor_root(db, moved.id).id == tree["east"]


def test_update_keeps_own_name(db, tree):
    updated = location_service.update_location(db, tree["kigali"], "Kigali City", 1, code="11")
    assert updated.code == "11"


def test_update_duplicate_name_rejected(db, tree):
    with pytest.raises(ValidationError, match="already exists"):
        location_service.update_location(db, tree["kicukiro"], "Gasabo", 2, parent_id=tree["kigali"])


def test_update_missing(db):
    with pytest.raises(NotFoundError):
        location_service.update_location(db, 404, "Nowhere", 1)


def test_update_rejects_cycle(db, tree):
    with pytest.raises(ValidationError, match="descendants"):
        location_service.update_location(db, tree["gasabo"], "Gasabo", 4, parent_id=tree["kimironko"])
    with pytest.raises(ValidationError):
        location_service.update_location(db, tree["gasabo"], "Gasabo", 3, parent_id=tree["gasabo"])


def test_update_level_with_children_conflicts(db, tree):
    # Kimironko is level 3 with children; moving it under a province makes it level 2
    with pytest.raises(ConflictError):
        location_service.update_location(db, tree["kimironko"], "Kimironko", 2, parent_id=tree["east"])


def test_lookups(db, tree):
    assert location_service.find_by_name(db, "Bibare").id == tree["bibare"]
    assert location_service.find_by_name(db, "Nowhere") is None
    assert location_service.exists_by_name_and_parent(db, "Gasabo", tree["kigali"])
    assert not location_service.exists_by_name_and_parent(db, "Gasabo", None)
    assert location_service.find_root_by_code_or_name(db, "05").id == tree["east"]
    assert location_service.find_root_by_code_or_name(db, "Kigali City").id == tree["kigali"]
    assert location_service.find_root_by_code_or_name(db, "Gasabo") is None
    assert [l.name for l in location_service.search_by_name(db, "ki")] == ["Kicukiro", "Kigali City", "Kimironko"]
    assert {l.id for l in location_service.find_by_ids(db, [tree["gasabo"], tree["village"], 404])} == {
        tree["gasabo"],
        tree["village"],
    }


def test_check_hierarchy(db, tree):
    assert location_service.check_hierarchy(db, "New", 2, parent_id=tree["kigali"])
    assert not location_service.check_hierarchy(db, "New", 3, parent_id=tree["kigali"])
    assert not location_service.check_hierarchy(db, "New", 1, parent_id=tree["kigali"])


def test_blank_code_stored_as_none(db, tree):
    root = location_service.create_location(db, "Northern", 1, code="")
    assert root.code is None

    district = location_service.create_location(db, "Musanze", 2, code="  ", parent_id=root.id)
    assert district.code is None

    updated = location_service.update_location(db, tree["gasabo"], "Gasabo", 2, code="", parent_id=tree["kigali"])
    assert updated.code is None


def test_root_lookup_prefers_code_over_name(db):
    # "NW" is one province's name and another province's code
    by_name = location_service.create_location(db, "NW", 1)
    by_code = location_service.create_location(db, "North West", 1, code="NW")
    assert by_name.id < by_code.id
    assert location_service.find_root_by_code_or_name(db, "NW").id == by_code.id
