# helpdesk/location/hierarchy.py
"""Structural rules and traversals for the location tree.

Nothing here touches the database. Nodes are anything with ``id`` and
``parent_id`` attributes; lookups are passed in as callables so the same
walks run against ORM rows in the services and plain objects in tests.
"""

from collections import deque
from dataclasses import dataclass
from typing import Callable, Iterable, Iterator, Protocol

from helpdesk.core.errors import ConflictError, NotFoundError, ValidationError

ROOT_LEVEL = 1


class Node(Protocol):
    id: int
    parent_id: int | None


@dataclass(frozen=True)
class LocationCandidate:
    """A location as proposed by a caller, before it is persisted."""

    name: str
    level: int
    code: str | None = None
    parent_id: int | None = None


def validate_hierarchy(
    candidate: LocationCandidate,
    parent_level: int | None,
    code_max_length: int = 2,
) -> None:
    """Raise ValidationError on the first structural rule the candidate breaks.

    ``parent_level`` is the level of the persisted parent, or None when the
    candidate has no parent (or the parent could not be found).
    """
    if not candidate.name or not candidate.name.strip():
        raise ValidationError("Location name cannot be empty")
    if candidate.level < ROOT_LEVEL:
        raise ValidationError("Location level must be a positive integer")

    if candidate.level == ROOT_LEVEL and candidate.parent_id is not None:
        raise ValidationError("Root location cannot have a parent")
    if candidate.level > ROOT_LEVEL and candidate.parent_id is None:
        raise ValidationError("Non-root location requires a parent")

    if candidate.parent_id is not None:
        if parent_level is None:
            raise ValidationError(f"Parent location not found with id: {candidate.parent_id}")
        if candidate.level != parent_level + 1:
            raise ValidationError(
                f"Location level {candidate.level} must be one greater than parent level {parent_level}"
            )

    if candidate.code is not None:
        if candidate.level != ROOT_LEVEL:
            raise ValidationError("Only root locations can have a code")
        if len(candidate.code) > code_max_length:
            raise ValidationError(f"Location code cannot exceed {code_max_length} characters")


def iter_ancestors(start: Node, lookup: Callable[[int], Node | None]) -> Iterator[Node]:
    """Yield the parent of ``start``, then its parent, up to the root.

    Raises ConflictError if a node shows up twice (a cycle in stored data).
    """
    seen = {start.id}
    current = start
    while current.parent_id is not None:
        if current.parent_id in seen:
            raise ConflictError(f"Location hierarchy has a cycle at id: {current.parent_id}")
        parent = lookup(current.parent_id)
        if parent is None:
            raise NotFoundError("Parent location", current.parent_id)
        seen.add(parent.id)
        yield parent
        current = parent


def walk_to_root(start: Node, lookup: Callable[[int], Node | None]) -> Node:
    root = start
    for root in iter_ancestors(start, lookup):
        pass
    return root


def collect_descendants(root_id: int, children_of: Callable[[int], Iterable[Node]]) -> list[Node]:
    """Breadth-first list of every node below ``root_id``, each visited once."""
    seen = {root_id}
    found: list[Node] = []
    queue = deque([root_id])
    while queue:
        node_id = queue.popleft()
        for child in children_of(node_id):
            if child.id in seen:
                continue
            seen.add(child.id)
            found.append(child)
            queue.append(child.id)
    return found


def creates_cycle(
    location_id: int,
    new_parent_id: int | None,
    lookup: Callable[[int], Node | None],
) -> bool:
    """True if making ``new_parent_id`` the parent of ``location_id`` closes a loop."""
    if new_parent_id is None:
        return False
    if new_parent_id == location_id:
        return True
    parent = lookup(new_parent_id)
    if parent is None:
        return False
    return any(a.id == location_id for a in iter_ancestors(parent, lookup))
