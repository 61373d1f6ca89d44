"""Roles and the role-edge table.

Creation rights are looked up in an explicit table. They are not nested:
``admin`` may create faculty but not ``campus_admin``, while
``campus_admin`` may create both ``admin`` and ``faculty``. Nothing here
infers an edge from another edge.
"""
from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import Mapping, Optional, Union

from pubtrack.core.catalog import DEFAULT_CATALOG
from pubtrack.core.exceptions import CatalogError, UnknownRoleError


class Role(str, Enum):
    SUPER_ADMIN = "super_admin"
    CAMPUS_ADMIN = "campus_admin"
    ADMIN = "admin"
    FACULTY = "faculty"

    def __str__(self) -> str:
        return self.value


RoleLike = Union[Role, str]

# Roles whose users are attached to a department.
DEPARTMENT_BOUND_ROLES = frozenset({Role.ADMIN, Role.FACULTY})


def parse_role(value: RoleLike) -> Role:
    """Parse a role name (case-insensitive).

    Raises:
        UnknownRoleError: If the value is not a known role
    """
    if isinstance(value, Role):
        return value
    text = str(value or "").strip().lower()
    try:
        return Role(text)
    except ValueError:
        raise UnknownRoleError(str(value)) from None


def coerce_role(value: RoleLike) -> Optional[Role]:
    """Like ``parse_role`` but returns None for unknown values."""
    try:
        return parse_role(value)
    except UnknownRoleError:
        return None


@dataclass(frozen=True)
class RoleEdgeTable:
    """Which role may create which roles."""
    edges: Mapping[Role, frozenset]

    @classmethod
    def from_dict(cls, data: Mapping[str, list]) -> "RoleEdgeTable":
        """Build the table from ``{"creator": ["target", ...]}``.

        Every role must appear as a key so the table is exhaustive.

        Raises:
            CatalogError: If a role name is unknown or a role is missing
        """
        if not isinstance(data, Mapping):
            raise CatalogError("roleEdges must be an object")
        edges: dict[Role, frozenset] = {}
        for creator, targets in data.items():
            creator_role = coerce_role(creator)
            if creator_role is None:
                raise CatalogError(f"Unknown role '{creator}' in role edge table")
            if targets is not None and not isinstance(targets, list):
                raise CatalogError(f"Role edge targets of '{creator}' must be a list")
            parsed = set()
            for target in targets or []:
                target_role = coerce_role(target)
                if target_role is None:
                    raise CatalogError(f"Unknown role '{target}' in role edge table")
                parsed.add(target_role)
            edges[creator_role] = frozenset(parsed)

        missing = [role.value for role in Role if role not in edges]
        if missing:
            raise CatalogError(f"Role edge table has no entry for: {', '.join(missing)}")
        return cls(edges)

    def can_create(self, creator: RoleLike, target: RoleLike) -> bool:
        creator_role = coerce_role(creator)
        target_role = coerce_role(target)
        if creator_role is None or target_role is None:
            return False
        return target_role in self.edges.get(creator_role, frozenset())

    def creatable_by(self, creator: RoleLike) -> list[Role]:
        """Roles ``creator`` may create, in declaration order of ``Role``."""
        creator_role = coerce_role(creator)
        if creator_role is None:
            return []
        allowed = self.edges.get(creator_role, frozenset())
        return [role for role in Role if role in allowed]

    def to_dict(self) -> dict[str, list[str]]:
        return {creator.value: [r.value for r in Role if r in targets] for creator, targets in self.edges.items()}


DEFAULT_ROLE_EDGES = RoleEdgeTable.from_dict(DEFAULT_CATALOG["roleEdges"])


def can_create_role(creator: RoleLike, target: RoleLike, table: RoleEdgeTable = DEFAULT_ROLE_EDGES) -> bool:
    """Direct lookup in the role-edge table."""
    return table.can_create(creator, target)
