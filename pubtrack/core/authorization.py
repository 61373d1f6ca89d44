"""Who may create, modify or delete whom.

Combines the role-edge table with an organisation-scope comparison. The
``can_*`` methods answer yes/no; the ``authorize_*`` methods return the
``RoleError`` that explains a refusal (or None when allowed) so request
handlers can render it.
"""
from __future__ import annotations
import logging
from dataclasses import dataclass
from typing import Any, Mapping, Optional

from pubtrack.core.catalog import NA, OrgCatalog, OrgTriple
from pubtrack.core.exceptions import (
    NotCreatableError,
    OrgScopeMismatchError,
    RoleError,
    SelfModificationForbiddenError,
    UnknownRoleError,
)
from pubtrack.core.roles import DEFAULT_ROLE_EDGES, Role, RoleEdgeTable, RoleLike, coerce_role, parse_role

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class UserRef:
    """The parts of a user that authorization looks at.

    Used both for the acting user (derived from a verified session by an
    upstream collaborator) and for the target user.
    """
    id: Optional[str]
    role: Role
    college: str = NA
    institute: str = NA
    department: str = NA

    @property
    def triple(self) -> OrgTriple:
        return OrgTriple(self.college, self.institute, self.department)

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> "UserRef":
        """Build from a stored user record or a request payload.

        Raises:
            UnknownRoleError: If the record's role is not a known role
        """
        user_id = record.get("id", record.get("_id", record.get("userId")))
        triple = OrgTriple.from_values(record.get("college"), record.get("institute"), record.get("department"))
        return cls(
            id=str(user_id) if user_id is not None else None,
            role=parse_role(record.get("role")),
            college=triple.college,
            institute=triple.institute,
            department=triple.department,
        )


# The acting user has the same shape as a target.
ActorContext = UserRef


def actor_from_claims(claims: Mapping[str, Any]) -> ActorContext:
    """Build an actor context from already-verified token claims.

    Accepts ``userId`` or ``sub`` for the id. Verifying the token is the
    caller's job.
    """
    user_id = claims.get("userId") or claims.get("sub")
    return UserRef.from_record({**claims, "id": user_id})


class AuthorizationGate:
    """Create/modify/delete decisions between two users."""

    def __init__(self, catalog: OrgCatalog, role_edges: RoleEdgeTable = DEFAULT_ROLE_EDGES):
        self.catalog = catalog
        self.role_edges = role_edges

    # ─────────────────────────────────────────────────────────────────────
    # Creation
    # ─────────────────────────────────────────────────────────────────────

    def can_create_role(self, creator: RoleLike, target: RoleLike) -> bool:
        return self.role_edges.can_create(creator, target)

    def creatable_roles(self, actor: ActorContext) -> list[Role]:
        return self.role_edges.creatable_by(actor.role)

    def authorize_create(self, actor: ActorContext, target_role: RoleLike, triple: OrgTriple) -> Optional[RoleError]:
        """Check that ``actor`` may create a ``target_role`` user at ``triple``."""
        target = coerce_role(target_role)
        if target is None:
            return UnknownRoleError(str(target_role))
        if not self.can_create_role(actor.role, target):
            return self._deny(NotCreatableError(actor.role.value, target.value), actor)
        if not self._in_scope(actor, triple):
            return self._deny(
                OrgScopeMismatchError("You can only create users inside your own college and institute"),
                actor,
            )
        return None

    # ─────────────────────────────────────────────────────────────────────
    # Modification / deletion
    # ─────────────────────────────────────────────────────────────────────

    def can_modify(self, actor: ActorContext, target: UserRef) -> bool:
        return self.authorize_modify(actor, target) is None

    def can_delete(self, actor: ActorContext, target: UserRef) -> bool:
        return self.authorize_delete(actor, target) is None

    def authorize_delete(self, actor: ActorContext, target: UserRef) -> Optional[RoleError]:
        return self.authorize_modify(actor, target)

    def authorize_modify(
        self,
        actor: ActorContext,
        target: UserRef,
        updated_role: Optional[RoleLike] = None,
        updated_triple: Optional[OrgTriple] = None,
    ) -> Optional[RoleError]:
        """Check that ``actor`` may change ``target``.

        When the change moves the target to another role or organisation,
        the new role must be creatable by the actor and the new
        organisation must be inside the actor's scope.
        """
        if actor.role is Role.SUPER_ADMIN:
            return None

        if actor.id is not None and actor.id == target.id:
            return self._deny(SelfModificationForbiddenError(), actor)

        if actor.role is Role.CAMPUS_ADMIN:
            if not self._same_campus_scope(actor, target.college, target.institute):
                return self._deny(OrgScopeMismatchError(), actor)
        elif actor.role is Role.ADMIN:
            if actor.college != target.college or actor.institute != target.institute:
                return self._deny(OrgScopeMismatchError(), actor)
            if target.role is not Role.FACULTY:
                return self._deny(NotCreatableError(actor.role.value, target.role.value), actor)
        else:
            return self._deny(NotCreatableError(actor.role.value, target.role.value), actor)

        if updated_role is not None:
            new_role = coerce_role(updated_role)
            if new_role is None:
                return UnknownRoleError(str(updated_role))
            if new_role is not target.role and not self.can_create_role(actor.role, new_role):
                return self._deny(NotCreatableError(actor.role.value, new_role.value), actor)

        if updated_triple is not None and not self._in_scope(actor, updated_triple):
            return self._deny(OrgScopeMismatchError("You cannot move users outside your own scope"), actor)

        return None

    # ─────────────────────────────────────────────────────────────────────
    # Helpers
    # ─────────────────────────────────────────────────────────────────────

    def _same_campus_scope(self, actor: ActorContext, college: str, institute: str) -> bool:
        if actor.college != college:
            return False
        if not self.catalog.requires_institute(actor.college):
            return True
        return actor.institute == institute

    def _in_scope(self, actor: ActorContext, triple: OrgTriple) -> bool:
        if actor.role is Role.SUPER_ADMIN:
            return True
        if actor.role in (Role.CAMPUS_ADMIN, Role.ADMIN):
            return self._same_campus_scope(actor, triple.college, triple.institute)
        return False

    @staticmethod
    def _deny(error: RoleError, actor: ActorContext) -> RoleError:
        logger.info("Denied %s for actor id=%s role=%s: %s", error.code, actor.id, actor.role.value, error.message)
        return error
