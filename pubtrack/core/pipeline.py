"""User invariant pipeline.

One entry point that turns raw create/update input into a normalised
``CandidateUser`` or the first failing error:

    role defaults ──> org triple ──> email ──> faculty id ──> name ──> uniqueness

Each stage raises an ``EngineError``; ``process`` stops at the first one
and returns it inside a ``PipelineResult``. The uniqueness stage is an
advisory read: the store's unique indexes are authoritative, and a
conflicting write is reported by ``commit`` as the same duplicate error.
"""
from __future__ import annotations
import logging
from dataclasses import dataclass, replace
from typing import Any, Optional, Protocol

from pubtrack.core.catalog import NA, EmailDomainPolicy, OrgCatalog, OrgTriple
from pubtrack.core.email_policy import validate_email_domain
from pubtrack.core.exceptions import (
    DuplicateEmailError,
    DuplicateFacultyIdError,
    EngineError,
    FacultyIdMustBeSentinelError,
    FacultyIdRequiredError,
    StoreUnavailableError,
)
from pubtrack.core.models import CandidateUser, UserRecord
from pubtrack.core.org_validator import validate_org_triple
from pubtrack.core.role_defaults import apply_role_defaults
from pubtrack.core.roles import Role, RoleLike, parse_role
from pubtrack.core.validators import normalize_faculty_id, validate_author_ids, validate_email, validate_name

logger = logging.getLogger(__name__)


class UserStore(Protocol):
    """Read side of the persistence collaborator used for advisory checks."""

    def email_exists(self, email: str, exclude_id: Optional[str] = None) -> bool: ...

    def faculty_id_exists(self, faculty_id: str, exclude_id: Optional[str] = None) -> bool: ...


class WritableUserStore(UserStore, Protocol):
    def insert(self, user: CandidateUser, created_by: Optional[str] = None) -> UserRecord: ...

    def update(self, user_id: str, user: CandidateUser) -> UserRecord: ...


@dataclass(frozen=True)
class PipelineResult:
    """Outcome of ``process``/``commit``: a user or the first error."""
    user: Optional[CandidateUser] = None
    error: Optional[EngineError] = None
    stage: Optional[str] = None
    record: Optional[UserRecord] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> CandidateUser:
        """Return the user or raise the error (for exception-based callers)."""
        if self.error is not None:
            raise self.error
        return self.user


class UserInvariantPipeline:
    """Validate and normalise user input for create/update.

    Args:
        catalog: Organisation catalog
        email_policy: Email domain policy
        store: Optional store for the advisory uniqueness stage
        strict_super_admin_faculty_id: Reject a real faculty id submitted
            for a super_admin instead of forcing it to ``N/A``
    """

    def __init__(
        self,
        catalog: OrgCatalog,
        email_policy: EmailDomainPolicy,
        store: Optional[UserStore] = None,
        strict_super_admin_faculty_id: bool = False,
    ):
        self.catalog = catalog
        self.email_policy = email_policy
        self.store = store
        self.strict_super_admin_faculty_id = strict_super_admin_faculty_id

    def process(
        self,
        role: RoleLike,
        triple: OrgTriple,
        email: Any,
        faculty_id: Any = NA,
        full_name: Any = None,
        exclude_id: Optional[str] = None,
    ) -> PipelineResult:
        """Run every stage in order; the first failure wins.

        Args:
            exclude_id: Id of the user being updated, so its own email and
                faculty id do not count as duplicates

        Raises:
            StoreUnavailableError: If the advisory lookup cannot be answered
        """
        stage = "role"
        try:
            role = parse_role(role)

            stage = "org"
            triple = apply_role_defaults(role, triple, self.catalog)
            triple = validate_org_triple(role, triple, self.catalog)

            stage = "email"
            email = validate_email(email)
            validate_email_domain(role, email, triple, self.email_policy)

            stage = "faculty_id"
            faculty_id = self._resolve_faculty_id(role, faculty_id)

            stage = "name"
            if full_name is not None:
                full_name = validate_name(full_name)

            stage = "uniqueness"
            self._check_unique(email, faculty_id, exclude_id)
        except EngineError as error:
            logger.debug("Pipeline stopped at %s: %s", stage, error.code)
            return PipelineResult(error=error, stage=stage)

        user = CandidateUser(role=role, email=email, triple=triple, faculty_id=faculty_id, full_name=full_name)
        return PipelineResult(user=user)

    def process_record(self, data: dict, exclude_id: Optional[str] = None) -> PipelineResult:
        """``process`` for a request payload using the API field names."""
        triple = OrgTriple.from_values(data.get("college"), data.get("institute"), data.get("department"))
        return self.process(
            data.get("role"),
            triple,
            data.get("email"),
            data.get("facultyId", NA),
            full_name=data.get("fullName"),
            exclude_id=exclude_id,
        )

    def commit(
        self,
        result: PipelineResult,
        store: WritableUserStore,
        created_by: Optional[str] = None,
        user_id: Optional[str] = None,
    ) -> PipelineResult:
        """Write a successful result; a unique-index conflict becomes the result's error."""
        if not result.ok:
            return result
        try:
            if user_id is None:
                record = store.insert(result.user, created_by=created_by)
            else:
                record = store.update(user_id, result.user)
        except (DuplicateEmailError, DuplicateFacultyIdError) as error:
            logger.info("Write rejected by unique index: %s", error.code)
            return PipelineResult(error=error, stage="write")
        return replace(result, record=record)

    def _resolve_faculty_id(self, role: Role, raw: Any) -> str:
        if role is Role.SUPER_ADMIN:
            submitted = str(raw or "").strip()
            if self.strict_super_admin_faculty_id and submitted and submitted.upper() != NA:
                raise FacultyIdMustBeSentinelError(submitted)
            return NA
        faculty_id = normalize_faculty_id(raw)
        if faculty_id == NA:
            raise FacultyIdRequiredError(role.value)
        return faculty_id

    def _check_unique(self, email: str, faculty_id: str, exclude_id: Optional[str]) -> None:
        if self.store is None:
            return
        try:
            email_taken = self.store.email_exists(email, exclude_id)
            faculty_id_taken = faculty_id != NA and self.store.faculty_id_exists(faculty_id, exclude_id)
        except StoreUnavailableError:
            raise
        except Exception as exc:
            raise StoreUnavailableError(f"Uniqueness lookup failed: {exc}") from exc
        if email_taken:
            raise DuplicateEmailError(email)
        if faculty_id_taken:
            raise DuplicateFacultyIdError(faculty_id)


def apply_profile_edit(record: UserRecord, full_name: Any = None, author_ids: Optional[dict] = None) -> UserRecord:
    """Self-service profile edit. Only touches name and author ids, never org fields.

    Raises:
        InvalidFieldError: If the name or an author id is malformed
    """
    user = record.user
    if full_name is not None:
        user = replace(user, full_name=validate_name(full_name))
    ids = record.author_ids
    if author_ids is not None:
        ids = validate_author_ids(author_ids)
    return replace(record, user=user, author_ids=ids)
