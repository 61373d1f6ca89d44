"""Typed errors for organisational validation and authorization.

Every ``EngineError`` is an expected domain outcome. The pipeline returns
them inside a ``PipelineResult``; request handlers render them with
``to_dict()``. ``CatalogError`` and ``StoreUnavailableError`` are not
domain outcomes and always propagate.
"""
from __future__ import annotations
from typing import Any, Optional


class EngineError(Exception):
    """Base class for all expected validation/authorization outcomes.

    Attributes:
        code: Stable machine-readable identifier (e.g. ``invalid_college``)
        status: HTTP status a response formatter should use
        message: Human readable message
    """

    code = "engine_error"
    status = 400

    def __init__(self, message: str, **details: Any):
        self.message = message
        self.details = details
        super().__init__(message)

    def to_dict(self) -> dict:
        """Convert to the JSON error body used by the API layer."""
        body = {"error": self.code, "message": self.message}
        for key, value in self.details.items():
            if value is not None:
                body[key] = value
        return body


# ─────────────────────────────────────────────────────────────────────────────
# Organisation
# ─────────────────────────────────────────────────────────────────────────────

class OrgError(EngineError):
    """College/institute/department triple is not valid for the role."""
    code = "org_error"


class CollegeRequiredError(OrgError):
    code = "college_required"

    def __init__(self):
        super().__init__("College is required for this role")


class InvalidCollegeError(OrgError):
    code = "invalid_college"

    def __init__(self, college: str):
        super().__init__(f"Invalid college '{college}'", college=college)


class InstituteRequiredError(OrgError):
    code = "institute_required"

    def __init__(self, college: str):
        super().__init__(f"Institute is required for college '{college}'", college=college)


class InvalidInstituteError(OrgError):
    code = "invalid_institute"

    def __init__(self, college: str, institute: str):
        super().__init__(
            f"Invalid institute '{institute}' for '{college}'",
            college=college,
            institute=institute,
        )


class DepartmentRequiredError(OrgError):
    code = "department_required"

    def __init__(self, college: str, institute: Optional[str] = None):
        scope = institute if institute and institute != "N/A" else college
        super().__init__(f"Department is required for '{scope}'", college=college, institute=institute)


class InvalidDepartmentError(OrgError):
    code = "invalid_department"

    def __init__(self, college: str, institute: Optional[str], department: str):
        super().__init__(
            f"Invalid department '{department}'",
            college=college,
            institute=institute,
            department=department,
        )


# ─────────────────────────────────────────────────────────────────────────────
# Email
# ─────────────────────────────────────────────────────────────────────────────

class EmailError(EngineError):
    code = "email_error"


class DomainNotAllowedError(EmailError):
    """Email domain is not accepted for the resolved organisation.

    ``expected`` lists every domain that would have been accepted.
    """
    code = "domain_not_allowed"

    def __init__(self, domain: str, expected: list[str]):
        self.domain = domain
        self.expected = list(expected)
        super().__init__(
            f"Email domain '{domain}' is not allowed (must be one of: {', '.join(self.expected)})",
            domain=domain,
        )

    def to_dict(self) -> dict:
        body = super().to_dict()
        body["expected"] = list(self.expected)
        return body


class InvalidEmailError(EmailError):
    code = "invalid_email"

    def __init__(self, reason: str = "Invalid email format"):
        super().__init__(reason)


# ─────────────────────────────────────────────────────────────────────────────
# Roles / authorization
# ─────────────────────────────────────────────────────────────────────────────

class RoleError(EngineError):
    code = "role_error"
    status = 403


class UnknownRoleError(RoleError):
    code = "unknown_role"
    status = 400

    def __init__(self, role: str):
        super().__init__(f"Unknown role '{role}'", role=role)


class NotCreatableError(RoleError):
    code = "not_creatable"

    def __init__(self, creator: str, target: str):
        super().__init__(
            f"You are not allowed to create role '{target}'",
            creator=creator,
            target=target,
        )


class SelfModificationForbiddenError(RoleError):
    code = "self_modification_forbidden"

    def __init__(self):
        super().__init__("You cannot change your own account through user management")


class OrgScopeMismatchError(RoleError):
    code = "org_scope_mismatch"

    def __init__(self, message: str = "Target user is outside your organisation scope"):
        super().__init__(message)


# ─────────────────────────────────────────────────────────────────────────────
# Identity
# ─────────────────────────────────────────────────────────────────────────────

class IdentityError(EngineError):
    code = "identity_error"


class FacultyIdRequiredError(IdentityError):
    code = "faculty_id_required"

    def __init__(self, role: str):
        super().__init__(f"Faculty ID is required for role '{role}'", role=role)


class FacultyIdMustBeSentinelError(IdentityError):
    code = "faculty_id_must_be_na"

    def __init__(self, faculty_id: str):
        super().__init__("Faculty ID must be 'N/A' for super_admin", faculty_id=faculty_id)


class DuplicateFacultyIdError(IdentityError):
    code = "duplicate_faculty_id"
    status = 409

    def __init__(self, faculty_id: str):
        super().__init__(f"Faculty ID '{faculty_id}' already exists", faculty_id=faculty_id)


class DuplicateEmailError(IdentityError):
    code = "duplicate_email"
    status = 409

    def __init__(self, email: str):
        super().__init__(f"User with email '{email}' already exists", email=email)


class InvalidFieldError(IdentityError):
    """Free-form field failed normalisation (name, author ids)."""
    code = "invalid_field"

    def __init__(self, field: str, message: str, errors: Optional[list[str]] = None):
        self.errors = list(errors or [message])
        super().__init__(message, field=field)

    def to_dict(self) -> dict:
        body = super().to_dict()
        body["errors"] = list(self.errors)
        return body


# ─────────────────────────────────────────────────────────────────────────────
# Fatal (not domain outcomes)
# ─────────────────────────────────────────────────────────────────────────────

class CatalogError(Exception):
    """Catalog artifact is missing or malformed. Raised at startup."""
    pass


class StoreUnavailableError(Exception):
    """Persistence collaborator could not answer the advisory lookup."""
    pass
