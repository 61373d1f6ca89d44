"""Input validation helpers for user data."""
from __future__ import annotations
import re
from typing import Any, Optional

from pubtrack.core.catalog import NA, OrgCatalog
from pubtrack.core.exceptions import InvalidEmailError, InvalidFieldError

EMAIL_MAX_LENGTH = 254
NAME_MAX_LENGTH = 128
FACULTY_ID_MAX_LENGTH = 32

SCOPUS_PATTERN = re.compile(r"^\d{10,11}$")
RESEARCHER_ID_PATTERN = re.compile(r"^[A-Z]-\d{4}-\d{4}$")
UNSAFE_CHARACTERS = "<>\"`;&|$"


def validate_email(email: Any) -> str:
    """Validate email address.

    Args:
        email: Email address to validate

    Returns:
        Normalized email address

    Raises:
        InvalidEmailError: If email is invalid
    """
    email = str(email or "").strip().lower()
    if not email or "@" not in email:
        raise InvalidEmailError()

    local, domain = email.rsplit("@", 1)
    if not local or not domain or "." not in domain:
        raise InvalidEmailError()
    if len(email) > EMAIL_MAX_LENGTH:
        raise InvalidEmailError("Email exceeds maximum length")

    return email


def validate_name(name: Any, field: str = "Full name") -> str:
    """Validate a display name.

    Returns:
        Trimmed name

    Raises:
        InvalidFieldError: If name is invalid
    """
    name = str(name or "").strip()
    if not name:
        raise InvalidFieldError(field, f"{field} is required")
    if len(name) > NAME_MAX_LENGTH:
        raise InvalidFieldError(field, f"{field} exceeds maximum length")

    # Prevent injection attacks
    if any(char in name for char in UNSAFE_CHARACTERS):
        raise InvalidFieldError(field, f"{field} contains invalid characters")

    return name


def normalize_faculty_id(raw: Any) -> str:
    """Trim a faculty id; blank values become ``N/A``.

    Raises:
        InvalidFieldError: If the id is too long or carries markup, shell
            metacharacters or control characters
    """
    value = str(raw or "").strip()
    if not value or value.upper() == NA:
        return NA
    if len(value) > FACULTY_ID_MAX_LENGTH:
        raise InvalidFieldError("facultyId", "Faculty ID exceeds maximum length")
    if any(char in UNSAFE_CHARACTERS or not char.isprintable() for char in value):
        raise InvalidFieldError("facultyId", "Faculty ID contains invalid characters")
    return value


def normalize_college_name(college: Any, catalog: OrgCatalog) -> str:
    """Match a college name case-insensitively against the catalog.

    Unknown or blank names become ``N/A``.
    """
    if not college or college == NA:
        return NA
    upper = str(college).strip().upper()
    for name in catalog.colleges:
        if name.upper() == upper:
            return name
    return NA


def validate_author_ids(author_ids: Optional[dict]) -> dict[str, Optional[str]]:
    """Validate publication-database author identifiers.

    Every problem is collected so the user sees them all at once.

    Returns:
        ``{"scopus", "sci", "webOfScience"}`` with blanks as None

    Raises:
        InvalidFieldError: If any identifier is malformed
    """
    author_ids = author_ids or {}
    cleaned = {
        key: (str(author_ids.get(key) or "").strip() or None)
        for key in ("scopus", "sci", "webOfScience")
    }

    errors = []
    if cleaned["scopus"] and not SCOPUS_PATTERN.match(cleaned["scopus"]):
        errors.append("Scopus Author ID must be 10-11 digits")
    if cleaned["sci"] and not RESEARCHER_ID_PATTERN.match(cleaned["sci"]):
        errors.append("SCI Author ID must be in format X-XXXX-XXXX")
    if cleaned["webOfScience"] and not RESEARCHER_ID_PATTERN.match(cleaned["webOfScience"]):
        errors.append("Web of Science ResearcherID must be in format X-XXXX-XXXX")

    if errors:
        raise InvalidFieldError("authorId", "Validation errors", errors)
    return cleaned
