"""College → institute → department validation.

Checks run in that order and stop at the first failure, so the reported
error is always the most specific one the user can act on.
"""
from __future__ import annotations
import logging

from pubtrack.core.catalog import NA, OrgCatalog, OrgTriple
from pubtrack.core.exceptions import (
    CollegeRequiredError,
    DepartmentRequiredError,
    InstituteRequiredError,
    InvalidCollegeError,
    InvalidDepartmentError,
    InvalidInstituteError,
)
from pubtrack.core.roles import DEPARTMENT_BOUND_ROLES, Role, RoleLike, parse_role

logger = logging.getLogger(__name__)


def validate_org_triple(role: RoleLike, triple: OrgTriple, catalog: OrgCatalog) -> OrgTriple:
    """Validate an (already defaulted) triple for ``role``.

    Args:
        role: Role of the user the triple belongs to
        triple: Output of ``apply_role_defaults``
        catalog: Organisation catalog

    Returns:
        The triple, with ``institute`` resolved to ``N/A`` for colleges
        without institutes

    Raises:
        OrgError: First failing check (college, then institute, then department)
    """
    role = parse_role(role)
    if role is Role.SUPER_ADMIN:
        return triple

    college = triple.college
    if college == NA:
        raise CollegeRequiredError()
    if not catalog.is_known_college(college):
        raise InvalidCollegeError(college)

    institute = triple.institute
    if catalog.requires_institute(college):
        if institute == NA:
            raise InstituteRequiredError(college)
        if institute not in catalog.institutes_of(college):
            raise InvalidInstituteError(college, institute)
    else:
        institute = NA

    if role in DEPARTMENT_BOUND_ROLES:
        department = triple.department
        if department == NA:
            raise DepartmentRequiredError(college, institute)
        if department not in catalog.departments_of(college, institute):
            raise InvalidDepartmentError(college, institute, department)

    resolved = OrgTriple(college, institute, triple.department)
    if resolved != triple:
        logger.debug("Resolved institute to N/A for college without institutes: %s", college)
    return resolved


def is_valid_department_selection(catalog: OrgCatalog, college: str, institute: str, department: str) -> bool:
    """True when ``department`` is a real (non-sentinel) entry for the pair."""
    if department == NA:
        return False
    return department in catalog.departments_of(college, institute)


def departments_for(catalog: OrgCatalog, college: str, institute: str = NA) -> list[str]:
    """Departments a user of ``college``/``institute`` can pick from.

    Org-less users (super_admin) get ``["N/A"]``.
    """
    if not college or college == NA:
        return [NA]
    return catalog.departments_of(college, institute)
