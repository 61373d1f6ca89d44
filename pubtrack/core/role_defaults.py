"""Role-conditioned forcing of organisational fields.

Runs before ``org_validator`` so that forced fields never produce
validation errors. The input triple is never mutated; a new one is
returned.
"""
from __future__ import annotations
from dataclasses import replace

from pubtrack.core.catalog import NA, OrgCatalog, OrgTriple
from pubtrack.core.roles import Role, RoleLike, parse_role


def apply_role_defaults(role: RoleLike, triple: OrgTriple, catalog: OrgCatalog) -> OrgTriple:
    """Return ``triple`` with the fields ``role`` does not use forced to ``N/A``.

    - super_admin: every field is ``N/A`` whatever was submitted
    - campus_admin: department is ``N/A``; institute is ``N/A`` when the
      college has no institutes, otherwise left for validation
    - admin / faculty: unchanged

    Raises:
        UnknownRoleError: If ``role`` is not a known role
    """
    role = parse_role(role)

    if role is Role.SUPER_ADMIN:
        return OrgTriple.empty()

    if role is Role.CAMPUS_ADMIN:
        institute = triple.institute if catalog.requires_institute(triple.college) else NA
        return replace(triple, institute=institute, department=NA)

    return triple
