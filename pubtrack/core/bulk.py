"""Bulk user provisioning from already-parsed spreadsheet rows.

Each row goes through the same authorization gate and invariant pipeline
as a single create. A failing row is recorded and skipped; it never
aborts the batch. Row numbers are spreadsheet rows (the header is row 1).
"""
from __future__ import annotations
import logging
from dataclasses import dataclass, field
from typing import Any, Iterable, Mapping, Optional

from pubtrack.core.authorization import ActorContext, AuthorizationGate
from pubtrack.core.catalog import NA, OrgTriple
from pubtrack.core.models import UserRecord
from pubtrack.core.pipeline import UserInvariantPipeline, WritableUserStore
from pubtrack.core.roles import Role
from pubtrack.core.validators import normalize_college_name

logger = logging.getLogger(__name__)

FIRST_DATA_ROW = 2

# Accepted header spellings, compared after lower-casing and removing spaces.
_HEADER_ALIASES = {
    "email": ("email",),
    "full_name": ("fullname", "name"),
    "role": ("role",),
    "college": ("college",),
    "institute": ("institute",),
    "department": ("department",),
    "faculty_id": ("facultyid",),
}


@dataclass
class BulkSummary:
    total: int = 0
    success: int = 0
    failed: int = 0
    errors: list[str] = field(default_factory=list)
    created: list[UserRecord] = field(default_factory=list)

    def fail(self, row_no: int, message: str) -> None:
        self.failed += 1
        self.errors.append(f"Row {row_no}: {message}")

    def to_dict(self) -> dict:
        return {
            "success": not self.errors,
            "summary": {
                "total": self.total,
                "success": self.success,
                "failed": self.failed,
                "errors": list(self.errors),
            },
        }


def normalize_row(row: Mapping[str, Any]) -> dict[str, str]:
    """Map a raw row with loosely spelled headers onto canonical keys."""
    lowered = {str(key).replace(" ", "").lower(): value for key, value in row.items()}
    normalized = {}
    for key, aliases in _HEADER_ALIASES.items():
        value = ""
        for alias in aliases:
            candidate = lowered.get(alias)
            if candidate is not None and str(candidate).strip():
                value = str(candidate).strip()
                break
        normalized[key] = value
    return normalized


class BulkProvisioner:
    """Create many users for one actor."""

    def __init__(self, pipeline: UserInvariantPipeline, gate: AuthorizationGate, store: WritableUserStore):
        self.pipeline = pipeline
        self.gate = gate
        self.store = store

    def provision(
        self,
        actor: ActorContext,
        rows: Iterable[Mapping[str, Any]],
        default_role: Optional[str] = None,
    ) -> BulkSummary:
        summary = BulkSummary()
        seen_emails: set[str] = set()
        seen_faculty_ids: set[str] = set()

        for offset, raw in enumerate(rows):
            row_no = offset + FIRST_DATA_ROW
            summary.total += 1
            row = normalize_row(raw)

            role = (row["role"] or default_role or "").lower()
            if actor.role is Role.CAMPUS_ADMIN:
                role = Role.FACULTY.value
            if not row["email"] or not row["full_name"]:
                summary.fail(row_no, "Missing email or fullName")
                continue
            if not role:
                summary.fail(row_no, "Role is required")
                continue

            triple = self._row_triple(actor, row)
            denied = self.gate.authorize_create(actor, role, triple)
            if denied is not None:
                summary.fail(row_no, denied.message)
                continue

            email_key = row["email"].lower()
            if email_key and email_key in seen_emails:
                summary.fail(row_no, f"Duplicate email '{row['email']}' in uploaded file")
                continue
            if email_key:
                seen_emails.add(email_key)

            faculty_key = row["faculty_id"].lower()
            if faculty_key and faculty_key in seen_faculty_ids:
                summary.fail(row_no, f"Duplicate facultyId '{row['faculty_id']}' in uploaded file")
                continue
            if faculty_key:
                seen_faculty_ids.add(faculty_key)

            result = self.pipeline.process(
                role,
                triple,
                row["email"],
                row["faculty_id"] or NA,
                full_name=row["full_name"],
            )
            result = self.pipeline.commit(result, self.store, created_by=actor.id)
            if not result.ok:
                summary.fail(row_no, result.error.message)
                continue

            summary.success += 1
            summary.created.append(result.record)

        logger.info(
            "Bulk provisioning by %s: %d total, %d created, %d failed",
            actor.id, summary.total, summary.success, summary.failed,
        )
        return summary

    def _row_triple(self, actor: ActorContext, row: dict[str, str]) -> OrgTriple:
        """Org triple for a row; non super_admin actors are pinned to their own college/institute."""
        if actor.role is Role.SUPER_ADMIN:
            college = normalize_college_name(row["college"], self.gate.catalog)
            return OrgTriple.from_values(college, row["institute"], row["department"])
        return OrgTriple.from_values(actor.college, actor.institute, row["department"])
