"""User records passed between the pipeline and the persistence layer."""
from __future__ import annotations
from dataclasses import asdict, dataclass, field
from typing import Optional

from pubtrack.core.catalog import NA, OrgTriple
from pubtrack.core.roles import Role


@dataclass(frozen=True)
class CandidateUser:
    """A normalised user ready to be written."""
    role: Role
    email: str
    triple: OrgTriple
    faculty_id: str = NA
    full_name: Optional[str] = None

    @property
    def college(self) -> str:
        return self.triple.college

    @property
    def institute(self) -> str:
        return self.triple.institute

    @property
    def department(self) -> str:
        return self.triple.department

    def to_dict(self) -> dict:
        data = {
            "role": self.role.value,
            "email": self.email,
            "facultyId": self.faculty_id,
            **self.triple.as_dict(),
        }
        if self.full_name is not None:
            data["fullName"] = self.full_name
        return data


@dataclass(frozen=True)
class UserRecord:
    """A stored user."""
    id: str
    user: CandidateUser
    created_by: Optional[str] = None
    author_ids: dict = field(default_factory=dict)

    def to_dict(self) -> dict:
        data = {"id": self.id, **self.user.to_dict()}
        if self.created_by is not None:
            data["createdBy"] = self.created_by
        if self.author_ids:
            data["authorId"] = dict(self.author_ids)
        return data

    def as_ref_record(self) -> dict:
        """Shape accepted by ``UserRef.from_record``."""
        return {"id": self.id, "role": self.user.role.value, **asdict(self.user.triple)}
