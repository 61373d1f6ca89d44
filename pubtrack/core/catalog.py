"""Organisation catalog and email domain policy.

Both objects are immutable and built once at startup, either from the
bundled ``DEFAULT_CATALOG`` or from a JSON artifact (see
``pubtrack.config.org``). Lookups never raise: an unknown college or
institute yields an empty collection and callers decide what "empty"
means in their context.
"""
from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Iterable, Optional

from pubtrack.core.exceptions import CatalogError

NA = "N/A"
RESEARCH_INSTITUTE = "SRM RESEARCH"


@dataclass(frozen=True)
class OrgTriple:
    """(college, institute, department) attached to a user."""
    college: str = NA
    institute: str = NA
    department: str = NA

    @classmethod
    def empty(cls) -> "OrgTriple":
        return cls(NA, NA, NA)

    @classmethod
    def from_values(cls, college: Any = None, institute: Any = None, department: Any = None) -> "OrgTriple":
        """Build a triple from raw request values; blanks become ``N/A``."""
        return cls(_field(college), _field(institute), _field(department))

    def as_dict(self) -> dict[str, str]:
        return {"college": self.college, "institute": self.institute, "department": self.department}


def _field(value: Any) -> str:
    if value is None:
        return NA
    text = str(value).strip()
    return text or NA


@dataclass(frozen=True)
class InstituteEntry:
    name: str
    departments: tuple[str, ...]


@dataclass(frozen=True)
class OrgCatalogEntry:
    name: str
    has_institutes: bool
    institutes: Optional[tuple[InstituteEntry, ...]] = None
    departments: Optional[tuple[str, ...]] = None

    def institute(self, name: str) -> Optional[InstituteEntry]:
        for entry in self.institutes or ():
            if entry.name == name:
                return entry
        return None


@dataclass(frozen=True)
class OrgCatalog:
    """Read-only college → institute → department lookup."""
    entries: tuple[OrgCatalogEntry, ...]
    _index: dict = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        object.__setattr__(self, "_index", {entry.name: entry for entry in self.entries})

    @classmethod
    def from_dict(cls, colleges: Iterable[dict]) -> "OrgCatalog":
        """Build a catalog from the JSON/dict representation.

        Raises:
            CatalogError: If the data is structurally invalid
        """
        if not isinstance(colleges, list):
            raise CatalogError("colleges must be a list")
        entries = []
        seen: set[str] = set()
        for raw in colleges:
            if not isinstance(raw, dict):
                raise CatalogError(f"College entry must be an object, got {type(raw).__name__}")
            name = _catalog_name(raw.get("name"), "college")
            if name in seen:
                raise CatalogError(f"Duplicate college '{name}'")
            seen.add(name)

            has_institutes = bool(raw.get("hasInstitutes", False))
            if has_institutes:
                if raw.get("departments"):
                    raise CatalogError(f"College '{name}' has institutes and must not list departments")
                institutes = []
                for inst in raw.get("institutes") or []:
                    if not isinstance(inst, dict):
                        raise CatalogError(
                            f"Institute entry of '{name}' must be an object, got {type(inst).__name__}"
                        )
                    inst_name = _catalog_name(inst.get("name"), "institute")
                    departments = _catalog_names(inst.get("departments"), f"departments of '{inst_name}'")
                    institutes.append(InstituteEntry(inst_name, departments))
                if not institutes:
                    raise CatalogError(f"College '{name}' declares institutes but lists none")
                entries.append(OrgCatalogEntry(name, True, institutes=tuple(institutes)))
            else:
                if raw.get("institutes"):
                    raise CatalogError(f"College '{name}' has no institutes but lists some")
                departments = _catalog_names(raw.get("departments"), f"departments of '{name}'")
                entries.append(OrgCatalogEntry(name, False, departments=departments))
        return cls(tuple(entries))

    @property
    def colleges(self) -> list[str]:
        return [entry.name for entry in self.entries]

    def get(self, college: str) -> Optional[OrgCatalogEntry]:
        return self._index.get(college)

    def is_known_college(self, college: str) -> bool:
        return college in self._index

    def requires_institute(self, college: str) -> bool:
        entry = self._index.get(college)
        return bool(entry and entry.has_institutes)

    def institutes_of(self, college: str) -> list[str]:
        entry = self._index.get(college)
        if not entry or not entry.has_institutes:
            return []
        return [inst.name for inst in entry.institutes]

    def departments_of(self, college: str, institute: Optional[str] = None) -> list[str]:
        """Departments for a college, or for an institute of a college that has them."""
        entry = self._index.get(college)
        if not entry:
            return []
        if not entry.has_institutes:
            return list(entry.departments)
        if not institute:
            return []
        inst = entry.institute(institute)
        return list(inst.departments) if inst else []

    def all_departments_in(self, college: str) -> list[str]:
        """Every department of a college, across its institutes, de-duplicated in order."""
        entry = self._index.get(college)
        if not entry:
            return []
        if not entry.has_institutes:
            return list(entry.departments)
        return _unique(dep for inst in entry.institutes for dep in inst.departments)

    def institute_names(self) -> list[str]:
        return _unique(inst.name for entry in self.entries if entry.has_institutes for inst in entry.institutes)

    def department_names(self) -> list[str]:
        return _unique(dep for entry in self.entries for dep in self.all_departments_in(entry.name))

    def to_dict(self) -> list[dict]:
        colleges = []
        for entry in self.entries:
            if entry.has_institutes:
                colleges.append({
                    "name": entry.name,
                    "hasInstitutes": True,
                    "institutes": [
                        {"name": inst.name, "departments": list(inst.departments)}
                        for inst in entry.institutes
                    ],
                })
            else:
                colleges.append({
                    "name": entry.name,
                    "hasInstitutes": False,
                    "departments": list(entry.departments),
                })
        return colleges


@dataclass(frozen=True)
class EmailDomainPolicy:
    """Allowed email domains per college, plus the research allow-list.

    Users of ``research_institute`` inside one of ``research_colleges`` may
    use any domain in ``research_allowed_domains``; everyone else must use
    their college's single domain.
    """
    per_college_domain: dict[str, str]
    research_allowed_domains: frozenset[str]
    research_institute: str = RESEARCH_INSTITUTE
    research_colleges: frozenset[str] = frozenset()

    @classmethod
    def from_dict(cls, data: dict, research_institute: str = RESEARCH_INSTITUTE) -> "EmailDomainPolicy":
        if not isinstance(data, dict):
            raise CatalogError("emailPolicy must be an object")
        domains = data.get("perCollegeDomain") or {}
        if not isinstance(domains, dict):
            raise CatalogError("perCollegeDomain must be an object")
        return cls(
            per_college_domain={str(k): str(v).lower() for k, v in domains.items()},
            research_allowed_domains=frozenset(str(d).lower() for d in data.get("researchAllowedDomains") or []),
            research_institute=data.get("researchInstitute") or research_institute,
            research_colleges=frozenset(data.get("researchColleges") or []),
        )

    def domain_for(self, college: str) -> Optional[str]:
        return self.per_college_domain.get(college)

    def is_research(self, college: str, institute: str) -> bool:
        return institute == self.research_institute and college in self.research_colleges

    def to_dict(self) -> dict:
        return {
            "perCollegeDomain": dict(self.per_college_domain),
            "researchAllowedDomains": sorted(self.research_allowed_domains),
            "researchInstitute": self.research_institute,
            "researchColleges": sorted(self.research_colleges),
        }


def _catalog_name(value: Any, kind: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise CatalogError(f"Every {kind} needs a non-empty name")
    name = value.strip()
    if name == NA:
        raise CatalogError(f"'{NA}' is reserved and cannot be used as a {kind} name")
    return name


def _catalog_names(values: Any, kind: str) -> tuple[str, ...]:
    if not isinstance(values, list) or not values:
        raise CatalogError(f"Missing {kind}")
    names = [_catalog_name(value, "department") for value in values]
    if len(set(names)) != len(names):
        raise CatalogError(f"Duplicate entries in {kind}")
    return tuple(names)


def _unique(values: Iterable[str]) -> list[str]:
    seen: dict[str, None] = {}
    for value in values:
        seen.setdefault(value, None)
    return list(seen)


# ─────────────────────────────────────────────────────────────────────────────
# Bundled catalog
# ─────────────────────────────────────────────────────────────────────────────

_ENGINEERING_DEPARTMENTS = ["Computer Science", "Information Technology", "Electronics", "Mechanical", "Civil"]
_SCIENCE_DEPARTMENTS = ["Mathematics", "Physics", "Chemistry", "English"]

DEFAULT_CATALOG: dict[str, Any] = {
    "colleges": [
        {
            "name": "SRMIST RAMAPURAM",
            "hasInstitutes": True,
            "institutes": [
                {"name": "Science and Humanities", "departments": _SCIENCE_DEPARTMENTS},
                {"name": "Engineering and Technology", "departments": _ENGINEERING_DEPARTMENTS},
                {"name": "Management", "departments": ["Business Administration", "Commerce"]},
                {"name": "Dental", "departments": ["General Dentistry", "Orthodontics"]},
                {"name": RESEARCH_INSTITUTE, "departments": ["Ramapuram Research"]},
            ],
        },
        {
            "name": "SRM TRICHY",
            "hasInstitutes": True,
            "institutes": [
                {"name": "Science and Humanities", "departments": _SCIENCE_DEPARTMENTS},
                {"name": "Engineering and Technology", "departments": _ENGINEERING_DEPARTMENTS},
                {"name": RESEARCH_INSTITUTE, "departments": ["Trichy Research"]},
            ],
        },
        {
            "name": "EASWARI ENGINEERING COLLEGE",
            "hasInstitutes": False,
            "departments": _ENGINEERING_DEPARTMENTS,
        },
        {
            "name": "TRP ENGINEERING COLLEGE",
            "hasInstitutes": False,
            "departments": _ENGINEERING_DEPARTMENTS,
        },
    ],
    "emailPolicy": {
        "perCollegeDomain": {
            "SRMIST RAMAPURAM": "srmist.edu.in",
            "SRM TRICHY": "srmtrichy.edu.in",
            "EASWARI ENGINEERING COLLEGE": "eec.srmrmp.edu.in",
            "TRP ENGINEERING COLLEGE": "trp.srmtrichy.edu.in",
        },
        "researchAllowedDomains": [
            "srmist.edu.in",
            "srmtrichy.edu.in",
            "eec.srmrmp.edu.in",
            "trp.srmtrichy.edu.in",
        ],
        "researchInstitute": RESEARCH_INSTITUTE,
        "researchColleges": ["SRMIST RAMAPURAM", "SRM TRICHY"],
    },
    "roleEdges": {
        "super_admin": ["campus_admin", "admin", "faculty"],
        "campus_admin": ["admin", "faculty"],
        "admin": ["faculty"],
        "faculty": [],
    },
}
