"""Load the organisation catalog artifact.

The artifact is a JSON document with the same shape as
``pubtrack.core.catalog.DEFAULT_CATALOG``::

    {
      "colleges": [...],
      "emailPolicy": {"perCollegeDomain": {...}, "researchAllowedDomains": [...], ...},
      "roleEdges": {"super_admin": [...], ...}
    }

It is read once at startup. Any structural problem raises ``CatalogError``
so the process refuses to start with a corrupt catalog.
"""
from __future__ import annotations
import json
import logging
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, Optional, Union

from pubtrack.core.catalog import DEFAULT_CATALOG, RESEARCH_INSTITUTE, EmailDomainPolicy, OrgCatalog
from pubtrack.core.exceptions import CatalogError
from pubtrack.core.roles import RoleEdgeTable

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class OrgConfig:
    """Everything the engine needs, loaded once."""
    catalog: OrgCatalog
    email_policy: EmailDomainPolicy
    role_edges: RoleEdgeTable

    def to_dict(self) -> dict:
        return {
            "colleges": self.catalog.to_dict(),
            "emailPolicy": self.email_policy.to_dict(),
            "roleEdges": self.role_edges.to_dict(),
        }


def build_org_config(data: dict[str, Any], research_institute: str = RESEARCH_INSTITUTE) -> OrgConfig:
    """Build and cross-check an ``OrgConfig`` from its dict form.

    Raises:
        CatalogError: If the data is malformed or inconsistent
    """
    if not isinstance(data, dict):
        raise CatalogError("Catalog artifact must be a JSON object")
    for key in ("colleges", "emailPolicy", "roleEdges"):
        if key not in data:
            raise CatalogError(f"Catalog artifact is missing '{key}'")

    catalog = OrgCatalog.from_dict(data["colleges"])
    email_policy = EmailDomainPolicy.from_dict(data["emailPolicy"], research_institute=research_institute)
    role_edges = RoleEdgeTable.from_dict(data["roleEdges"])

    if "researchColleges" not in data["emailPolicy"]:
        eligible = [
            college for college in catalog.colleges
            if email_policy.research_institute in catalog.institutes_of(college)
        ]
        email_policy = replace(email_policy, research_colleges=frozenset(eligible))
        logger.warning(
            "researchColleges not set; using colleges with a '%s' institute: %s",
            email_policy.research_institute, ", ".join(eligible) or "none",
        )

    unknown = [college for college in email_policy.per_college_domain if not catalog.is_known_college(college)]
    unknown += [college for college in email_policy.research_colleges if not catalog.is_known_college(college)]
    if unknown:
        raise CatalogError(f"Email policy references unknown colleges: {', '.join(sorted(set(unknown)))}")

    missing = [college for college in catalog.colleges if not email_policy.domain_for(college)]
    if missing:
        logger.warning("No email domain configured for: %s", ", ".join(missing))

    return OrgConfig(catalog, email_policy, role_edges)


def load_org_config(path: Optional[Union[str, Path]] = None, research_institute: str = RESEARCH_INSTITUTE) -> OrgConfig:
    """Load the catalog artifact at ``path``, or the bundled default."""
    if path is None:
        return build_org_config(DEFAULT_CATALOG, research_institute)

    path = Path(path)
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except OSError as exc:
        raise CatalogError(f"Cannot read catalog artifact {path}: {exc}") from exc
    except json.JSONDecodeError as exc:
        raise CatalogError(f"Catalog artifact {path} is not valid JSON: {exc}") from exc

    config = build_org_config(data, research_institute)
    logger.info("Loaded org catalog from %s (%d colleges)", path, len(config.catalog.colleges))
    return config
