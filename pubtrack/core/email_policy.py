"""Institutional email domain checks."""
from __future__ import annotations
import logging

from pubtrack.core.catalog import EmailDomainPolicy, OrgTriple
from pubtrack.core.exceptions import DomainNotAllowedError
from pubtrack.core.roles import Role, RoleLike, parse_role

logger = logging.getLogger(__name__)


def email_domain(email: str) -> str:
    """Lower-cased part after the last ``@`` (empty when there is none)."""
    if not email or "@" not in email:
        return ""
    return email.rsplit("@", 1)[1].strip().lower()


def allowed_domains(policy: EmailDomainPolicy, triple: OrgTriple) -> list[str]:
    """Domains accepted for a resolved triple, sorted for stable messages."""
    if policy.is_research(triple.college, triple.institute):
        return sorted(policy.research_allowed_domains)
    domain = policy.domain_for(triple.college)
    return [domain] if domain else []


def validate_email_domain(role: RoleLike, email: str, triple: OrgTriple, policy: EmailDomainPolicy) -> None:
    """Check ``email`` against the policy for the resolved org triple.

    super_admin is exempt. Research institute users of an eligible college
    may use any research domain; everyone else must use their college's
    domain.

    Raises:
        DomainNotAllowedError: If the domain is not accepted
    """
    if parse_role(role) is Role.SUPER_ADMIN:
        return

    domain = email_domain(email)
    expected = allowed_domains(policy, triple)
    if domain not in expected:
        logger.debug("Rejected email domain %r for %s / %s", domain, triple.college, triple.institute)
        raise DomainNotAllowedError(domain, expected)
