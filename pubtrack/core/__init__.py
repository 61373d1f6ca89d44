"""Core Business Logic Module

Organisational validation and role-based authorization for user
management, independent of HTTP frameworks.

Architecture:
    - Pure Python (no Flask dependencies)
    - Stateless: only the immutable catalog is shared between calls
    - Expected failures are typed ``EngineError`` values

Module Structure:
    - catalog.py        : OrgCatalog, EmailDomainPolicy, OrgTriple, bundled data
    - roles.py          : Role enum and role-edge table
    - role_defaults.py  : role-conditioned forcing of org fields
    - org_validator.py  : college → institute → department checks
    - email_policy.py   : institutional email domain checks
    - authorization.py  : create/modify/delete decisions
    - pipeline.py       : UserInvariantPipeline (all of the above, in order)
    - store.py          : in-memory store with unique indexes
    - bulk.py           : bulk provisioning of parsed rows
    - validators.py     : field-level normalisation
    - exceptions.py     : error taxonomy

Usage Pattern:
    Import explicitly when needed:
        from pubtrack.config import load_org_config
        from pubtrack.core.pipeline import UserInvariantPipeline
        from pubtrack.core.authorization import AuthorizationGate, UserRef
"""
