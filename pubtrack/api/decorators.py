"""
Flask helpers for the acting user and the engine objects.

Authentication happens upstream. A loader stored in
``app.config["ACTOR_LOADER"]`` receives the request and returns verified
claims (``userId``/``sub``, ``role``, ``college``, ``institute``,
``department``) or None. Token formats and verification are not handled
here.
"""
import logging
from dataclasses import dataclass
from functools import wraps
from typing import Optional

from flask import abort, current_app, g, request

from pubtrack.config import OrgConfig
from pubtrack.core.authorization import ActorContext, AuthorizationGate, actor_from_claims
from pubtrack.core.exceptions import UnknownRoleError
from pubtrack.core.pipeline import UserInvariantPipeline

logger = logging.getLogger(__name__)

EXTENSION_KEY = "pubtrack"


@dataclass(frozen=True)
class Engine:
    """Engine objects shared by every request (immutable after startup)."""
    org: OrgConfig
    gate: AuthorizationGate
    pipeline: UserInvariantPipeline


def current_engine() -> Engine:
    return current_app.extensions[EXTENSION_KEY]


def current_actor() -> Optional[ActorContext]:
    """Resolve (once per request) the acting user from the configured loader."""
    if "actor" in g:
        return g.actor

    actor = None
    loader = current_app.config.get("ACTOR_LOADER")
    claims = loader(request) if loader else None
    if claims:
        try:
            actor = actor_from_claims(claims)
        except UnknownRoleError:
            logger.warning("Rejected claims with unknown role %r", claims.get("role"))
            actor = None
    g.actor = actor
    return actor


def require_actor(fn):
    """Require an authenticated actor; 401 otherwise."""
    @wraps(fn)
    def wrapper(*args, **kwargs):
        if current_actor() is None:
            abort(401)
        return fn(*args, **kwargs)
    return wrapper


def require_any_role(*required_roles):
    """Decorator to require any of the specified roles."""
    allowed = {str(role) for role in required_roles}

    def decorator(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            actor = current_actor()
            if actor is None:
                abort(401)
            if actor.role.value not in allowed:
                abort(403, description=f"Required role: {', '.join(sorted(allowed))}")
            return fn(*args, **kwargs)
        return wrapper
    return decorator
