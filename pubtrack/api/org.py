"""Organisation lookup and user pre-check endpoints."""
from __future__ import annotations

from flask import Blueprint, abort, jsonify, request

from pubtrack.api.decorators import current_actor, current_engine, require_actor, require_any_role
from pubtrack.core.catalog import NA, OrgTriple
from pubtrack.core.org_validator import departments_for
from pubtrack.core.roles import Role

bp = Blueprint("org", __name__, url_prefix="/api")


@bp.get("/org/colleges")
@require_actor
def list_colleges():
    """Full college → institute → department catalog."""
    return jsonify({"success": True, "data": current_engine().org.catalog.to_dict()})


@bp.get("/org/departments")
@require_actor
def list_departments():
    """Departments for the given college/institute, or for the actor's own."""
    actor = current_actor()
    college = request.args.get("college") or actor.college
    institute = request.args.get("institute") or actor.institute
    return jsonify({"success": True, "data": departments_for(current_engine().org.catalog, college, institute)})


@bp.get("/org/roles")
@require_actor
def creatable_roles():
    """Roles the actor may create."""
    roles = current_engine().gate.creatable_roles(current_actor())
    return jsonify({"success": True, "data": [role.value for role in roles]})


@bp.post("/users/check")
@require_any_role(Role.SUPER_ADMIN, Role.CAMPUS_ADMIN, Role.ADMIN)
def check_user():
    """Authorize and validate a candidate user without writing it.

    Returns the normalised user; failures are rendered by the
    ``EngineError`` handler.
    """
    payload = request.get_json(silent=True)
    if not isinstance(payload, dict):
        abort(400, description="Request body must be a JSON object")

    engine = current_engine()
    actor = current_actor()
    triple = OrgTriple.from_values(payload.get("college"), payload.get("institute"), payload.get("department"))
    denied = engine.gate.authorize_create(actor, payload.get("role") or NA, triple)
    if denied is not None:
        raise denied

    result = engine.pipeline.process_record(payload)
    return jsonify({"success": True, "user": result.unwrap().to_dict()})
