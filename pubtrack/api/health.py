"""Health check endpoints."""
from flask import Blueprint, current_app

from pubtrack.api.decorators import EXTENSION_KEY

bp = Blueprint("health", __name__)


@bp.route("/health")
def health_check():
    """Basic health check endpoint."""
    return ("ok", 200, {"Content-Type": "text/plain"})


@bp.route("/ready")
def readiness_check():
    """Ready once the org catalog is loaded."""
    if EXTENSION_KEY not in current_app.extensions:
        return ("catalog not loaded", 503, {"Content-Type": "text/plain"})
    return ("ready", 200, {"Content-Type": "text/plain"})
