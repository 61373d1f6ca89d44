"""Error handlers for the application."""
from flask import jsonify
from werkzeug.exceptions import HTTPException

from pubtrack.core.exceptions import EngineError


def register_error_handlers(app):
    """Register error handlers with the Flask app."""

    @app.errorhandler(EngineError)
    def engine_error(error):
        """Render an expected validation/authorization outcome."""
        return jsonify(error.to_dict()), error.status

    @app.errorhandler(400)
    def bad_request(error):
        """Handle 400 Bad Request errors."""
        return jsonify({"error": "bad_request", "message": _description(error, "Bad Request")}), 400

    @app.errorhandler(401)
    def unauthorized(error):
        """Handle 401 Unauthorized errors."""
        return jsonify({"error": "unauthorized", "message": "Authentication required"}), 401

    @app.errorhandler(403)
    def forbidden(error):
        """Handle 403 Forbidden errors."""
        return jsonify({"error": "forbidden", "message": _description(error, "Insufficient permissions")}), 403

    @app.errorhandler(404)
    def not_found(error):
        """Handle 404 Not Found errors."""
        return jsonify({"error": "not_found", "message": "Resource not found"}), 404

    @app.errorhandler(405)
    def method_not_allowed(error):
        return jsonify({"error": "method_not_allowed", "message": "Method not allowed"}), 405

    @app.errorhandler(Exception)
    def handle_exception(error):
        """Handle uncaught exceptions."""
        # Pass through HTTP errors
        if isinstance(error, HTTPException):
            return error

        # ALWAYS log the full error (even in production) - logs are secure
        app.logger.error("Unhandled exception: %s", error, exc_info=True)

        body = {"error": "internal_error", "message": "An unexpected error occurred"}
        # SECURITY: Show details ONLY in debug/demo mode, never in production
        if app.debug or app.config.get("DEMO_MODE", False):
            body["detail"] = str(error)
        return jsonify(body), 500


def _description(error, default: str) -> str:
    description = getattr(error, "description", None)
    return str(description) if description else default
