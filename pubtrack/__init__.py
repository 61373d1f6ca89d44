"""Publication tracker: organisational validation and user authorization.

To use the Flask app:
    from pubtrack.flask_app import create_app

To use the engine without Flask:
    from pubtrack.config import load_org_config
    from pubtrack.core.pipeline import UserInvariantPipeline
"""
# Note: flask_app is not imported here so the engine stays usable from
# scripts and tests without Flask.
