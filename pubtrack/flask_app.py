"""Flask application factory and bootstrap.

This module provides the create_app() factory function for initializing
the Flask application with the org catalog, engine objects, blueprints
and error handlers.
"""
from __future__ import annotations
import logging
from typing import Optional

from flask import Flask
from werkzeug.middleware.proxy_fix import ProxyFix

from pubtrack.config import AppConfig, OrgConfig, load_org_config, load_settings
from pubtrack.core.authorization import AuthorizationGate
from pubtrack.core.pipeline import UserInvariantPipeline, UserStore
from pubtrack.core.store import InMemoryUserStore


# ─────────────────────────────────────────────────────────────────────────────
# Application Factory
# ─────────────────────────────────────────────────────────────────────────────
def create_app(
    cfg: Optional[AppConfig] = None,
    org: Optional[OrgConfig] = None,
    store: Optional[UserStore] = None,
) -> Flask:
    """Create and configure Flask application.

    The org catalog is loaded here, once; a corrupt catalog raises
    ``CatalogError`` and the app does not start.
    """
    cfg = cfg or load_settings()

    app = Flask(__name__)
    app.config["APP_CONFIG"] = cfg
    app.config["SECRET_KEY"] = cfg.secret_key
    app.config["DEMO_MODE"] = cfg.demo_mode
    app.config.setdefault("ACTOR_LOADER", None)

    _configure_logging(app, cfg.log_level)

    # Trust X-Forwarded-* headers from proxy (nginx)
    app.wsgi_app = ProxyFix(app.wsgi_app, x_for=1, x_proto=1, x_host=1)  # type: ignore

    org = org or load_org_config(cfg.org_catalog_path, research_institute=cfg.research_institute)
    store = store if store is not None else InMemoryUserStore()

    from pubtrack.api.decorators import EXTENSION_KEY, Engine
    app.extensions[EXTENSION_KEY] = Engine(
        org=org,
        gate=AuthorizationGate(org.catalog, org.role_edges),
        pipeline=UserInvariantPipeline(
            org.catalog,
            org.email_policy,
            store=store,
            strict_super_admin_faculty_id=cfg.strict_super_admin_faculty_id,
        ),
    )
    app.config["USER_STORE"] = store

    # Register blueprints
    from pubtrack.api import health, org as org_api
    app.register_blueprint(health.bp)
    app.register_blueprint(org_api.bp)

    # Register error handlers
    from pubtrack.api.errors import register_error_handlers
    register_error_handlers(app)

    app.logger.info("Org catalog ready: %d colleges", len(org.catalog.colleges))
    return app


def _configure_logging(app: Flask, level: str) -> None:
    numeric = logging.getLevelName(level)
    if not isinstance(numeric, int):
        numeric = logging.INFO
    app.logger.setLevel(numeric)
    logging.getLogger("pubtrack").setLevel(numeric)
