"""Settings loader with environment variable and Docker secrets integration."""
from __future__ import annotations
import os
import secrets
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from pubtrack.core.catalog import RESEARCH_INSTITUTE

SECRETS_DIR = Path(os.environ.get("SECRETS_DIR", "/run/secrets"))


def _load_secret_from_file(secret_name: str, env_var: str | None = None) -> str | None:
    """
    Load secret from /run/secrets (Docker secrets pattern).

    Priority:
    1. /run/secrets/{secret_name} (Docker secrets mount)
    2. Environment variable (fallback)

    Args:
        secret_name: Name of the secret file in /run/secrets
        env_var: Optional environment variable name to check as fallback

    Returns:
        Secret value or None if not found
    """
    secret_file = SECRETS_DIR / secret_name

    if secret_file.exists() and secret_file.is_file():
        try:
            secret_value = secret_file.read_text().strip()
            if secret_value:
                print(f"[settings] ✓ Loaded {secret_name} from {SECRETS_DIR}")
                return secret_value
        except OSError as e:
            print(f"[settings] ✗ Failed to read {SECRETS_DIR}/{secret_name}: {e}")

    if env_var:
        secret_value = os.getenv(env_var)
        if secret_value:
            return secret_value

    return None


def _env_flag(name: str, default: str = "false") -> bool:
    return os.environ.get(name, default).strip().lower() == "true"


@dataclass
class AppConfig:
    """Application configuration container."""
    # Mode
    demo_mode: bool

    # Flask
    secret_key: str

    # Organisation catalog
    org_catalog_path: Optional[str] = None
    research_institute: str = RESEARCH_INSTITUTE
    strict_super_admin_faculty_id: bool = False

    # Logging
    log_level: str = "INFO"


def load_settings() -> AppConfig:
    """Load application settings from environment and /run/secrets."""
    demo_mode = _env_flag("DEMO_MODE")

    secret_key = _load_secret_from_file("flask_secret_key", "FLASK_SECRET_KEY")
    if not secret_key:
        if not demo_mode:
            raise RuntimeError("FLASK_SECRET_KEY not found in /run/secrets or environment")
        secret_key = secrets.token_urlsafe(48)
        os.environ["FLASK_SECRET_KEY"] = secret_key
        print("[demo-mode] Generated temporary FLASK_SECRET_KEY")

    org_catalog_path = os.environ.get("ORG_CATALOG_PATH", "").strip() or None
    research_institute = os.environ.get("RESEARCH_INSTITUTE_NAME", "").strip() or RESEARCH_INSTITUTE
    log_level = os.environ.get("LOG_LEVEL", "INFO").strip().upper() or "INFO"

    mode_label = "DEMO" if demo_mode else "PRODUCTION"
    catalog_label = org_catalog_path or "bundled"
    print(f"[settings] Mode={mode_label}; catalog={catalog_label}; log_level={log_level}")

    return AppConfig(
        demo_mode=demo_mode,
        secret_key=secret_key,
        org_catalog_path=org_catalog_path,
        research_institute=research_institute,
        strict_super_admin_faculty_id=_env_flag("STRICT_SUPER_ADMIN_FACULTY_ID"),
        log_level=log_level,
    )
