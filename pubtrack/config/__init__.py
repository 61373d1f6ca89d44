"""Configuration module for the publication tracker."""
from .settings import AppConfig, load_settings
from .org import OrgConfig, build_org_config, load_org_config

__all__ = ["AppConfig", "load_settings", "OrgConfig", "build_org_config", "load_org_config"]
