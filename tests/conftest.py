"""Pytest shared fixtures."""
import os
import pathlib
import sys

# Add project root to Python path
ROOT = pathlib.Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

# Configure test environment BEFORE any app imports
os.environ.setdefault("DEMO_MODE", "true")

import pytest

from pubtrack.config import load_org_config
from pubtrack.config.settings import AppConfig
from pubtrack.core.authorization import AuthorizationGate, UserRef
from pubtrack.core.catalog import NA
from pubtrack.core.pipeline import UserInvariantPipeline
from pubtrack.core.roles import Role
from pubtrack.core.store import InMemoryUserStore
from pubtrack.flask_app import create_app


@pytest.fixture(scope="session")
def org():
    return load_org_config()


@pytest.fixture(scope="session")
def catalog(org):
    return org.catalog


@pytest.fixture(scope="session")
def policy(org):
    return org.email_policy


@pytest.fixture()
def gate(org):
    return AuthorizationGate(org.catalog, org.role_edges)


@pytest.fixture()
def store():
    return InMemoryUserStore()


@pytest.fixture()
def pipeline(org, store):
    return UserInvariantPipeline(org.catalog, org.email_policy, store=store)


def _make_user(user_id, role, college=NA, institute=NA, department=NA):
    return UserRef(id=user_id, role=Role(role), college=college, institute=institute, department=department)


@pytest.fixture()
def make_user():
    """Factory for ``UserRef`` actors and targets."""
    return _make_user


@pytest.fixture()
def app_config():
    return AppConfig(demo_mode=True, secret_key="test-secret")


@pytest.fixture()
def actor_claims():
    """Mutable claims returned by the test actor loader; set to None for anonymous."""
    return {"value": None}


@pytest.fixture()
def app(app_config, org, store, actor_claims):
    app = create_app(app_config, org=org, store=store)
    app.config["TESTING"] = True
    app.config["ACTOR_LOADER"] = lambda request: actor_claims["value"]
    return app


@pytest.fixture()
def client(app):
    with app.test_client() as client:
        yield client
