import os
import sys

import pytest

# Ensure repository root importable early
ROOT_DIR = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if ROOT_DIR not in sys.path:
    sys.path.insert(0, ROOT_DIR)

# In-memory database; must be set before the app module reads its config
os.environ.setdefault("DATABASE_URL", "sqlite://")

from wayfarer import create_app, db  # noqa: E402
from wayfarer.game import hooks  # noqa: E402
from wayfarer.server import _seed_game_config  # noqa: E402


@pytest.fixture(scope="session")
def test_app():
    app = create_app()
    app.config.update({"TESTING": True, "LOGIN_DISABLED": False})
    return app


@pytest.fixture(autouse=True)
def _push_app_context(test_app):
    ctx = test_app.app_context()
    ctx.push()
    try:
        yield
    finally:
        db.session.remove()
        ctx.pop()


def pytest_configure(config):  # register custom marker
    config.addinivalue_line("markers", "db_isolation: force per-test DB rebuild for this test")


@pytest.fixture(autouse=True)
def _conditional_db_isolation(request, test_app):
    """Recreate the schema only for tests marked with @pytest.mark.db_isolation."""
    if "db_isolation" in request.keywords:
        with test_app.app_context():
            db.drop_all()
            db.create_all()
            _seed_game_config()
    yield


@pytest.fixture(autouse=True)
def _clear_filters():
    yield
    hooks.clear_filters()


@pytest.fixture()
def client(test_app):
    return test_app.test_client()


@pytest.fixture()
def auth_client(client):
    from tests.factories import create_user

    create_user("tester", "pass")
    resp = client.post("/login", json={"username": "tester", "password": "pass"})
    assert resp.status_code == 200
    return client
