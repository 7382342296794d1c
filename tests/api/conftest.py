import logging
from datetime import timedelta

import jwt
import pytest
from fastapi.testclient import TestClient

from myfc.api.main import create_app
from myfc.config import load_config
from myfc.core.time_utils import utc_now
from myfc.db.database import Database

JWT_SECRET = "test-secret-at-least-32-chars-long-string"

logger = logging.getLogger("peewee")
logger.setLevel(logging.WARNING)


@pytest.fixture
def cfg(tmp_path):
    return load_config(
        runtime={"db_path": str(tmp_path / "test.db")},
        auth={"jwt_secret_key": JWT_SECRET},
    )


@pytest.fixture
def db(cfg):
    database = Database(cfg.runtime.db_path)
    database.migrate()

    yield database
    database.close()


@pytest.fixture
def app(cfg, db):
    return create_app(cfg, db)


@pytest.fixture
def client(app):
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def make_token():
    def _make(sub="user-1", *, expires_in=timedelta(hours=1), secret=JWT_SECRET, **claims):
        payload = {"exp": utc_now() + expires_in, "iat": utc_now(), **claims}
        if sub is not None:
            payload["sub"] = sub
        return jwt.encode(payload, secret, algorithm="HS256")

    return _make


@pytest.fixture
def auth_headers(make_token):
    def _headers(sub="user-1"):
        return {"Authorization": f"Bearer {make_token(sub)}"}

    return _headers
