import os

os.environ.setdefault("DB_BACKEND", "sqlite")

import pytest
from sqlalchemy import create_engine
from starlette.testclient import TestClient

from saypi.db import Database
from saypi.models import Base
from saypi.services.builtins import default_catalog
from saypi.services.cowsay import Renderer
from saypi.services.repository import Repository

TEST_SECRET = b"shhh"


@pytest.fixture
def database(tmp_path):
    db_path = tmp_path / "saypi.sqlite"
    engine = create_engine(
        f"sqlite:///{db_path}",
        connect_args={"check_same_thread": False},
    )
    Base.metadata.create_all(engine)
    database = Database(engine)
    try:
        yield database
    finally:
        database.dispose()


@pytest.fixture
def repository(database):
    return Repository(database, default_catalog())


@pytest.fixture
def renderer():
    return Renderer()


@pytest.fixture
def client(repository, renderer):
    from app.main import create_app

    app = create_app(repository=repository, renderer=renderer, user_secret=TEST_SECRET)
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def auth_headers(client):
    token = client.post("/users").json()["id"]
    return {"Authorization": f"Bearer {token}"}
