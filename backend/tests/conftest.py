import os
import tempfile
from pathlib import Path

import pytest

# Settings are read at import time, so point the app at a scratch database
# before any test module imports it.
_DB_DIR = Path(tempfile.mkdtemp(prefix="company-api-tests-"))
os.environ["ENV"] = "dev"
os.environ["DATABASE_URL"] = f"sqlite:///{_DB_DIR / 'test.db'}"

from fastapi.testclient import TestClient  # noqa: E402
from sqlmodel import SQLModel, Session  # noqa: E402

from company_api import models  # noqa: E402,F401
from company_api.database import engine  # noqa: E402


@pytest.fixture(autouse=True)
def reset_db():
    """Give every test an empty schema."""
    SQLModel.metadata.drop_all(engine)
    SQLModel.metadata.create_all(engine)
    yield


@pytest.fixture
def session():
    with Session(engine) as s:
        yield s


@pytest.fixture
def client():
    from company_api.main import app
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()
