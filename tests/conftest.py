import pytest
from fastapi.testclient import TestClient

from app.core.config import Settings
from app.db.dal import Database
from app.db.migrate import apply_migrations
from app.main import create_app
from app.services.currency import build_converter

from factories import OWNER


@pytest.fixture
def settings(tmp_path):
    s = Settings(data_dir=tmp_path, db_filename="test.sqlite3", debug=False)
    s.init_post_load()
    return s


@pytest.fixture
def converter(settings):
    return build_converter(settings)


@pytest.fixture
def db(settings):
    apply_migrations(settings.db_path)
    return Database(settings.db_path)


@pytest.fixture
def client(settings, db):
    app = create_app(settings_override=settings)
    return TestClient(app)


@pytest.fixture
def owner_headers():
    return {"X-Owner-Id": str(OWNER)}
