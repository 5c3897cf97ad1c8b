import pytest

from app.db import init_db
from app.settings import Settings


@pytest.fixture
def settings(tmp_path):
    settings = Settings(data_dir=tmp_path, db_path=tmp_path / "t.sqlite")
    init_db(settings)
    return settings


@pytest.fixture
def db_path(settings):
    return settings.db_path
