import pytest

from devicewatch.core.logging import configure_logging
from devicewatch.database.connection import Database
from devicewatch.database.reading_store import ReadingStore

configure_logging("WARNING", json=False)


@pytest.fixture
def database():
    db = Database("sqlite:///:memory:")
    db.create_all()
    yield db
    db.close()


@pytest.fixture
def store(database):
    return ReadingStore(database)
