"""Shared pytest fixtures."""

import pytest

from persistent_session.config import Config
from persistent_session.core.core import Core
from persistent_session.core.modules.identity.models import SessionContext
from persistent_session.core.modules.identity.transport import MemoryCookieTransport
from tests.fakes import FakeCollection, FakeDatabase

COLLECTION = "persistent_session"


@pytest.fixture
def config():
    """Create a config pointing at a test database."""
    return Config(database_url="mongodb://localhost:27017/test", _env_file=None)


@pytest.fixture
def database():
    return FakeDatabase()


@pytest.fixture
def collection(database) -> FakeCollection:
    return database.get_collection(COLLECTION)


@pytest.fixture
def core(config, database):
    return Core(config, database)


@pytest.fixture
def identity(core):
    return core.services.identity


@pytest.fixture
def record(core):
    return core.services.record


@pytest.fixture
def transport():
    """Cookie transport for a client that sent no cookies."""
    return MemoryCookieTransport()


@pytest.fixture
def ctx(transport):
    return SessionContext(transport=transport)
