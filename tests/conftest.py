# tests/conftest.py
import pytest

from fakes import FakeBackend
from sweeply.db import init_models, make_engine, make_sessionmaker
from sweeply.store import Store


@pytest.fixture
async def store():
    engine = make_engine("sqlite+aiosqlite:///:memory:")
    await init_models(engine)
    yield Store(make_sessionmaker(engine))
    await engine.dispose()


@pytest.fixture
def backend():
    return FakeBackend()
