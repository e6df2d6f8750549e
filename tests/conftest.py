import pytest
import pytest_asyncio
from fastapi.testclient import TestClient

from crowdscene.config import Settings
from crowdscene.database import create_engine, create_session_factory, init_models
from crowdscene.main import create_app
from crowdscene.services import DecayScorer, EventStore

HOUR_MS = 60 * 60 * 1000
TAU_MS = 2 * HOUR_MS


class FakeClock:
    """Manually advanced clock; callable like time.time / time.monotonic"""

    def __init__(self, start=1_700_000_000_000):
        self.now = start

    def __call__(self):
        return self.now

    def advance(self, amount):
        self.now += amount


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def rate_clock():
    return FakeClock(start=1000.0)


@pytest.fixture
def database_url(tmp_path):
    return f"sqlite+aiosqlite:///{tmp_path / 'crowdscene-test.db'}"


@pytest_asyncio.fixture
async def store(database_url, clock):
    engine = create_engine(database_url)
    await init_models(engine)
    yield EventStore(create_session_factory(engine), clock=clock)
    await engine.dispose()


@pytest.fixture
def scorer(store, clock):
    return DecayScorer(store, TAU_MS, clock=clock)


@pytest.fixture
def settings(database_url):
    return Settings(DATABASE_URL=database_url, GOOGLE_PLACES_API_KEY=None)


@pytest.fixture
def client(settings, clock, rate_clock):
    app = create_app(settings, clock=clock, rate_clock=rate_clock)
    with TestClient(app) as test_client:
        yield test_client
