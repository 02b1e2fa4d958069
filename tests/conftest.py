import pytest

from atlas_lifecycle.core.polling import PollSettings
from fakes import FakeClient, FakeClock, FakeSession


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def settings(clock: FakeClock) -> PollSettings:
    return PollSettings(interval=5, sleep=clock.sleep, clock=clock)


@pytest.fixture
def client(clock: FakeClock) -> FakeClient:
    fake = FakeClient()
    fake.clock = clock
    return fake


@pytest.fixture
def session() -> FakeSession:
    return FakeSession()


ENV_KEYS = [
    "ATLAS_PROJECT_ID",
    "ATLAS_REGION_URL",
    "ATLAS_TOKEN",
    "ATLAS_CLIENT_ID",
    "ATLAS_CLIENT_SECRET",
    "ATLAS_TOKEN_URL",
    "ATLAS_AUDIENCE",
    "ATLAS_POLL_INTERVAL",
    "ATLAS_POLL_MAX_ATTEMPTS",
    "ATLAS_POLL_TIMEOUT",
    "ATLAS_REQUEST_TIMEOUT",
    "LOG_LEVEL",
]


@pytest.fixture
def clean_env(monkeypatch, tmp_path):
    """Empty Atlas environment in a scratch working directory."""
    # setenv first so that values loaded from .env are undone after the test
    for key in ENV_KEYS:
        monkeypatch.setenv(key, "")
        monkeypatch.delenv(key)
    monkeypatch.chdir(tmp_path)
    return monkeypatch
