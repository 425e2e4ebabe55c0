import os
from datetime import UTC, datetime

import pytest

from tests.factories import WARMUP, FakeClock


@pytest.fixture
def clock():
    return FakeClock(datetime(2025, 10, 16, 19, 0, tzinfo=UTC))


@pytest.fixture
def warmup():
    return WARMUP


@pytest.fixture(autouse=True)
def _no_env_overrides(monkeypatch):
    """Engines built without settings read the environment; keep it clean."""
    for name in [n for n in os.environ if n.startswith("SESSIONLINK_")]:
        monkeypatch.delenv(name)
