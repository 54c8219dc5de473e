from datetime import datetime, timezone

import pytest

from tests.fakes import FakeSupabase


@pytest.fixture
def client():
    return FakeSupabase()


@pytest.fixture
def now():
    return datetime(2026, 3, 1, 12, 0, 0, tzinfo=timezone.utc)
