"""Pipeline test fixtures."""

import pytest

from platereduce.dispatch import resolve_pixel_type
from platereduce.reduce import WeightedAverage
from platereduce.schemas.internal import JobConfig
from tests.helpers.fake_plate import FakePlateStore
from tests.helpers.tiles import uniform_tile


@pytest.fixture
def fake_store():
    """Empty GrayA uint8 plate with 4 levels."""
    return FakePlateStore()


@pytest.fixture
def scenario_store(fake_store):
    """Two versions at (3, 3) level 2: (10, a=100) at t=10, (30, a=50) at t=20."""
    fake_store.add(uniform_tile([10], 100), col=3, row=3, level=2, transaction_id=10)
    fake_store.add(uniform_tile([30], 50), col=3, row=3, level=2, transaction_id=20)
    return fake_store


@pytest.fixture
def graya_u8():
    return resolve_pixel_type("graya", "uint8")


@pytest.fixture
def strategy():
    return WeightedAverage()


@pytest.fixture
def make_job():
    """Factory for JobConfig with single-job defaults."""
    def _make(**overrides):
        fields = dict(
            job_id=0,
            num_jobs=1,
            level=2,
            start_transaction_id=0,
            end_transaction_id=None,
            output_transaction_id=2000,
        )
        fields.update(overrides)
        return JobConfig(**fields)

    return _make
