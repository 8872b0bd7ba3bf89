"""
Pytest fixtures for the rebalancer test suite.

Provides:
- In-memory SQLite sessions for run ledger tests
- DeterministicClock and a seeded random source
- A small three-bucket configuration and a mixed inventory
"""

import random
from datetime import datetime, timezone

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

import rebalance_batch.models  # noqa: F401  registers ledger tables
from rebalance_config.schema import BatchCapacity, RebalanceConfig
from rebalance_kernel.db.base import Base
from rebalance_kernel.domain.clock import DeterministicClock
from rebalance_kernel.logging_config import LogContext, reset_logging

from tests.fakes import make_inventory


@pytest.fixture(autouse=True)
def _clean_logging():
    """Reset logging state between tests."""
    reset_logging()
    LogContext.clear()
    yield
    LogContext.clear()
    reset_logging()


@pytest.fixture
def engine():
    eng = create_engine("sqlite:///:memory:")
    Base.metadata.create_all(eng)
    return eng


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine)


@pytest.fixture
def db_session(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def clock():
    return DeterministicClock(
        fixed_time=datetime(2026, 2, 1, 12, 0, 0, tzinfo=timezone.utc),
    )


@pytest.fixture
def rng():
    return random.Random(1234)


@pytest.fixture
def config():
    return RebalanceConfig(
        source_buckets=("SRC1", "SRC2"),
        staging_buckets=("A", "B", "C"),
        bad_item_limit=10,
        batch_capacity=BatchCapacity(standard=3, archive=2),
        random_seed=42,
    )


@pytest.fixture
def mixed_inventory():
    return make_inventory()
