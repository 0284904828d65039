"""
Pytest fixtures for the payroll kernel test suite.

Provides:
- An in-memory SQLite database per test (tables created, state row seeded)
- A DeterministicClock shared by the engine and the tests
- Fake collaborators (stable token, native wallet, price feed, router, unwrapper)
- A fully wired PayrollEngine
- Captured structured logs

Environment Variables:
- DATABASE_URL: optional SQLAlchemy URL.  Defaults to in-memory SQLite.
"""

import json
import logging
import os
from datetime import datetime, timezone
from io import StringIO

import pytest

from payroll_kernel.config import PayrollConfig
from payroll_kernel.db.engine import (
    create_tables,
    drop_tables,
    get_session_factory,
    init_engine_from_url,
    reset_engine,
)
from payroll_kernel.domain.clock import DeterministicClock
from payroll_kernel.domain.events import InMemoryEventSink
from payroll_kernel.logging_config import (
    LogContext,
    StructuredFormatter,
    configure_logging,
    reset_logging,
)
from payroll_kernel.services.payroll_engine import PayrollEngine
from tests.fakes import (
    FakeNativeWallet,
    FakePriceFeed,
    FakeStableToken,
    FakeSwapRouter,
    FakeUnwrapper,
)

HR = "0x00000000000000000000000000000000000000a1"
TREASURY = "0x00000000000000000000000000000000000000b2"
USDC = "0x00000000000000000000000000000000000000c3"
WETH = "0x00000000000000000000000000000000000000d4"
ALICE = "0x000000000000000000000000000000000000a11c"
BOB = "0x0000000000000000000000000000000000000b0b"
MALLORY = "0x00000000000000000000000000000000000bad00"

ONE_DAY = 24 * 60 * 60
WEEKLY_RATE = 1000 * 10**18

START_TIME = datetime(2024, 1, 1, 12, 0, 0, tzinfo=timezone.utc)


# =============================================================================
# Logging fixtures
# =============================================================================


@pytest.fixture(autouse=True, scope="session")
def _configure_test_logging():
    """Configure structured logging for the test suite."""
    reset_logging()
    configure_logging(level=logging.DEBUG)
    yield
    reset_logging()


@pytest.fixture(autouse=True)
def _clear_log_context():
    """Clear LogContext between tests to prevent cross-test contamination."""
    LogContext.clear()
    yield
    LogContext.clear()


@pytest.fixture
def captured_logs():
    """
    Capture payroll_kernel logs as parsed JSON dicts.

    Usage::

        def test_something(captured_logs, engine):
            engine.withdraw(ALICE)
            assert any(r["message"] == "salary_withdrawn" for r in captured_logs())
    """
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(StructuredFormatter())
    root = logging.getLogger("payroll_kernel")
    previous_level = root.level
    root.setLevel(logging.DEBUG)
    root.addHandler(handler)

    def _get_records() -> list[dict]:
        lines = stream.getvalue().strip().split("\n")
        return [json.loads(line) for line in lines if line]

    yield _get_records

    root.removeHandler(handler)
    root.setLevel(previous_level)


# =============================================================================
# Database
# =============================================================================


@pytest.fixture
def session_factory():
    """Fresh schema per test; in-memory SQLite unless DATABASE_URL is set."""
    init_engine_from_url(os.environ.get("DATABASE_URL", "sqlite://"))
    create_tables()
    yield get_session_factory()
    drop_tables()
    reset_engine()


@pytest.fixture
def session(session_factory):
    s = session_factory()
    yield s
    s.rollback()
    s.close()


# =============================================================================
# Domain fixtures
# =============================================================================


@pytest.fixture
def clock() -> DeterministicClock:
    return DeterministicClock(START_TIME)


@pytest.fixture
def config() -> PayrollConfig:
    return PayrollConfig(
        hr_authority=HR,
        treasury=TREASURY,
        stable_asset=USDC,
        wrapped_native_asset=WETH,
    )


@pytest.fixture
def stable_token() -> FakeStableToken:
    return FakeStableToken()


@pytest.fixture
def native_wallet() -> FakeNativeWallet:
    return FakeNativeWallet()


@pytest.fixture
def price_feed() -> FakePriceFeed:
    return FakePriceFeed()


@pytest.fixture
def swap_router() -> FakeSwapRouter:
    return FakeSwapRouter()


@pytest.fixture
def unwrapper() -> FakeUnwrapper:
    return FakeUnwrapper()


@pytest.fixture
def event_sink() -> InMemoryEventSink:
    return InMemoryEventSink()


@pytest.fixture
def make_engine(
    session_factory,
    stable_token,
    native_wallet,
    price_feed,
    swap_router,
    unwrapper,
    event_sink,
    clock,
):
    """Build a PayrollEngine over the test collaborators with a given config."""

    def _make(config: PayrollConfig) -> PayrollEngine:
        return PayrollEngine(
            session_factory=session_factory,
            config=config,
            stable_token=stable_token,
            native_transfer=native_wallet,
            price_feed=price_feed,
            swap_router=swap_router,
            unwrapper=unwrapper,
            event_sink=event_sink,
            clock=clock,
        )

    return _make


@pytest.fixture
def engine(make_engine, config) -> PayrollEngine:
    return make_engine(config)


@pytest.fixture
def registered(engine):
    """ALICE registered at START_TIME with WEEKLY_RATE."""
    engine.register(HR, ALICE, WEEKLY_RATE)
    return engine
