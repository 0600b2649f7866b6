"""
Pytest fixtures for the circle kernel test suite.

Provides:
- A fresh in-memory SQLite database per test (PostgreSQL via DATABASE_URL)
- Deterministic clock and in-memory token ledger
- CircleService / CircleSelector instances and a circle factory
- Structured log capture

Environment Variables:
- DATABASE_URL: SQLAlchemy URL to run against instead of in-memory SQLite.
  The schema is dropped and recreated around every test.
"""

import json
import logging
import os
from io import StringIO
from typing import Generator

import pytest
from sqlalchemy.orm import Session

from circle_kernel.db.engine import (
    create_tables,
    drop_tables,
    get_session,
    init_engine_from_url,
    reset_engine,
)
from circle_kernel.domain.clock import DeterministicClock
from circle_kernel.domain.policy import DEFAULT_POLICY
from circle_kernel.domain.token_transfer import InMemoryTokenLedger
from circle_kernel.logging_config import (
    LogContext,
    StructuredFormatter,
    configure_logging,
    reset_logging,
)
from circle_kernel.selectors.circle_selector import CircleSelector
from circle_kernel.services.circle_service import CircleService

ASSET = "USDC"
DEPOSIT = 100
DAY = 24 * 3600
CYCLE_INTERVAL = 7 * DAY
JOIN_DEADLINE = DAY
OWNER = "alice"
MEMBERS = ("alice", "bob", "carol")
STARTING_BALANCE = 10_000


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
    Capture circle_kernel logs as parsed JSON dicts.

    Usage::

        def test_something(captured_logs, circle_service):
            circle_service.create_circle(...)
            logs = captured_logs()
            assert any(r["message"] == "circle_created" for r in logs)
    """
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(StructuredFormatter())
    root = logging.getLogger("circle_kernel")
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


def get_database_url() -> str:
    return os.environ.get("DATABASE_URL", "sqlite://")


@pytest.fixture
def engine():
    """Fresh schema per test; in-memory SQLite unless DATABASE_URL is set."""
    eng = init_engine_from_url(get_database_url())
    create_tables()
    yield eng
    try:
        drop_tables()
    finally:
        reset_engine()


@pytest.fixture
def session(engine) -> Generator[Session, None, None]:
    """Provide a database session; uncommitted work is rolled back."""
    sess = get_session()
    yield sess
    try:
        sess.rollback()
    finally:
        sess.close()


# =============================================================================
# Collaborators
# =============================================================================


@pytest.fixture
def deterministic_clock():
    """Provide a deterministic clock for testing."""
    return DeterministicClock()


@pytest.fixture
def token_ledger():
    """In-memory token ledger with every test address funded."""
    ledger = InMemoryTokenLedger()
    for address in (*MEMBERS, "dave", "erin", "sponsor"):
        ledger.mint(ASSET, address, STARTING_BALANCE)
    return ledger


# =============================================================================
# Services
# =============================================================================


@pytest.fixture
def circle_service(session, token_ledger, deterministic_clock) -> CircleService:
    return CircleService(session, token_ledger, deterministic_clock, DEFAULT_POLICY)


@pytest.fixture
def circle_selector(session, deterministic_clock) -> CircleSelector:
    return CircleSelector(session, deterministic_clock)


@pytest.fixture
def create_circle(circle_service):
    """
    Factory creating a circle, by default with every member confirmed.

    Usage::

        circle = create_circle()                      # alice, bob, carol
        circle = create_circle(join=("alice", "bob"))  # carol unconfirmed
    """

    def _create(
        members=MEMBERS,
        join=None,
        owner=OWNER,
        deposit_amount=DEPOSIT,
        cycle_interval_secs=CYCLE_INTERVAL,
        join_deadline_secs=JOIN_DEADLINE,
        policy=None,
    ):
        circle = circle_service.create_circle(
            owner=owner,
            token_asset=ASSET,
            deposit_amount=deposit_amount,
            members=members,
            cycle_interval_secs=cycle_interval_secs,
            join_deadline_secs=join_deadline_secs,
            policy=policy,
        )
        for member in members if join is None else join:
            circle_service.join_circle(circle.id, member)
        return circle_service.get_circle(circle.id)

    return _create


@pytest.fixture
def active_circle(create_circle):
    """Three-member circle with every member confirmed; cycle 1 is open."""
    return create_circle()


@pytest.fixture
def run_cycle(circle_service, deterministic_clock):
    """Deposit for ``depositors``, wait one interval and execute."""

    def _run(circle_id, depositors, caller="keeper"):
        for member in depositors:
            circle_service.deposit(circle_id, member)
        deterministic_clock.advance(CYCLE_INTERVAL)
        return circle_service.execute_cycle(circle_id, caller)

    return _run
