"""Pytest configuration and fixtures."""

import os

# Point the application at SQLite before any project module reads settings
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["BREVO_API_KEY"] = ""

from datetime import date, datetime
from decimal import Decimal
from typing import Callable, Iterator
from unittest.mock import Mock

import pytest
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from database import enable_sqlite_savepoints
from models import Base, LeaseAgreement
from schemas.lease import LeaseCreate
from services.lease_service import LeaseService
from services.notification_service import NotificationDispatcher


@pytest.fixture
def engine() -> Iterator[Engine]:
    """In-memory SQLite database shared by every session of one test."""
    test_engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    enable_sqlite_savepoints(test_engine)
    Base.metadata.create_all(test_engine)
    yield test_engine
    test_engine.dispose()


@pytest.fixture
def session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)


@pytest.fixture
def db(session_factory: sessionmaker) -> Iterator[Session]:
    session = session_factory()
    yield session
    session.rollback()
    session.close()


@pytest.fixture
def email_sender() -> Mock:
    """Stands in for the Brevo call."""
    return Mock()


@pytest.fixture
def notifier(db: Session, email_sender: Mock) -> NotificationDispatcher:
    return NotificationDispatcher(
        db,
        email_sender=email_sender,
        email_enabled=True,
        clock=lambda: datetime(2024, 1, 15, 12, 0),
    )


@pytest.fixture
def lease_data() -> Callable[..., LeaseCreate]:
    """Build LeaseCreate payloads; keyword arguments override the defaults."""

    def _build(**overrides) -> LeaseCreate:
        values = {
            "property_id": "prop-001",
            "tenant_id": "tenant-001",
            "agent_id": "agent-001",
            "start_date": date(2023, 12, 31),
            "end_date": date(2024, 12, 31),
            "monthly_rent": Decimal("85000"),
            "security_deposit": Decimal("85000"),
            "terms": {"rent_due_date": 1, "late_fee_grace_days": 3},
        }
        values.update(overrides)
        return LeaseCreate(**values)

    return _build


@pytest.fixture
def make_lease(
    db: Session,
    notifier: NotificationDispatcher,
    lease_data: Callable[..., LeaseCreate],
) -> Callable[..., LeaseAgreement]:
    """Create a lease (with its payment schedule) through LeaseService."""

    def _make(**overrides) -> LeaseAgreement:
        lease_id = LeaseService.create_lease(db, lease_data(**overrides), notifier)
        return LeaseService.get_lease(db, lease_id)

    return _make


@pytest.fixture
def active_lease(db: Session, notifier: NotificationDispatcher, make_lease) -> LeaseAgreement:
    lease = make_lease()
    LeaseService.sign_lease(db, lease.id, "tenant", "sig-tenant", "10.0.0.1", notifier)
    LeaseService.sign_lease(db, lease.id, "agent", "sig-agent", "10.0.0.2", notifier)
    return lease
