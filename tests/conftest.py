"""Pytest fixtures for payroll export tests."""

from __future__ import annotations

from collections.abc import AsyncGenerator, Awaitable, Callable
from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta
from decimal import Decimal
from pathlib import Path
from uuid import UUID, uuid4

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from payroll_export.database import create_schema, create_session_factory, get_engine
from payroll_export.models import Employee, PayPeriod, Timesheet
from payroll_export.services.artifact_store import LocalArtifactStore
from payroll_export.services.mapping_service import MappingService
from payroll_export.services.types import Actor

ORGANISATION_ID = UUID("6f1c2a8e-0d4b-4c61-9a57-1b2f3e4d5a60")
OTHER_ORGANISATION_ID = UUID("0a9b8c7d-6e5f-4a3b-8c2d-1e0f9a8b7c6d")

# Monday 1 July to Sunday 14 July 2024
PERIOD_START = date(2024, 7, 1)
PERIOD_END = date(2024, 7, 14)

ARTIFACT_BASE_URL = "http://testserver/api/v1/artifacts"
SIGNING_SECRET = "test-signing-secret"


def hours_between(clock_in: time, clock_out: time, break_minutes: int = 0) -> Decimal:
    """Worked hours of a wall-clock shift, wrapping past midnight."""
    start = datetime.combine(date.min, clock_in)
    end = datetime.combine(date.min, clock_out)
    if end < start:
        end += timedelta(days=1)
    minutes = int((end - start).total_seconds() // 60) - break_minutes
    return (Decimal(minutes) / Decimal(60)).quantize(Decimal("0.01"))


@pytest_asyncio.fixture
async def engine(tmp_path: Path) -> AsyncGenerator[AsyncEngine, None]:
    """File-backed SQLite engine, one database per test."""
    engine = get_engine(f"sqlite+aiosqlite:///{tmp_path / 'payroll.db'}")
    await create_schema(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return create_session_factory(engine)


@pytest_asyncio.fixture
async def session(
    session_factory: async_sessionmaker[AsyncSession],
) -> AsyncGenerator[AsyncSession, None]:
    """Create a database session for each test."""
    async with session_factory() as session:
        yield session
        await session.rollback()


@pytest.fixture
def actor() -> Actor:
    return Actor(user_id=uuid4(), name="Pat Manager", email="pat.manager@example.com")


@pytest.fixture
def artifact_store(tmp_path: Path) -> LocalArtifactStore:
    return LocalArtifactStore(
        root=tmp_path / "artifacts",
        base_url=ARTIFACT_BASE_URL,
        signing_secret=SIGNING_SECRET,
    )


TimesheetFactory = Callable[..., Awaitable[Timesheet]]


@pytest.fixture
def add_timesheet(session: AsyncSession) -> TimesheetFactory:
    """Insert a timesheet and flush it; total hours default to the clock span."""

    async def _add(
        employee: Employee,
        work_date: date,
        clock_in: time,
        clock_out: time | None,
        *,
        break_minutes: int = 0,
        status: str = "approved",
        shift_type: str | None = "standard",
        total_hours: Decimal | None = None,
        notes: str | None = None,
        organisation_id: UUID | None = None,
    ) -> Timesheet:
        if total_hours is None and clock_out is not None:
            total_hours = hours_between(clock_in, clock_out, break_minutes)
        timesheet = Timesheet(
            organisation_id=organisation_id or employee.organisation_id,
            employee_id=employee.employee_id,
            work_date=work_date,
            clock_in=clock_in,
            clock_out=clock_out,
            break_minutes=break_minutes,
            total_hours=total_hours,
            status=status,
            shift_type=shift_type,
            notes=notes,
        )
        session.add(timesheet)
        await session.flush()
        return timesheet

    return _add


@dataclass
class PayrollData:
    """Seeded organisation: employees, an open pay period and exportable timesheets."""

    pay_period: PayPeriod
    alice: Employee
    bob: Employee
    carol: Employee
    timesheets: list[Timesheet] = field(default_factory=list)
    # Plain ids stay readable after a rollback expires the ORM objects
    pay_period_id: UUID = field(init=False)
    timesheet_ids: list[UUID] = field(init=False)

    def __post_init__(self) -> None:
        self.pay_period_id = self.pay_period.pay_period_id
        self.timesheet_ids = [ts.timesheet_id for ts in self.timesheets]


@pytest_asyncio.fixture
async def payroll_data(
    session: AsyncSession,
    actor: Actor,
    add_timesheet: TimesheetFactory,
) -> PayrollData:
    """Three approved, mapped timesheets inside an open pay period.

    Also seeds rows the export must ignore: one dated after the period and
    one belonging to another organisation. Carol has no email address and no
    timesheets.
    """
    alice = Employee(
        organisation_id=ORGANISATION_ID,
        first_name="Alice",
        last_name="Walker",
        email="alice@example.com",
    )
    bob = Employee(
        organisation_id=ORGANISATION_ID,
        first_name="Bob",
        last_name="Chen",
        email="bob@example.com",
    )
    carol = Employee(
        organisation_id=ORGANISATION_ID,
        first_name="Carol",
        last_name="Nguyen",
        email=None,
    )
    outsider = Employee(
        organisation_id=OTHER_ORGANISATION_ID,
        first_name="Olive",
        last_name="Stone",
        email="olive@example.com",
    )
    session.add_all([alice, bob, carol, outsider])

    pay_period = PayPeriod(
        organisation_id=ORGANISATION_ID,
        start_date=PERIOD_START,
        end_date=PERIOD_END,
        status="open",
        created_by_user_id=actor.user_id,
        created_by_name=actor.name,
        created_by_email=actor.email,
    )
    session.add(pay_period)
    await session.flush()

    await MappingService(session).seed_defaults(ORGANISATION_ID)

    timesheets = [
        # Monday, 7.5 h after a 30 min break
        await add_timesheet(alice, date(2024, 7, 1), time(9, 0), time(17, 0), break_minutes=30),
        # Tuesday evening, 5 h
        await add_timesheet(bob, date(2024, 7, 2), time(18, 0), time(23, 0), shift_type="evening"),
        # Saturday, 8 h
        await add_timesheet(alice, date(2024, 7, 6), time(8, 0), time(16, 0), shift_type="weekend"),
    ]

    # Outside the period
    await add_timesheet(alice, date(2024, 7, 20), time(9, 0), time(17, 0))
    # Another organisation
    await add_timesheet(outsider, date(2024, 7, 3), time(9, 0), time(17, 0))

    await session.commit()
    return PayrollData(
        pay_period=pay_period,
        alice=alice,
        bob=bob,
        carol=carol,
        timesheets=timesheets,
    )
