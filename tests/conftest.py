'''
Pytest configuration for the FastAPI application.

This file sets up fixtures for:
1. Forcing the application into TEST_MODE before any code is imported.
2. A fresh in-memory database per test, created through the app's own engine module.
3. An httpx AsyncClient bound to the app for endpoint testing.
4. Instances of all service classes, pre-injected with a test db session.
5. A seeded student with the reference ledger.
'''
import os

# --- Must run before the application (and its settings) is imported ---
os.environ["TEST_MODE"] = "True"
os.environ["DATABASE_URL_TEST"] = "sqlite+aiosqlite:///:memory:"
os.environ.setdefault("DATABASE_URL_PROD", "sqlite+aiosqlite:///./student_housing.db")

import pytest
from decimal import Decimal
from typing import AsyncGenerator
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import AsyncSession

# --- Constant Imports ----
from tests.constants import (
    TEST_STUDENT_ID,
    TEST_TENANT_CODE,
    TEST_ROOM_NUMBER,
    TEST_OTHER_STUDENT_ID,
    TEST_OTHER_TENANT_CODE,
    TEST_ADMIN_ID,
    TEST_PENDING_PAYMENT_ID,
    TEST_PAID_PAYMENT_ID,
    TEST_OVERDUE_PAYMENT_ID,
    TEST_PENDING_DATE,
    TEST_PAID_DATE,
    TEST_OVERDUE_DATE,
)
from tests.database.factories import StudentFactory, AdminFactory, PaymentFactory, persist

# --- Application Imports ---
from student_housing_backend.main import app
from student_housing_backend.common.config import settings
from student_housing_backend.database import engine as engine_module
from student_housing_backend.database import models as db_models
from student_housing_backend.database.db_enums import PaymentStatusEnum, PaymentTypeEnum
from student_housing_backend.services.user_service import UserService
from student_housing_backend.services.finance_service import (
    LedgerService,
    FinanceProfileService,
    FinanceReportService
)


@pytest.fixture(scope="session")
def anyio_backend():
    """
    Override the default 'anyio_backend' fixture.
    Forces 'asyncio' and promotes the scope to 'session'.
    """
    return "asyncio"


# --- 1. Database Fixtures ---

@pytest.fixture(scope="function")
async def db_engine():
    """
    Builds the app's engine against a brand-new in-memory database and
    creates the schema. Disposing the engine drops the database.
    """
    assert settings.TEST_MODE is True, \
        "TEST_MODE was not set to True! Check your .env file or environment."

    engine_module.create_db_engine_and_session_factory()
    await engine_module.init_db_schema()
    yield engine_module.engine
    await engine_module.dispose_db_engine()

@pytest.fixture(scope="function")
async def db_session(db_engine) -> AsyncGenerator[AsyncSession, None]:
    """
    Provides a session from the app's own session factory for
    service-level tests and data seeding.
    """
    session = engine_module.AsyncSessionLocal()
    try:
        yield session
    finally:
        await session.rollback()
        await session.close()

@pytest.fixture(scope="function")
async def client(db_engine) -> AsyncGenerator[AsyncClient, None]:
    """
    Async client talking to the app in-process. Requests use the real
    get_db_session dependency, bound to the test database.
    """
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


# --- 2. SERVICE FIXTURES ---

@pytest.fixture(scope="function")
def user_service(db_session: AsyncSession) -> UserService:
    return UserService(db=db_session)

@pytest.fixture(scope="function")
def ledger_service(db_session: AsyncSession, user_service: UserService) -> LedgerService:
    return LedgerService(db=db_session, user_service=user_service)

@pytest.fixture(scope="function")
def ledger_service_sync() -> LedgerService:
    """
    A lightweight LedgerService for testing the row formatter,
    which needs neither a db nor other services.
    """
    return LedgerService(db=None, user_service=None)

@pytest.fixture(scope="function")
def profile_service(user_service: UserService, ledger_service: LedgerService) -> FinanceProfileService:
    return FinanceProfileService(user_service=user_service, ledger_service=ledger_service)

@pytest.fixture(scope="function")
def report_service(db_session: AsyncSession, user_service: UserService) -> FinanceReportService:
    return FinanceReportService(db=db_session, user_service=user_service)


# --- 3. DATA FIXTURES ---

@pytest.fixture(scope="function")
async def test_student_orm(db_session: AsyncSession) -> db_models.Users:
    """The main test student, without any payments."""
    student = StudentFactory.build(
        id=TEST_STUDENT_ID,
        first_name="Thandi",
        last_name="Mokoena",
        email="thandi.mokoena@residence.test",
        tenant_code=TEST_TENANT_CODE,
        room_number=TEST_ROOM_NUMBER,
        phone="0712345678"
    )
    await persist(db_session, student)
    return student

@pytest.fixture(scope="function")
async def test_other_student_orm(db_session: AsyncSession) -> db_models.Users:
    """A second student whose payments must never leak into the main ledger."""
    student = StudentFactory.build(id=TEST_OTHER_STUDENT_ID, tenant_code=TEST_OTHER_TENANT_CODE)
    await persist(db_session, student)
    return student

@pytest.fixture(scope="function")
async def test_admin_orm(db_session: AsyncSession) -> db_models.Users:
    """An administrator: a user with no tenant code."""
    admin = AdminFactory.build(id=TEST_ADMIN_ID)
    await persist(db_session, admin)
    return admin

@pytest.fixture(scope="function")
async def seeded_ledger(
    db_session: AsyncSession,
    test_student_orm: db_models.Users,
    test_other_student_orm: db_models.Users
) -> list[db_models.Payments]:
    """
    The reference ledger for the main student:
    500 pending (2024-01-10), 300 paid (2024-01-01), 200 overdue (2023-12-15).
    The other student gets one pending payment of their own.
    """
    payments = [
        PaymentFactory.build(
            id=TEST_PENDING_PAYMENT_ID,
            user_id=test_student_orm.id,
            amount=Decimal("500.00"),
            date=TEST_PENDING_DATE,
            type=PaymentTypeEnum.RENT.value,
            status=PaymentStatusEnum.PENDING.value,
            description="January rent"
        ),
        PaymentFactory.build(
            id=TEST_PAID_PAYMENT_ID,
            user_id=test_student_orm.id,
            amount=Decimal("300.00"),
            date=TEST_PAID_DATE,
            type=PaymentTypeEnum.DEPOSIT.value,
            status=PaymentStatusEnum.PAID.value,
            description="Key deposit"
        ),
        PaymentFactory.build(
            id=TEST_OVERDUE_PAYMENT_ID,
            user_id=test_student_orm.id,
            amount=Decimal("200.00"),
            date=TEST_OVERDUE_DATE,
            type=PaymentTypeEnum.FINE.value,
            status=PaymentStatusEnum.OVERDUE.value,
            description="Late return fine"
        ),
    ]
    others = [
        PaymentFactory.build(
            user_id=test_other_student_orm.id,
            amount=Decimal("999.00"),
            status=PaymentStatusEnum.PENDING.value
        )
    ]
    await persist(db_session, *payments, *others)
    return payments
