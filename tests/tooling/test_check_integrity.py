import pytest
import uuid
from decimal import Decimal
from sqlalchemy.ext.asyncio import AsyncSession

from student_housing_backend.database import models as db_models

from scripts.check_integrity import collect_integrity_counts
from tests.database.factories import PaymentFactory, FinancialReportFactory, persist
from tests.constants import TEST_STUDENT_ID, TEST_OTHER_TENANT_CODE


@pytest.mark.anyio
class TestCheckIntegrity:

    async def test_clean_database(
        self,
        db_session: AsyncSession,
        seeded_ledger: list[db_models.Payments]
    ):
        counts = await collect_integrity_counts(db_session)

        assert counts == {
            "unknown_payment_types": 0,
            "unknown_payment_statuses": 0,
            "negative_amounts": 0,
            "orphaned_payments": 0,
            "mismatched_reports": 0,
        }

    async def test_offending_rows_are_counted(
        self,
        db_session: AsyncSession,
        test_student_orm: db_models.Users
    ):
        await persist(
            db_session,
            PaymentFactory.build(user_id=TEST_STUDENT_ID, type="laundry"),
            PaymentFactory.build(user_id=TEST_STUDENT_ID, status="refunded"),
            PaymentFactory.build(user_id=TEST_STUDENT_ID, amount=Decimal("-1.00")),
            FinancialReportFactory.build(user_id=TEST_STUDENT_ID, tenant_code=TEST_OTHER_TENANT_CODE),
        )
        # sqlite does not enforce foreign keys unless asked to
        await persist(db_session, PaymentFactory.build(user_id=uuid.uuid4()))

        counts = await collect_integrity_counts(db_session)

        assert counts["unknown_payment_types"] == 1
        assert counts["unknown_payment_statuses"] == 1
        assert counts["negative_amounts"] == 1
        assert counts["orphaned_payments"] == 1
        assert counts["mismatched_reports"] == 1
