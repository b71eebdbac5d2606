"""Checks the finance tables for rows the API would refuse or misreport.

Usage:
    python scripts/check_integrity.py

Connects with the same settings as the app (environment / .env).
"""
import asyncio
import sys
from pathlib import Path
from sqlalchemy import text, select, func
from sqlalchemy.ext.asyncio import AsyncSession

# --- Path Setup ---
# This file is assumed to be in <project_root>/scripts/check_integrity.py
PROJECT_ROOT = Path(__file__).resolve().parent.parent
if str(PROJECT_ROOT / "src") not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT / "src"))

from student_housing_backend.database import engine as engine_module
from student_housing_backend.database import models as db_models
from student_housing_backend.database.db_enums import PaymentStatusEnum, PaymentTypeEnum


async def collect_integrity_counts(session: AsyncSession) -> dict[str, int]:
    """Returns the number of offending rows per check."""
    # 1. Payment types outside the recognised set (read back as 'other')
    unknown_types = await session.execute(
        select(func.count()).select_from(db_models.Payments).where(
            db_models.Payments.type.not_in(PaymentTypeEnum.get_all_names())
        )
    )

    # 2. Payment statuses outside the recognised set (cannot be served at all)
    unknown_statuses = await session.execute(
        select(func.count()).select_from(db_models.Payments).where(
            db_models.Payments.status.not_in(PaymentStatusEnum.get_all_names())
        )
    )

    # 3. Negative amounts
    negative_amounts = await session.execute(text("""
        SELECT count(*) FROM payments WHERE amount < 0
    """))

    # 4. Payments whose owner no longer exists
    orphaned_payments = await session.execute(text("""
        SELECT count(*) FROM payments p
        LEFT JOIN users u ON p.user_id = u.id
        WHERE u.id IS NULL
    """))

    # 5. Reports filed under a tenant code their owner does not hold
    mismatched_reports = await session.execute(text("""
        SELECT count(*) FROM financial_reports fr
        JOIN users u ON fr.user_id = u.id
        WHERE u.tenant_code IS NULL OR fr.tenant_code != u.tenant_code
    """))

    return {
        "unknown_payment_types": unknown_types.scalar(),
        "unknown_payment_statuses": unknown_statuses.scalar(),
        "negative_amounts": negative_amounts.scalar(),
        "orphaned_payments": orphaned_payments.scalar(),
        "mismatched_reports": mismatched_reports.scalar(),
    }

async def check_integrity() -> bool:
    print("Connecting to database...")
    engine_module.create_db_engine_and_session_factory()

    try:
        async with engine_module.AsyncSessionLocal() as session:
            print("--- Checking Finance Integrity ---")
            counts = await collect_integrity_counts(session)
    finally:
        await engine_module.dispose_db_engine()

    for check, count in counts.items():
        print(f"{check}: {count}")

    if not any(counts.values()):
        print("PASS: Integrity Verified.")
        return True
    print("FAIL: Integrity Issues Found.")
    return False

if __name__ == "__main__":
    sys.exit(0 if asyncio.run(check_integrity()) else 1)
