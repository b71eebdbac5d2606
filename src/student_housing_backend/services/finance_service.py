'''
Finance services: the payment ledger, the composed finance profile and
archived finance reports.
'''
import asyncio
from typing import Optional, Annotated
from uuid import UUID
from pydantic import ValidationError
from fastapi import Depends
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..database.engine import get_db_session
from ..database import models as db_models
from ..database.db_enums import PaymentStatusEnum
from ..database.utils import store_call, as_utc, utc_now, parse_uuid
from ..models import finance as finance_models
from ..core.finance import aggregate_ledger, coerce_payment_type, serialize_snapshot, encode_payload, decode_payload
from ..core.report_renderer import render_finance_report_pdf, PDF_CONTENT_TYPE
from ..common.exceptions import FinanceError, NotFoundError, StoreUnavailableError, ValidationFailedError
from ..common.logger import log
from ..common.config import settings
from .user_service import UserService

# --- Service 1: Payment Ledger ---

class LedgerService:
    """
    Service for reading a student's payment ledger and recording payments.
    """
    def __init__(
        self,
        db: Annotated[AsyncSession, Depends(get_db_session)],
        user_service: Annotated[UserService, Depends(UserService)]
    ):
        self.db = db
        self.user_service = user_service

    # --- Read Methods ---

    async def fetch_ledger(
        self,
        student_key: str | UUID,
        limit: Optional[int] = None,
        offset: int = 0
    ) -> list[finance_models.PaymentRead]:
        """
        Returns the student's payments, most recent first.
        student_key may be the internal user ID or a tenant code.
        """
        log.info(f"Fetching ledger for student key '{student_key}'")
        try:
            student = await self.user_service.resolve_student(student_key)
            return await self.get_ledger_for_user(student.id, limit=limit, offset=offset)
        except FinanceError:
            raise
        except Exception as e:
            log.error(f"Error in fetch_ledger for '{student_key}': {e}", exc_info=True)
            raise

    async def get_ledger_for_user(
        self,
        user_id: UUID,
        limit: Optional[int] = None,
        offset: int = 0
    ) -> list[finance_models.PaymentRead]:
        """
        Reads the ledger of an already-resolved user in a single query.
        Without a limit the whole ledger is returned.
        """
        stmt = select(db_models.Payments).filter(
            db_models.Payments.user_id == user_id
        ).order_by(
            db_models.Payments.date.desc(),
            db_models.Payments.id
        )
        if offset:
            stmt = stmt.offset(offset)
        if limit is not None:
            stmt = stmt.limit(limit)

        result = await store_call(self.db.execute(stmt), "get_ledger_for_user")
        return [self._format_payment_for_api(p) for p in result.scalars().all()]

    async def get_all_payments(
        self,
        status: Optional[PaymentStatusEnum] = None
    ) -> list[finance_models.PaymentRead]:
        """
        Lists every payment in the system, most recent first.
        Used by the administrators' overview.
        """
        log.info(f"Fetching all payments (status filter: {status})")
        stmt = select(db_models.Payments)
        if status is not None:
            stmt = stmt.filter(db_models.Payments.status == PaymentStatusEnum(status).value)
        stmt = stmt.order_by(db_models.Payments.date.desc(), db_models.Payments.id)

        result = await store_call(self.db.execute(stmt), "get_all_payments")
        return [self._format_payment_for_api(p) for p in result.scalars().all()]

    # --- Write Methods ---

    async def record_payment(self, payment_data: dict) -> finance_models.PaymentRead:
        """
        Validates and records a new ledger entry.
        """
        log.info("Attempting to record a payment")

        # 1. Validate the raw dictionary
        try:
            input_model = finance_models.PaymentCreate.model_validate(payment_data)
        except ValidationError as e:
            log.warning(f"Payment validation failed. Data: {payment_data}, Error: {e}")
            raise ValidationFailedError(str(e)) from e

        # 2. The owning student must exist
        student = await self.user_service.get_user_by_id(input_model.student_id)
        if not student:
            log.warning(f"Attempted to record a payment for unknown user {input_model.student_id}")
            raise NotFoundError("Student not found")

        # 3. Create and flush to obtain the new ID
        now = utc_now()
        new_payment = db_models.Payments(
            user_id=input_model.student_id,
            amount=input_model.amount,
            date=as_utc(input_model.date),
            type=input_model.type.value,
            status=input_model.status.value,
            description=input_model.description,
            created_at=now,
            updated_at=now
        )
        self.db.add(new_payment)
        await store_call(self.db.flush(), "record_payment")

        log.info(f"Recorded payment {new_payment.id} for user {new_payment.user_id}")
        return self._format_payment_for_api(new_payment)

    async def update_payment_status(self, payment_id: UUID, status: str) -> finance_models.PaymentRead:
        """
        Changes a payment's status. Amount and date are never touched.
        """
        log.info(f"Attempting to set payment {payment_id} to '{status}'")

        try:
            update = finance_models.PaymentStatusUpdate.model_validate({"status": status})
        except ValidationError as e:
            raise ValidationFailedError(str(e)) from e

        payment = await store_call(self.db.get(db_models.Payments, payment_id), "update_payment_status")
        if not payment:
            raise NotFoundError("Payment not found")

        payment.status = update.status.value
        payment.updated_at = utc_now()
        await store_call(self.db.flush(), "update_payment_status")
        return self._format_payment_for_api(payment)

    # --- Deserialisation ---

    def _format_payment_for_api(self, payment: db_models.Payments) -> finance_models.PaymentRead:
        """
        The single conversion point from a stored row to the API model.
        A row that cannot be converted is treated as a store failure.
        """
        try:
            return finance_models.PaymentRead(
                id=payment.id,
                user_id=payment.user_id,
                amount=payment.amount,
                date=as_utc(payment.date),
                type=coerce_payment_type(payment.type),
                status=payment.status,
                description=payment.description or "",
                created_at=as_utc(payment.created_at),
                updated_at=as_utc(payment.updated_at)
            )
        except ValidationError as e:
            log.error(f"Malformed payment record {payment.id}: {e}")
            raise StoreUnavailableError(f"Malformed payment record {payment.id}.") from e

# --- Service 2: Finance Profile ---

class FinanceProfileService:
    """Composes a student's identity with their ledger and its aggregates."""

    def __init__(
        self,
        user_service: Annotated[UserService, Depends(UserService)],
        ledger_service: Annotated[LedgerService, Depends(LedgerService)]
    ):
        self.user_service = user_service
        self.ledger_service = ledger_service

    async def compose_profile(self, student_key: str | UUID) -> finance_models.StudentFinanceProfile:
        """
        Builds the finance profile from scratch on every call.

        The balance and due date are derived from the same ledger read that
        fills payment_history, so the three always agree.
        """
        log.info(f"Composing finance profile for student key '{student_key}'")
        try:
            # 1. Identity
            student = await self.user_service.resolve_student(student_key)

            # 2. Ledger (single read)
            ledger = await self.ledger_service.get_ledger_for_user(student.id)

            # 3. Aggregates
            summary = aggregate_ledger(ledger)

            return finance_models.StudentFinanceProfile(
                full_name=student.full_name,
                tenant_code=student.tenant_code,
                room_number=student.room_number or "",
                email=student.email,
                phone=student.phone or "",
                payment_history=ledger,
                outstanding_balance=summary.outstanding_balance,
                next_payment_due=summary.next_payment_due
            )
        except FinanceError:
            raise
        except Exception as e:
            log.error(f"Error in compose_profile for '{student_key}': {e}", exc_info=True)
            raise

# --- Service 3: Finance Reports ---

class FinanceReportService:
    """
    Service for archiving profile snapshots as immutable reports
    and reading them back. Reports are never updated or deleted.
    """
    def __init__(
        self,
        db: Annotated[AsyncSession, Depends(get_db_session)],
        user_service: Annotated[UserService, Depends(UserService)]
    ):
        self.db = db
        self.user_service = user_service

    async def generate_report(
        self,
        student_key: str | UUID,
        snapshot: finance_models.StudentFinanceProfile,
        include_pdf: bool = False
    ) -> UUID:
        """
        Stores the given snapshot as a new report and returns its ID.

        The snapshot is archived exactly as supplied; nothing is recomputed.
        With include_pdf the snapshot is also rendered and stored as a
        base64 payload for later download.
        """
        log.info(f"Generating finance report for student key '{student_key}' (pdf={include_pdf})")

        # 1. Resolve the owner and check the snapshot belongs to them
        student = await self.user_service.resolve_student(student_key)
        if snapshot.tenant_code != student.tenant_code:
            log.warning(f"Snapshot for '{snapshot.tenant_code}' submitted against student '{student.tenant_code}'")
            raise ValidationFailedError("Snapshot tenant code does not match the student.")

        report_date = utc_now()

        # 2. Optional rendered document
        payload = None
        content_type = None
        if include_pdf:
            pdf_bytes = await asyncio.to_thread(
                render_finance_report_pdf, snapshot, report_date, settings.CURRENCY
            )
            payload = encode_payload(pdf_bytes)
            content_type = PDF_CONTENT_TYPE

        # 3. Insert the new, immutable record
        new_report = db_models.FinancialReports(
            user_id=student.id,
            tenant_code=student.tenant_code,
            report_date=report_date,
            report_data=serialize_snapshot(snapshot),
            report_payload=payload,
            payload_content_type=content_type,
            created_at=report_date
        )
        self.db.add(new_report)
        await store_call(self.db.flush(), "generate_report")

        log.info(f"Stored finance report {new_report.id} for user {student.id}")
        return new_report.id

    async def get_report(self, report_id: str | UUID) -> finance_models.FinanceReportRead:
        """Fetches one report by ID. Raises NotFoundError if absent."""
        report = await self._get_report_internal(report_id)
        return self._format_report_for_api(report)

    async def get_reports_for_student(self, student_id: str | UUID) -> list[finance_models.FinanceReportRead]:
        """
        Lists a student's reports, newest first.
        A student without reports (or an unknown ID) yields an empty list.
        """
        log.info(f"Fetching finance reports for user {student_id}")
        user_id = parse_uuid(student_id)
        if user_id is None:
            return []

        stmt = select(db_models.FinancialReports).filter(
            db_models.FinancialReports.user_id == user_id
        ).order_by(
            db_models.FinancialReports.report_date.desc(),
            db_models.FinancialReports.created_at.desc()
        )
        result = await store_call(self.db.execute(stmt), "get_reports_for_student")
        return [self._format_report_for_api(r) for r in result.scalars().all()]

    async def download_report_payload(self, report_id: str | UUID) -> finance_models.ReportPayload:
        """
        Decodes the stored binary document of a report.
        Raises NotFoundError if the report or its payload is absent.
        """
        report = await self._get_report_internal(report_id)
        if not report.report_payload:
            log.warning(f"Report {report.id} has no stored payload.")
            raise NotFoundError("Report payload not found")

        return finance_models.ReportPayload(
            content=decode_payload(report.report_payload),
            filename=f"finance-report-{report.id}.pdf",
            content_type=report.payload_content_type or PDF_CONTENT_TYPE
        )

    # --- Private Helpers ---

    async def _get_report_internal(self, report_id: str | UUID) -> db_models.FinancialReports:
        log.info(f"Internal fetch for finance report by ID: {report_id}")
        parsed_id = parse_uuid(report_id)
        report = None
        if parsed_id is not None:
            report = await store_call(self.db.get(db_models.FinancialReports, parsed_id), "get_report")
        if not report:
            raise NotFoundError("Report not found")
        return report

    def _format_report_for_api(self, report: db_models.FinancialReports) -> finance_models.FinanceReportRead:
        try:
            return finance_models.FinanceReportRead(
                id=report.id,
                user_id=report.user_id,
                tenant_code=report.tenant_code,
                report_date=as_utc(report.report_date),
                report_data=report.report_data,
                report_url=report.report_url,
                created_at=as_utc(report.created_at),
                has_payload=bool(report.report_payload)
            )
        except ValidationError as e:
            log.error(f"Malformed finance report {report.id}: {e}")
            raise StoreUnavailableError(f"Malformed finance report {report.id}.") from e
