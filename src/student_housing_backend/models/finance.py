'''
Pydantic models for payments, finance profiles and finance reports.
'''
from datetime import datetime
from decimal import Decimal
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from ..database.db_enums import PaymentStatusEnum, PaymentTypeEnum

# --- 1. API Input Models (for POST/PATCH) ---

class PaymentCreate(BaseModel):
    """
    Validates the request body for recording a new payment.
    """
    student_id: UUID
    amount: Decimal = Field(ge=0, max_digits=10, decimal_places=2)
    date: datetime
    type: PaymentTypeEnum
    status: PaymentStatusEnum
    description: str = ""

class PaymentStatusUpdate(BaseModel):
    """
    Validates the request body for changing a payment's status.
    """
    status: PaymentStatusEnum


# --- 2. API Output Models (for GET) ---

class PaymentRead(BaseModel):
    """
    The API model for a single ledger entry.
    """
    id: UUID
    user_id: UUID
    amount: Decimal
    date: datetime
    type: PaymentTypeEnum
    status: PaymentStatusEnum
    description: str = ""
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)

class LedgerSummary(BaseModel):
    """Result of aggregating a ledger."""
    outstanding_balance: Decimal
    # None means no pending payment exists, not a literal due date
    next_payment_due: Optional[datetime] = None

class StudentFinanceProfile(BaseModel):
    """
    A student's identity merged with their ledger and its aggregates.
    Computed on every request, never stored (except as a report snapshot).
    """
    full_name: str
    tenant_code: str
    room_number: str = ""
    email: str
    phone: str = ""
    payment_history: list[PaymentRead]
    outstanding_balance: Decimal
    next_payment_due: Optional[datetime] = None


# --- 3. Finance Report Models ---

class FinanceReportCreate(BaseModel):
    """
    Request body for generating a report.
    When no snapshot is sent, the current profile is archived.
    """
    snapshot: Optional[StudentFinanceProfile] = None
    include_pdf: bool = False

class FinanceReportCreated(BaseModel):
    report_id: UUID

class FinanceReportRead(BaseModel):
    """
    The API model for a stored report. The binary payload itself is
    only served by the download endpoint.
    """
    id: UUID
    user_id: UUID
    tenant_code: str
    report_date: datetime
    report_data: str
    report_url: Optional[str] = None
    created_at: Optional[datetime] = None
    has_payload: bool = False

    model_config = ConfigDict(from_attributes=True)

class FinanceReportList(BaseModel):
    reports: list[FinanceReportRead]

class ReportPayload(BaseModel):
    """Decoded binary document ready to be served."""
    content: bytes
    filename: str
    content_type: str
