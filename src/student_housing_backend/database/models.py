from typing import Optional

from sqlalchemy import DateTime, Enum, ForeignKeyConstraint, Index, Numeric, PrimaryKeyConstraint, String, Text, UniqueConstraint, Uuid, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship
import datetime
import decimal
import uuid


def _utcnow() -> datetime.datetime:
    return datetime.datetime.now(datetime.timezone.utc)


class Base(DeclarativeBase):
    pass


class Users(Base):
    __tablename__ = 'users'
    __table_args__ = (
        PrimaryKeyConstraint('id', name='users_pkey'),
        UniqueConstraint('email', name='users_email_key'),
        UniqueConstraint('tenant_code', name='users_tenant_code_key'),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    email: Mapped[str] = mapped_column(Text)
    role: Mapped[str] = mapped_column(Enum('student', 'admin', name='user_role'))
    first_name: Mapped[Optional[str]] = mapped_column(Text)
    last_name: Mapped[Optional[str]] = mapped_column(Text)
    tenant_code: Mapped[Optional[str]] = mapped_column(String(32))
    room_number: Mapped[Optional[str]] = mapped_column(String(32))
    phone: Mapped[Optional[str]] = mapped_column(String(32))
    created_at: Mapped[Optional[datetime.datetime]] = mapped_column(DateTime(True), default=_utcnow, server_default=func.now())
    updated_at: Mapped[Optional[datetime.datetime]] = mapped_column(DateTime(True), default=_utcnow, server_default=func.now())

    payments: Mapped[list['Payments']] = relationship('Payments', back_populates='user')
    financial_reports: Mapped[list['FinancialReports']] = relationship('FinancialReports', back_populates='user')


class Payments(Base):
    __tablename__ = 'payments'
    __table_args__ = (
        ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE', name='payments_user_id_fkey'),
        PrimaryKeyConstraint('id', name='payments_pkey'),
        Index('idx_payments_user_date', 'user_id', 'date')
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id: Mapped[uuid.UUID] = mapped_column(Uuid)
    amount: Mapped[decimal.Decimal] = mapped_column(Numeric(10, 2))
    date: Mapped[datetime.datetime] = mapped_column(DateTime(True))
    # Kept as free text: legacy rows may carry types outside the recognised set
    type: Mapped[str] = mapped_column(String(20))
    status: Mapped[str] = mapped_column(Enum('paid', 'pending', 'overdue', name='payment_status_enum'))
    description: Mapped[str] = mapped_column(Text, default='')
    created_at: Mapped[Optional[datetime.datetime]] = mapped_column(DateTime(True), default=_utcnow, server_default=func.now())
    updated_at: Mapped[Optional[datetime.datetime]] = mapped_column(DateTime(True), default=_utcnow, server_default=func.now())

    user: Mapped['Users'] = relationship('Users', back_populates='payments')


class FinancialReports(Base):
    __tablename__ = 'financial_reports'
    __table_args__ = (
        ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE', name='financial_reports_user_id_fkey'),
        PrimaryKeyConstraint('id', name='financial_reports_pkey'),
        Index('idx_financial_reports_user_date', 'user_id', 'report_date')
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id: Mapped[uuid.UUID] = mapped_column(Uuid)
    tenant_code: Mapped[str] = mapped_column(String(32))
    report_date: Mapped[datetime.datetime] = mapped_column(DateTime(True))
    report_data: Mapped[str] = mapped_column(Text)
    report_payload: Mapped[Optional[str]] = mapped_column(Text)
    payload_content_type: Mapped[Optional[str]] = mapped_column(String(64))
    report_url: Mapped[Optional[str]] = mapped_column(Text)
    created_at: Mapped[Optional[datetime.datetime]] = mapped_column(DateTime(True), default=_utcnow, server_default=func.now())

    user: Mapped['Users'] = relationship('Users', back_populates='financial_reports')
