'''
Pure finance logic: ledger aggregation, snapshot serialisation and the
binary payload codec. Nothing in here touches the database.
'''
import base64
import binascii
from datetime import datetime
from decimal import Decimal
from typing import Iterable, Optional

from ..common.exceptions import StoreUnavailableError
from ..common.logger import log
from ..database.db_enums import PaymentStatusEnum, PaymentTypeEnum, UNSETTLED_STATUSES
from ..models import finance as finance_models


def aggregate_ledger(
    ledger: Iterable[finance_models.PaymentRead],
) -> finance_models.LedgerSummary:
    """
    Derives the outstanding balance and next due date from a ledger.

    The balance is the sum of every pending or overdue amount. The next due
    date is the date of the most recent pending entry, or None when nothing
    is pending. Input order does not matter; entries are ranked by date.
    """
    entries = sorted(ledger, key=lambda p: p.date, reverse=True)

    outstanding_balance = sum(
        (p.amount for p in entries if p.status in UNSETTLED_STATUSES),
        Decimal("0")
    )

    next_payment_due: Optional[datetime] = next(
        (p.date for p in entries if p.status == PaymentStatusEnum.PENDING),
        None
    )

    return finance_models.LedgerSummary(
        outstanding_balance=outstanding_balance,
        next_payment_due=next_payment_due
    )

def coerce_payment_type(raw_type: Optional[str]) -> PaymentTypeEnum:
    """
    Maps a stored payment type onto the recognised set.
    Unrecognised values are read as OTHER and logged; writes never produce them.
    """
    try:
        return PaymentTypeEnum(raw_type)
    except ValueError:
        log.warning(f"Unrecognised payment type {raw_type!r} read as '{PaymentTypeEnum.OTHER.value}'.")
        return PaymentTypeEnum.OTHER

def serialize_snapshot(profile: finance_models.StudentFinanceProfile) -> str:
    """Serialises a profile snapshot to the JSON stored on a report."""
    return profile.model_dump_json()

def encode_payload(content: bytes) -> str:
    """Encodes a binary document for storage in a text column."""
    return base64.b64encode(content).decode("ascii")

def decode_payload(encoded: str) -> bytes:
    """Reverses encode_payload byte for byte."""
    try:
        return base64.b64decode(encoded.encode("ascii"), validate=True)
    except (binascii.Error, UnicodeEncodeError) as e:
        raise StoreUnavailableError("Stored report payload is not valid base64.") from e

def format_money(amount: Decimal, currency: str) -> str:
    return f"{currency} {amount:,.2f}"
