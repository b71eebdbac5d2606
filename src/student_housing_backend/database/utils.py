'''
Helpers shared by every service that talks to the database.
'''
import asyncio
import datetime
import uuid
from typing import Awaitable, TypeVar

from sqlalchemy.exc import SQLAlchemyError

from ..common.config import settings
from ..common.exceptions import StoreUnavailableError
from ..common.logger import log

T = TypeVar("T")

async def store_call(awaitable: Awaitable[T], operation: str) -> T:
    """
    Awaits a single database round-trip under the configured deadline.

    Driver errors and timeouts are re-raised as StoreUnavailableError.
    Cancellation is left to propagate to the caller.
    """
    try:
        return await asyncio.wait_for(awaitable, timeout=settings.STORE_TIMEOUT_SECONDS)
    except asyncio.TimeoutError as e:
        log.error(f"Store call '{operation}' exceeded {settings.STORE_TIMEOUT_SECONDS}s.")
        raise StoreUnavailableError(f"Timed out during {operation}.") from e
    except SQLAlchemyError as e:
        log.error(f"Store call '{operation}' failed: {e}", exc_info=True)
        raise StoreUnavailableError(f"Database error during {operation}.") from e

def as_utc(value: datetime.datetime | None) -> datetime.datetime | None:
    """
    Normalises a stored timestamp to an aware UTC datetime.
    Some drivers (sqlite) hand back naive values; those are taken as UTC.
    """
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=datetime.timezone.utc)
    return value.astimezone(datetime.timezone.utc)

def utc_now() -> datetime.datetime:
    return datetime.datetime.now(datetime.timezone.utc)

def parse_uuid(value: str | uuid.UUID) -> uuid.UUID | None:
    """Returns value as a UUID, or None when it is not UUID-shaped."""
    if isinstance(value, uuid.UUID):
        return value
    try:
        return uuid.UUID(str(value))
    except ValueError:
        return None
