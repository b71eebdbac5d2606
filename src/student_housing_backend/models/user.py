'''
Pydantic models for user identity.
'''
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict

from ..database.db_enums import UserRole

class StudentIdentity(BaseModel):
    """
    The identity fields a finance profile borrows from the student record.
    """
    id: UUID
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    tenant_code: str
    room_number: Optional[str] = None
    email: str
    phone: Optional[str] = None
    role: UserRole

    model_config = ConfigDict(from_attributes=True)

    @property
    def full_name(self) -> str:
        return f"{self.first_name or ''} {self.last_name or ''}".strip()
