'''
Student lookup used by the finance services.
'''
from typing import Annotated
from uuid import UUID
from fastapi import Depends
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..database.engine import get_db_session
from ..database import models as db_models
from ..database.utils import store_call, parse_uuid
from ..common.exceptions import NotFoundError, ValidationFailedError
from ..common.logger import log
from ..models import user as user_models


class UserService:
    """
    Base service for user-related database operations.
    """
    def __init__(self, db: Annotated[AsyncSession, Depends(get_db_session)]):
        self.db = db

    async def get_user_by_id(self, user_id: UUID) -> db_models.Users | None:
        """Fetches a user by internal ID, or None."""
        log.info(f"Fetching user by ID: {user_id}")
        return await store_call(self.db.get(db_models.Users, user_id), "get_user_by_id")

    async def get_student_by_tenant_code(self, tenant_code: str) -> db_models.Users | None:
        """
        Fetches the user holding the given tenant code, or None.
        tenant_code is unique, so at most one row can match.
        """
        log.info(f"Fetching user by tenant code: {tenant_code}")
        stmt = select(db_models.Users).filter(db_models.Users.tenant_code == tenant_code).limit(1)
        result = await store_call(self.db.execute(stmt), "get_student_by_tenant_code")
        return result.scalars().first()

    async def resolve_student(self, student_key: str | UUID) -> user_models.StudentIdentity:
        """
        Resolves either an internal ID or a tenant code to the student's identity.

        Raises NotFoundError when nothing matches and ValidationFailedError when
        the matched user carries no tenant code (i.e. is not a student).
        """
        user_id = parse_uuid(student_key)
        if user_id is not None:
            user = await self.get_user_by_id(user_id)
        else:
            user = await self.get_student_by_tenant_code(str(student_key))

        if not user:
            log.warning(f"No student found for key '{student_key}'.")
            raise NotFoundError("Student not found")

        if not user.tenant_code or not user.email:
            log.warning(f"User {user.id} has no tenant code or email and cannot hold a finance profile.")
            raise ValidationFailedError("User is missing required student identity fields.")

        return user_models.StudentIdentity.model_validate(user)

