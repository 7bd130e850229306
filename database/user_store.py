"""
SQLAlchemy implementation of the ``UserStore`` the auth flows consume.
"""

from __future__ import annotations

import logging
import uuid
from typing import Optional

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from auth.base import UserStore
from auth.errors import UniqueViolation
from auth.models import UserRecord
from database.models import User

logger = logging.getLogger(__name__)


def _to_record(user: User) -> UserRecord:
    return UserRecord(
        id=str(user.id),
        email=user.email,
        password_hash=user.password_hash,
        created_at=user.created_at,
    )


class SqlUserStore(UserStore):
    """One short session per call; each mutation commits on its own."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def find_by_email(self, email: str) -> Optional[UserRecord]:
        async with self._session_factory() as session:
            result = await session.execute(select(User).where(User.email == email))
            user = result.scalar_one_or_none()
            return _to_record(user) if user is not None else None

    async def insert(self, email: str, password_hash: Optional[str]) -> UserRecord:
        async with self._session_factory() as session:
            user = User(id=uuid.uuid4(), email=email, password_hash=password_hash)
            session.add(user)
            try:
                await session.commit()
            except IntegrityError as exc:
                await session.rollback()
                logger.info("Insert rejected by unique constraint: %s", exc.orig)
                raise UniqueViolation(email) from exc
            return _to_record(user)

    async def update_password(self, user_id: str, password_hash: str) -> int:
        try:
            key = uuid.UUID(str(user_id))
        except ValueError:
            # not a key this table can hold
            return 0
        async with self._session_factory() as session:
            result = await session.execute(
                update(User).where(User.id == key).values(password_hash=password_hash)
            )
            await session.commit()
            return result.rowcount or 0
