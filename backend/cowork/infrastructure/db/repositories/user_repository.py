"""
User Repository

Read access to the ``users`` table: staff lookup for auth and the
customer directory.
"""

from typing import List, Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from cowork.domain.models import UserRole
from cowork.infrastructure.db.models.user import User
from cowork.infrastructure.db.repositories.base_repository import BaseRepository


class UserRepository(BaseRepository[User, User]):

    def __init__(self, session: AsyncSession):
        super().__init__(User, session)

    async def get_user(self, user_id: UUID) -> Optional[User]:
        return await self.get_by_id(user_id)

    async def list_customers(self) -> List[User]:
        """All customers ordered by name."""
        async with self._store_operation("read"):
            stmt = (
                select(User)
                .where(User.role == UserRole.CUSTOMER.value)
                .order_by(User.name.asc())
            )
            result = await self.session.execute(stmt)
            return list(result.scalars().all())
