"""
User repository.

Data access layer for User model.
"""

from sqlalchemy.ext.asyncio import AsyncSession

from ledger_core.models.user import User
from ledger_core.repositories.base import BaseRepository


class UserRepository(BaseRepository[User]):
    """User repository. Never writes ``balance_cents``."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize user repository."""
        super().__init__(User, session)

    async def get_referrer(self, user: User) -> User | None:
        """Direct upline of ``user`` (None if absent or deleted)."""
        if user.referred_by_id is None:
            return None
        return await self.get_by_id(user.referred_by_id)

    async def count_direct_referrals(self, referrer_id: int) -> int:
        """Count users directly referred by ``referrer_id``."""
        return await self.count(referred_by_id=referrer_id)

    async def get_admins(self) -> list[User]:
        """All admin users (for admin notifications)."""
        return await self.find_by(is_admin=True)
