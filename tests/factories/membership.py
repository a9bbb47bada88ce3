"""
Membership factory for test data generation.
"""

import factory
from datetime import datetime, timedelta, timezone
from sqlalchemy.ext.asyncio import AsyncSession

from teamtasks.models.membership import Membership


class MembershipFactory(factory.Factory):
    """
    Factory for Membership model (user <-> team with a role).
    """

    class Meta:
        model = Membership

    team_id = None  # Must be set
    user_id = None  # Must be set
    role = "member"
    # Strictly increasing so listing order by joined_at is deterministic
    joined_at = factory.Sequence(lambda n: datetime.now(timezone.utc) + timedelta(seconds=n))

    @classmethod
    async def create_async(
        cls,
        db_session: AsyncSession,
        **kwargs
    ) -> Membership:
        """
        Create membership in database asynchronously.

        Usage:
            membership = await MembershipFactory.create_async(
                db_session,
                team_id=team.id,
                user_id=user.id,
                role="admin"
            )
        """
        for field in ("team_id", "user_id"):
            if field not in kwargs:
                raise ValueError(f"{field} is required for MembershipFactory")

        instance = cls.build(**kwargs)
        db_session.add(instance)
        await db_session.flush()
        return instance
