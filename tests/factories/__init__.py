"""
Data factories for test data generation.

Factories use factory-boy to create realistic test data with sensible defaults.
All factories support async creation via create_async() method.

Usage:
    from tests.factories import UserFactory, TeamFactory

    # Create user
    user = await UserFactory.create_async(db_session, email="custom@test.com")

    # Create team with its creator as admin
    team = await TeamFactory.create_with_admin_async(db_session, creator=user)
"""

from tests.factories.user import UserFactory
from tests.factories.team import TeamFactory
from tests.factories.membership import MembershipFactory
from tests.factories.task import TaskFactory
from tests.factories.notification import NotificationFactory

__all__ = [
    "UserFactory",
    "TeamFactory",
    "MembershipFactory",
    "TaskFactory",
    "NotificationFactory",
]
