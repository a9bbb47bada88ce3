from sqlalchemy.orm import declarative_base

Base = declarative_base()

# Import the models so they are registered on Base.metadata
from teamtasks.models import user, team, membership, task, notification, user_session  # noqa: E402,F401
from teamtasks.models import api_access_log  # noqa: E402,F401
