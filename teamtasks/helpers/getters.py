from teamtasks.core.config import settings


def isDebugMode() -> bool:
    """True outside production (development and test runs)."""
    return settings.MODE != "production"
