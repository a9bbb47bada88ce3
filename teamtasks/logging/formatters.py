import logging
from teamtasks.logging.log_levels import LogLevel

DEFAULT_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

LEVEL_FORMATS = {
    LogLevel.ERROR: '❌ [ERROR] %(asctime)s - %(name)s - %(message)s',
    LogLevel.WARNING: '⚠️  [WARNING] %(asctime)s - %(name)s - %(message)s',
    LogLevel.INFO: 'ℹ️  [INFO] %(asctime)s - %(name)s - %(message)s',
    LogLevel.REQUEST: '🌐 [REQUEST] %(asctime)s - %(message)s',
    LogLevel.SLOW: '🐌 [SLOW] %(asctime)s - %(name)s - %(message)s',
    LogLevel.GREAT: '✅ [GREAT] %(asctime)s - %(name)s - %(message)s',
}


class LevelAwareFormatter(logging.Formatter):
    """Picks the format string from the record's custom ``log_level``."""

    def __init__(self):
        super().__init__(DEFAULT_FORMAT)
        self._formatters = {
            level: logging.Formatter(fmt) for level, fmt in LEVEL_FORMATS.items()
        }

    def format(self, record: logging.LogRecord) -> str:
        level = getattr(record, "log_level", None)
        formatter = self._formatters.get(level)
        if formatter is None:
            return super().format(record)
        return formatter.format(record)


