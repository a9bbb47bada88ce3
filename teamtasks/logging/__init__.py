"""
Project logging helpers.
"""
from teamtasks.logging.custom_logger import CustomLogger, get_logger
from teamtasks.logging.log_levels import LogLevel

__all__ = [
    'CustomLogger',
    'LogLevel',
    'get_logger',
]
