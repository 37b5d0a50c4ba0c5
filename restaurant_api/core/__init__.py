"""
Core module initialization.
Exports configuration, logging and error utilities.
"""

from restaurant_api.core.config import get_settings, Settings, EnvironmentMode
from restaurant_api.core.errors import (
    AppError,
    ValidationError,
    Unauthorized,
    Forbidden,
    NotFound,
    Conflict,
    InternalError,
)

__all__ = [
    "get_settings",
    "Settings",
    "EnvironmentMode",
    "AppError",
    "ValidationError",
    "Unauthorized",
    "Forbidden",
    "NotFound",
    "Conflict",
    "InternalError",
]
