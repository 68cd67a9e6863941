"""Configuration module for the pollution report backend."""

from .database import DatabaseSettings, get_database_settings
from .settings import EmailSettings, Settings, VerificationSettings, get_settings

__all__ = [
    "DatabaseSettings",
    "get_database_settings",
    "EmailSettings",
    "Settings",
    "VerificationSettings",
    "get_settings",
]
