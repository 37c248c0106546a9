"""Core app configuration and database."""

from newsboard.core.config import get_settings, settings
from newsboard.core.database import get_db

__all__ = ["get_settings", "settings", "get_db"]
