"""Core module for the Chain Analytics engine."""

from .config import Settings, get_settings
from .database import Base, create_db_engine, create_session_factory, session_scope, init_db

__all__ = [
    "Settings",
    "get_settings",
    "Base",
    "create_db_engine",
    "create_session_factory",
    "session_scope",
    "init_db"
]
