"""
Database module for socialgraph
"""

from .connection import get_async_session, init_database, session_scope

__all__ = ["get_async_session", "init_database", "session_scope"]
