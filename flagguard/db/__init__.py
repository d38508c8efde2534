"""flagguard SQLAlchemy binding — Record adapter, sessions, flush hook."""

from flagguard.db.base import Base  # noqa: F401
from flagguard.db.events import install_flush_guard, remove_flush_guard  # noqa: F401
from flagguard.db.records import SQLAlchemyRecord  # noqa: F401
from flagguard.db.session import create_session_factory, session_scope  # noqa: F401

__all__ = [
    "Base",
    "SQLAlchemyRecord",
    "install_flush_guard",
    "remove_flush_guard",
    "create_session_factory",
    "session_scope",
]
