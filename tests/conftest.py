"""
flagguard Test Suite — Shared fixtures and configuration.

Run:  pytest tests/ -v
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Mapping, Optional

import pytest
from sqlalchemy import Boolean, Integer, String, create_engine
from sqlalchemy.orm import Mapped, mapped_column, sessionmaker

from flagguard.db.base import Base


# ---------------------------------------------------------------------------
# Global state isolation
# ---------------------------------------------------------------------------

@pytest.fixture(autouse=True)
def _isolate_globals():
    """Reset config / context / logging singletons between tests."""
    from flagguard.engine.config import reset_config
    from flagguard.engine.context import clear_execution_context
    from flagguard.engine.logging import shutdown_logging

    reset_config()
    clear_execution_context()
    shutdown_logging()
    yield
    reset_config()
    clear_execution_context()
    shutdown_logging()
    root = logging.getLogger("flagguard")
    for handler in list(root.handlers):
        if getattr(handler, "_flagguard_handler", False):
            root.removeHandler(handler)


# ---------------------------------------------------------------------------
# In-memory Record double
# ---------------------------------------------------------------------------

class FakeRecord:
    """Record double: attributes from a dict, counts from a dict keyed by (attr, value)."""

    def __init__(
        self,
        record_type: str = "Poll",
        attributes: Optional[Dict[str, Any]] = None,
        counts: Optional[Dict[tuple, int]] = None,
    ):
        self._record_type = record_type
        self.attributes = dict(attributes or {})
        self.counts = dict(counts or {})
        self.queries: List[Dict[str, Any]] = []

    @property
    def record_type(self) -> str:
        return self._record_type

    def get_attribute(self, name: str) -> Any:
        return self.attributes[name]

    def count_by_attributes(self, filters: Mapping[str, Any]) -> int:
        self.queries.append(dict(filters))
        ((attr, value),) = filters.items()
        return self.counts.get((attr, value), 0)


@pytest.fixture
def make_record():
    """Factory: make_record(is_featured=True, counts={("is_featured", True): 1})."""
    def _make(record_type: str = "Poll", counts: Optional[Dict[tuple, int]] = None, **attributes: Any):
        return FakeRecord(record_type=record_type, attributes=attributes, counts=counts)
    return _make


# ---------------------------------------------------------------------------
# SQLite-backed models
# ---------------------------------------------------------------------------

class Poll(Base):
    __tablename__ = "polls"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    title: Mapped[str] = mapped_column(String(120))
    is_promoted: Mapped[bool] = mapped_column(Boolean, default=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)


class Banner(Base):
    __tablename__ = "banners"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    is_promoted: Mapped[bool] = mapped_column(Boolean, default=False)


@pytest.fixture
def poll_model():
    return Poll


@pytest.fixture
def banner_model():
    return Banner


@pytest.fixture
def db_engine():
    engine = create_engine("sqlite://")
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(db_engine):
    return sessionmaker(bind=db_engine)


@pytest.fixture
def db_session(session_factory):
    session = session_factory()
    yield session
    session.rollback()
    session.close()


@pytest.fixture
def sqlite_file_url(tmp_path):
    """File-backed SQLite URL with the polls/banners tables created."""
    url = f"sqlite:///{tmp_path / 'flagguard.db'}"
    engine = create_engine(url)
    Base.metadata.create_all(engine)
    engine.dispose()
    return url
