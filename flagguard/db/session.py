"""
flagguard Database Session helpers.

Used by the CLI and by hosts that let flagguard build their engine from
flagguard.yaml.
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Generator, Optional

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from flagguard.engine.config import DatabaseConfig


def create_db_engine(config: Optional[DatabaseConfig] = None, url: Optional[str] = None) -> Engine:
    """Create an engine from DatabaseConfig; `url` overrides config.url."""
    config = config or DatabaseConfig()
    return create_engine(
        url or config.url,
        pool_pre_ping=config.pool_pre_ping,
        echo=config.echo,
    )


def create_session_factory(
    config: Optional[DatabaseConfig] = None,
    url: Optional[str] = None,
) -> sessionmaker:
    return sessionmaker(bind=create_db_engine(config, url=url))


@contextmanager
def session_scope(factory: sessionmaker) -> Generator[Session, None, None]:
    """
    Context manager for sessions with auto-commit/rollback.

    Usage:
        with session_scope(factory) as session:
            session.add(poll)
    """
    session = factory()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()
