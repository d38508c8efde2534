"""
flagguard Database Base — SQLAlchemy declarative base for host models.

Hosts may map their models on their own base; validators only need the
mapped instance and a Session (see flagguard.db.records).
"""

from __future__ import annotations

from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """SQLAlchemy declarative base for flagguard-managed models."""
    pass
