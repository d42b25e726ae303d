"""SQLAlchemy declarative base shared by the ORM rows."""

from __future__ import annotations

from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """Declarative base for exchange-rate and transaction rows."""
