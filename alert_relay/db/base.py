"""
Declarative base and shared column mixins for ORM models.
"""

from datetime import datetime

from sqlalchemy import DateTime
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from alert_relay.utils.time_utils import get_utc_now


class Base(DeclarativeBase):
    """Declarative base for all alert relay tables."""


class TimestampMixin:
    """created_at / updated_at columns, stamped in UTC by the application."""

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=get_utc_now,
        nullable=False,
        index=True
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=get_utc_now,
        onupdate=get_utc_now,
        nullable=False
    )
