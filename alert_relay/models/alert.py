from typing import Optional

from sqlalchemy import Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from alert_relay.db.base import Base, TimestampMixin


class TradingAlert(Base, TimestampMixin):
    """Stored canonical alert."""

    __tablename__ = "trading_alerts"

    # Canonical alert id; the primary key enforces store-wide uniqueness.
    # Free-form fields are unbounded; only enum-valued columns carry a length.
    id: Mapped[str] = mapped_column(String, primary_key=True)
    action: Mapped[str] = mapped_column(String(4), nullable=False)
    symbol: Mapped[str] = mapped_column(String, nullable=False, index=True)
    timeframe: Mapped[str] = mapped_column(String, nullable=False, default="15")
    entry: Mapped[str] = mapped_column(String, nullable=False)
    target: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    stop: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    rr: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    risk: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    message: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    strategy_name: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    raw_message: Mapped[str] = mapped_column(Text, nullable=False)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="active")
    outcome: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)

    # Indexes
    __table_args__ = (
        Index("ix_trading_alerts_status_created", "status", "created_at"),
        Index("ix_trading_alerts_action", "action"),
    )
