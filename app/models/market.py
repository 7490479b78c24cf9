"""
Market Registry Backend — Market SQLAlchemy Model
===================================================

What:  ORM model for the `markets` table: one row per market registration.

Lifecycle:
    1. Created by an applicant (status = 'pending', fresh MKT- reference)
    2. Manager recommends it (status = 'recommended')
    3. Director approves or rejects it (terminal)
    Only approved markets can receive vendor applications.

Index on created_at:
    Listings always sort newest first.
"""

from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import DateTime, Float, Index, Integer, String, Text, text
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base
from app.models.enums import MarketStatus


class Market(Base):
    """A trading site application submitted by its owner."""

    __tablename__ = "markets"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    ref_no: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        unique=True,
        comment="Human-readable reference, MKT-XXXXXX",
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)

    # ── Owner ─────────────────────────────────────────────────────────────
    owner_name: Mapped[str] = mapped_column(String(255), nullable=False)
    owner_id_no: Mapped[str] = mapped_column(String(100), nullable=False)
    owner_phone: Mapped[str] = mapped_column(String(50), nullable=False)
    owner_email: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    owner_address: Mapped[str] = mapped_column(Text, nullable=False)

    # ── Site ──────────────────────────────────────────────────────────────
    address: Mapped[str] = mapped_column(Text, nullable=False)
    type: Mapped[str] = mapped_column(
        String(20), nullable=False, comment="Private, Public, Community"
    )
    size: Mapped[float] = mapped_column(Float, nullable=False, comment="Square meters")
    stalls_count: Mapped[int] = mapped_column(Integer, nullable=False)
    year_established: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)

    # ── Operations ────────────────────────────────────────────────────────
    operating_days: Mapped[str] = mapped_column(String(100), nullable=False)
    operating_hours: Mapped[str] = mapped_column(String(100), nullable=False)
    manager_name: Mapped[str] = mapped_column(String(255), nullable=False)
    manager_contact: Mapped[str] = mapped_column(String(100), nullable=False)

    status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=MarketStatus.PENDING.value,
        server_default=text("'pending'"),
        comment="pending, recommended, approved, rejected",
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        server_default=text("CURRENT_TIMESTAMP"),
    )

    __table_args__ = (
        Index("idx_markets_created_at", "created_at"),
    )

    def __repr__(self) -> str:
        return f"<Market(id={self.id}, ref_no='{self.ref_no}', status='{self.status}')>"
