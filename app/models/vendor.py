"""
Market Registry Backend — Vendor SQLAlchemy Model
===================================================

What:  ORM model for the `vendors` table: one row per stall application.

Lifecycle:
    pending → verified (supervisor) → approved with stall_no (manager)

    rejected is a valid stored status but only reachable with workflow
    enforcement switched off.
"""

from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import DateTime, ForeignKey, Index, Integer, String, Text, text
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base
from app.models.enums import VendorStatus


class Vendor(Base):
    """A person's application for a stall, optionally in a chosen market."""

    __tablename__ = "vendors"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    ref_no: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        unique=True,
        comment="Human-readable reference, VND-XXXXXX",
    )
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id"), nullable=False)
    market_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("markets.id"), nullable=True
    )
    full_name: Mapped[str] = mapped_column(String(255), nullable=False)
    national_id: Mapped[str] = mapped_column(String(100), nullable=False)
    phone: Mapped[str] = mapped_column(String(50), nullable=False)
    business_type: Mapped[str] = mapped_column(String(100), nullable=False)
    products: Mapped[str] = mapped_column(Text, nullable=False)
    stall_type: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)

    # Set only when the manager approves the application
    stall_no: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)

    status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=VendorStatus.PENDING.value,
        server_default=text("'pending'"),
        comment="pending, verified, approved, rejected",
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        server_default=text("CURRENT_TIMESTAMP"),
    )

    __table_args__ = (
        Index("idx_vendors_created_at", "created_at"),
    )

    def __repr__(self) -> str:
        return f"<Vendor(id={self.id}, ref_no='{self.ref_no}', status='{self.status}')>"
