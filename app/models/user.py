"""
Market Registry Backend — User SQLAlchemy Model
=================================================

What:  ORM model for the `users` table.
Why:   Every actor (staff member, applicant, vendor) is a row here; the
       `role` column drives the approval workflow.

Table Design Notes:
    - email is UNIQUE: registration maps the constraint violation to HTTP 400
    - password is stored as submitted and compared by equality on login
    - role is never updated after insert (no escalation workflow exists)
"""

from sqlalchemy import Integer, String, text
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base
from app.models.enums import UserRole


class User(Base):
    """An account able to log in and act on records according to its role."""

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    password: Mapped[str] = mapped_column(String(255), nullable=False)
    role: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=UserRole.APPLICANT.value,
        comment="admin, officer, applicant, vendor, director, manager, supervisor",
    )
    status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default="active",
        server_default=text("'active'"),
    )

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email='{self.email}', role='{self.role}')>"
