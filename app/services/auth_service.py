"""
Market Registry Backend — Auth Service
========================================

What:  Login, self-registration, user lookup and the initial staff seed.
How:   Plain password equality against the users table. Sessions are passed
       in by the caller for every operation.
Who:   Called by the auth/users routes, the acting-user dependency and the
       application lifespan (seeding).
"""

import logging
from typing import List, Optional

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.exceptions import AuthenticationError, DatabaseError, ValidationError
from app.models.enums import UserRole
from app.models.user import User
from app.schemas.user import RegisterRequest, UserResponse

logger = logging.getLogger(__name__)


# Fixed staff accounts created on first start (name, email, password, role)
DEFAULT_USERS = (
    ("Admin User", "admin@kcca.go.ug", "admin123", UserRole.ADMIN),
    ("Director Gender", "director@kcca.go.ug", "director123", UserRole.DIRECTOR),
    ("Manager Markets", "manager@kcca.go.ug", "manager123", UserRole.MANAGER),
    ("Market Supervisor", "supervisor@kcca.go.ug", "supervisor123", UserRole.SUPERVISOR),
    ("KCCA Officer", "officer@kcca.go.ug", "officer123", UserRole.OFFICER),
)


class AuthService:
    """
    Responsibilities:
        - login(): credential check → UserResponse or AuthenticationError
        - register(): create an account, duplicate email → ValidationError
        - get_user(): resolve the acting user for workflow checks
        - list_users(): admin listing without passwords
        - seed_default_users(): first-start staff accounts
    """

    async def login(self, db: AsyncSession, email: str, password: str) -> UserResponse:
        try:
            result = await db.execute(
                select(User).where(User.email == email, User.password == password)
            )
            user = result.scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.error("Database error during login: %s", str(e))
            raise DatabaseError(message="Login failed. Please try again.")

        if user is None:
            logger.info("Failed login attempt for %s", email)
            raise AuthenticationError(message="Invalid credentials")

        logger.info("User %s logged in (role=%s)", user.id, user.role)
        return UserResponse.model_validate(user)

    async def register(self, db: AsyncSession, data: RegisterRequest) -> UserResponse:
        """
        Create a new account.

        Uniqueness of the email is left to the database constraint; the
        violation surfaces as IntegrityError on flush.
        """
        user = User(
            name=data.name,
            email=data.email,
            password=data.password,
            role=data.role.value,
        )
        try:
            db.add(user)
            await db.flush()
            await db.commit()
        except IntegrityError:
            await db.rollback()
            raise ValidationError(message="Email already exists", field="email")
        except SQLAlchemyError as e:
            await db.rollback()
            logger.error("Database error registering user: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="Failed to register user",
                context={"error_type": type(e).__name__},
            )

        logger.info("Registered user %s (role=%s)", user.id, user.role)
        return UserResponse.model_validate(user)

    async def get_user(self, db: AsyncSession, user_id: int) -> Optional[User]:
        try:
            return await db.get(User, user_id)
        except SQLAlchemyError as e:
            logger.error("Database error fetching user %s: %s", user_id, str(e))
            raise DatabaseError(message="Could not retrieve the user. Please try again.")

    async def list_users(self, db: AsyncSession) -> List[UserResponse]:
        try:
            result = await db.execute(select(User).order_by(User.id))
            users = result.scalars().all()
        except SQLAlchemyError as e:
            logger.error("Database error listing users: %s", str(e), exc_info=True)
            raise DatabaseError(message="Could not retrieve users. Please try again.")
        return [UserResponse.model_validate(u) for u in users]

    async def seed_default_users(self, db: AsyncSession) -> int:
        """Insert DEFAULT_USERS when the users table is empty. Returns rows added."""
        result = await db.execute(select(func.count(User.id)))
        if (result.scalar() or 0) > 0:
            return 0

        for name, email, password, role in DEFAULT_USERS:
            db.add(User(name=name, email=email, password=password, role=role.value))
        await db.commit()
        logger.info("Seeded %d default staff accounts", len(DEFAULT_USERS))
        return len(DEFAULT_USERS)


auth_service = AuthService()
