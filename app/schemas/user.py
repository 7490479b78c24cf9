"""
Market Registry Backend — User / Auth Schemas
===============================================

What:  API contracts for login, registration and user listings.
Why:   UserResponse never includes the password column.
"""

from pydantic import BaseModel, Field

from app.models.enums import UserRole


class LoginRequest(BaseModel):
    email: str = Field(min_length=1)
    password: str = Field(min_length=1)


class RegisterRequest(BaseModel):
    """
    Self-registration. Role defaults to applicant; the browser form also
    offers the other roles, so any member of the closed set is accepted.
    """
    name: str = Field(min_length=1, max_length=255)
    email: str = Field(min_length=3, max_length=255)
    password: str = Field(min_length=1, max_length=255)
    role: UserRole = Field(default=UserRole.APPLICANT)


class UserResponse(BaseModel):
    id: int
    name: str
    email: str
    role: str
    status: str

    model_config = {"from_attributes": True}
