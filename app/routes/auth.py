"""
Market Registry Backend — Auth Route Handlers
===============================================

POST /api/auth/login     {email, password}                → user | 401
POST /api/auth/register  {name, email, password, role?}   → user | 400
"""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db_session
from app.schemas.common import ErrorResponse
from app.schemas.user import LoginRequest, RegisterRequest, UserResponse
from app.services.auth_service import auth_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["Auth"])


@router.post(
    "/login",
    response_model=UserResponse,
    responses={401: {"description": "Invalid credentials", "model": ErrorResponse}},
    summary="Log in with email and password",
)
async def login(
    body: LoginRequest,
    db: AsyncSession = Depends(get_db_session),
) -> UserResponse:
    return await auth_service.login(db, body.email, body.password)


@router.post(
    "/register",
    response_model=UserResponse,
    responses={400: {"description": "Email already exists", "model": ErrorResponse}},
    summary="Create an account (role defaults to applicant)",
)
async def register(
    body: RegisterRequest,
    db: AsyncSession = Depends(get_db_session),
) -> UserResponse:
    return await auth_service.register(db, body)
