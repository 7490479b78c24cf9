"""Read-only listings for the admin pages: users and audit logs."""

from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db_session
from app.schemas.log import LogResponse
from app.schemas.user import UserResponse
from app.services.auth_service import auth_service
from app.services.log_service import log_service

router = APIRouter(prefix="/api", tags=["Administration"])


@router.get("/users", response_model=List[UserResponse], summary="List user accounts")
async def list_users(db: AsyncSession = Depends(get_db_session)) -> List[UserResponse]:
    return await auth_service.list_users(db)


@router.get("/logs", response_model=List[LogResponse], summary="Latest 100 audit log entries")
async def list_logs(db: AsyncSession = Depends(get_db_session)) -> List[LogResponse]:
    return await log_service.list_logs(db)
