"""
Market Registry Backend — Market Route Handlers
=================================================

What:  Market registration, listing, detail and status changes.
Who:   Called by the browser dashboard and the registration form.

Status changes identify the acting user by the X-User-ID header. With
workflow enforcement on (default) the workflow guard decides; with it off
the requested status is written unconditionally.
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, Path
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import Settings
from app.database import get_db_session
from app.dependencies import get_actor, get_settings
from app.models.user import User
from app.schemas.common import CreatedResponse, ErrorResponse, StatusUpdateResponse
from app.schemas.market import (
    MarketCreateRequest,
    MarketDetailResponse,
    MarketResponse,
    MarketStatusUpdateRequest,
)
from app.services.market_service import market_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/markets", tags=["Markets"])


@router.get(
    "",
    response_model=List[MarketResponse],
    summary="List all markets, newest first",
)
async def list_markets(db: AsyncSession = Depends(get_db_session)) -> List[MarketResponse]:
    return await market_service.list_markets(db)


@router.post(
    "",
    response_model=CreatedResponse,
    status_code=201,
    responses={500: {"description": "Failed to register market", "model": ErrorResponse}},
    summary="Register a market (status starts as pending)",
)
async def register_market(
    body: MarketCreateRequest,
    db: AsyncSession = Depends(get_db_session),
) -> CreatedResponse:
    return await market_service.register_market(db, body)


@router.get(
    "/{market_id}",
    response_model=MarketDetailResponse,
    responses={404: {"description": "Market not found", "model": ErrorResponse}},
    summary="Get one market and the caller's available transitions",
)
async def get_market(
    market_id: int = Path(ge=1),
    actor: Optional[User] = Depends(get_actor),
    db: AsyncSession = Depends(get_db_session),
) -> MarketDetailResponse:
    return await market_service.get_market(db, market_id, actor=actor)


@router.patch(
    "/{market_id}/status",
    response_model=StatusUpdateResponse,
    responses={
        400: {"description": "Invalid request", "model": ErrorResponse},
        401: {"description": "Acting user missing or unknown", "model": ErrorResponse},
        403: {"description": "Role may not perform this transition", "model": ErrorResponse},
        404: {"description": "Market not found", "model": ErrorResponse},
        409: {"description": "Transition not allowed from current status", "model": ErrorResponse},
    },
    summary="Change a market's workflow status",
)
async def update_market_status(
    body: MarketStatusUpdateRequest,
    market_id: int = Path(ge=1),
    actor: Optional[User] = Depends(get_actor),
    settings: Settings = Depends(get_settings),
    db: AsyncSession = Depends(get_db_session),
) -> StatusUpdateResponse:
    return await market_service.update_status(
        db,
        market_id,
        body.status,
        actor,
        enforce=settings.workflow_enforcement,
    )
