"""
Market Registry Backend — Vendor Route Handlers
=================================================

What:  Vendor applications, listing with market names, detail and status
       changes (verification and approval with stall allocation).
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
from app.schemas.vendor import (
    VendorCreateRequest,
    VendorDetailResponse,
    VendorResponse,
    VendorStatusUpdateRequest,
)
from app.services.vendor_service import vendor_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/vendors", tags=["Vendors"])


@router.get(
    "",
    response_model=List[VendorResponse],
    summary="List all vendors with their market name, newest first",
)
async def list_vendors(db: AsyncSession = Depends(get_db_session)) -> List[VendorResponse]:
    return await vendor_service.list_vendors(db)


@router.post(
    "",
    response_model=CreatedResponse,
    status_code=201,
    responses={
        400: {"description": "Unknown user or market not open to vendors", "model": ErrorResponse},
        500: {"description": "Failed to register vendor", "model": ErrorResponse},
    },
    summary="Submit a vendor application (status starts as pending)",
)
async def register_vendor(
    body: VendorCreateRequest,
    db: AsyncSession = Depends(get_db_session),
) -> CreatedResponse:
    return await vendor_service.register_vendor(db, body)


@router.get(
    "/{vendor_id}",
    response_model=VendorDetailResponse,
    responses={404: {"description": "Vendor not found", "model": ErrorResponse}},
    summary="Get one vendor and the caller's available transitions",
)
async def get_vendor(
    vendor_id: int = Path(ge=1),
    actor: Optional[User] = Depends(get_actor),
    db: AsyncSession = Depends(get_db_session),
) -> VendorDetailResponse:
    return await vendor_service.get_vendor(db, vendor_id, actor=actor)


@router.patch(
    "/{vendor_id}/status",
    response_model=StatusUpdateResponse,
    responses={
        400: {"description": "Stall number missing on approval", "model": ErrorResponse},
        401: {"description": "Acting user missing or unknown", "model": ErrorResponse},
        403: {"description": "Role may not perform this transition", "model": ErrorResponse},
        404: {"description": "Vendor not found", "model": ErrorResponse},
        409: {"description": "Transition not allowed from current status", "model": ErrorResponse},
    },
    summary="Change a vendor's workflow status",
)
async def update_vendor_status(
    body: VendorStatusUpdateRequest,
    vendor_id: int = Path(ge=1),
    actor: Optional[User] = Depends(get_actor),
    settings: Settings = Depends(get_settings),
    db: AsyncSession = Depends(get_db_session),
) -> StatusUpdateResponse:
    return await vendor_service.update_status(
        db,
        vendor_id,
        body.status,
        actor,
        stall_no=body.stall_no,
        enforce=settings.workflow_enforcement,
    )
