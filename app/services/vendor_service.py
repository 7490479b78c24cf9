"""
Market Registry Backend — Vendor Service
==========================================

What:  Stall applications: registration, listing (joined with the market
       name), detail and guarded status changes including stall allocation.
Who:   Called by the vendors routes.

Registration checks:
    - the applying user must exist
    - a chosen market must exist and be approved (the browser form only
      offers approved markets)
"""

import logging
from typing import List, Optional

from sqlalchemy import desc, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.exceptions import AuthenticationError, DatabaseError, NotFoundError, ValidationError
from app.models.enums import MarketStatus, VendorStatus
from app.models.market import Market
from app.models.user import User
from app.models.vendor import Vendor
from app.schemas.common import CreatedResponse, StatusUpdateResponse
from app.schemas.vendor import (
    VendorCreateRequest,
    VendorDetailResponse,
    VendorResponse,
)
from app.services.reference import VENDOR_PREFIX, generate_reference
from app.services.workflow import ENTITY_VENDOR, allowed_transitions, authorize_transition

logger = logging.getLogger(__name__)


class VendorService:

    async def register_vendor(
        self, db: AsyncSession, data: VendorCreateRequest
    ) -> CreatedResponse:
        """
        Create a vendor application in status 'pending' with a VND- reference.

        Raises:
            ValidationError: unknown user, unknown or unapproved market (→ 400)
            DatabaseError: insert failed (→ 500)
        """
        try:
            user = await db.get(User, data.user_id)
            market = await db.get(Market, data.market_id) if data.market_id is not None else None
        except SQLAlchemyError as e:
            logger.error("Database error validating vendor application: %s", str(e))
            raise DatabaseError(message="Failed to register vendor")

        if user is None:
            raise ValidationError(message="Applicant account does not exist", field="userId")
        if data.market_id is not None:
            if market is None:
                raise ValidationError(message="Selected market does not exist", field="marketId")
            if market.status != MarketStatus.APPROVED.value:
                raise ValidationError(
                    message="Vendors can only apply to approved markets",
                    field="marketId",
                    context={"market_status": market.status},
                )

        vendor = Vendor(
            ref_no=generate_reference(VENDOR_PREFIX),
            user_id=data.user_id,
            market_id=data.market_id,
            full_name=data.full_name,
            national_id=data.national_id,
            phone=data.phone,
            business_type=data.business_type,
            products=data.products,
            stall_type=data.stall_type.value if data.stall_type else None,
            status=VendorStatus.PENDING.value,
        )
        try:
            db.add(vendor)
            await db.flush()
            await db.commit()
        except SQLAlchemyError as e:
            await db.rollback()
            logger.error("Failed to register vendor: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="Failed to register vendor",
                context={"error_type": type(e).__name__},
            )

        logger.info("Vendor %s registered as %s", vendor.id, vendor.ref_no)
        return CreatedResponse(id=vendor.id, ref_no=vendor.ref_no, status=vendor.status)

    async def list_vendors(self, db: AsyncSession) -> List[VendorResponse]:
        """
        All vendors, newest first, with the name of their market.

        Query:
            SELECT v.*, m.name AS market_name
            FROM vendors v LEFT JOIN markets m ON v.market_id = m.id
            ORDER BY v.created_at DESC
        """
        try:
            result = await db.execute(
                select(Vendor, Market.name.label("market_name"))
                .outerjoin(Market, Vendor.market_id == Market.id)
                .order_by(desc(Vendor.created_at), desc(Vendor.id))
            )
            rows = result.all()
        except SQLAlchemyError as e:
            logger.error("Database error listing vendors: %s", str(e), exc_info=True)
            raise DatabaseError(message="Could not retrieve vendors. Please try again.")

        items = []
        for vendor, market_name in rows:
            item = VendorResponse.model_validate(vendor)
            item.market_name = market_name
            items.append(item)
        return items

    async def load_vendor(self, db: AsyncSession, vendor_id: int) -> Vendor:
        try:
            vendor = await db.get(Vendor, vendor_id)
        except SQLAlchemyError as e:
            logger.error("Database error fetching vendor %s: %s", vendor_id, str(e))
            raise DatabaseError(message="Could not retrieve the vendor. Please try again.")
        if vendor is None:
            raise NotFoundError(resource="vendor", resource_id=str(vendor_id))
        return vendor

    async def get_vendor(
        self, db: AsyncSession, vendor_id: int, actor: Optional[User] = None
    ) -> VendorDetailResponse:
        vendor = await self.load_vendor(db, vendor_id)
        detail = VendorDetailResponse.model_validate(vendor)
        if vendor.market_id is not None:
            try:
                market = await db.get(Market, vendor.market_id)
            except SQLAlchemyError as e:
                logger.error("Database error fetching market of vendor %s: %s", vendor_id, str(e))
                raise DatabaseError(message="Could not retrieve the vendor. Please try again.")
            detail.market_name = market.name if market is not None else None
        if actor is not None:
            detail.allowed_transitions = allowed_transitions(
                actor.role, ENTITY_VENDOR, vendor.status
            )
        return detail

    async def update_status(
        self,
        db: AsyncSession,
        vendor_id: int,
        new_status: VendorStatus,
        actor: Optional[User],
        stall_no: Optional[str] = None,
        enforce: bool = True,
    ) -> StatusUpdateResponse:
        """
        Move a vendor to `new_status`, allocating a stall on approval.

        With enforcement on, the stall number stored is the one returned by
        the guard (trimmed, only for the approval rule). With enforcement off
        any non-blank stall_no supplied is stored alongside the status.
        """
        vendor = await self.load_vendor(db, vendor_id)
        previous = vendor.status

        if enforce:
            if actor is None:
                raise AuthenticationError(message="An acting user is required to change status")
            decision = authorize_transition(
                actor.role, ENTITY_VENDOR, previous, new_status, stall_no=stall_no
            )
            if decision.stall_no is not None:
                vendor.stall_no = decision.stall_no
        elif stall_no and stall_no.strip():
            vendor.stall_no = stall_no.strip()

        vendor.status = new_status.value
        try:
            await db.flush()
            await db.commit()
        except SQLAlchemyError as e:
            await db.rollback()
            logger.error("Failed to update vendor %s status: %s", vendor_id, str(e))
            raise DatabaseError(
                message="Failed to update vendor status",
                context={"vendor_id": vendor_id},
            )

        logger.info(
            "Vendor %s: %s → %s (stall=%s) by user %s",
            vendor.ref_no,
            previous,
            vendor.status,
            vendor.stall_no,
            actor.id if actor is not None else "anonymous",
        )
        return StatusUpdateResponse(id=vendor.id, status=vendor.status, stall_no=vendor.stall_no)


vendor_service = VendorService()
