"""
Market Registry Backend — Market Service
==========================================

What:  Registration, listing, detail and status changes for markets.
How:   Receives the request's AsyncSession for every call; status changes go
       through the workflow guard unless enforcement is switched off.
Who:   Called by the markets routes and by VendorService (market lookups).

Status change flow (PATCH /api/markets/{id}/status):
    ┌──────────┐    ┌──────────────┐    ┌────────────────┐    ┌──────────┐
    │  Load    │───▶│ Resolve      │───▶│ Workflow guard │───▶│  Write   │
    │  market  │    │ acting user  │    │ (role/status)  │    │  status  │
    └──────────┘    └──────────────┘    └────────────────┘    └──────────┘

    Enforcement off: the guard is skipped and any known status is written
    by any caller.
"""

import logging
from typing import List, Optional

from sqlalchemy import desc, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.exceptions import AuthenticationError, DatabaseError, NotFoundError
from app.models.enums import MarketStatus
from app.models.market import Market
from app.models.user import User
from app.schemas.common import CreatedResponse, StatusUpdateResponse
from app.schemas.market import (
    MarketCreateRequest,
    MarketDetailResponse,
    MarketResponse,
)
from app.services.reference import MARKET_PREFIX, generate_reference
from app.services.workflow import ENTITY_MARKET, allowed_transitions, authorize_transition

logger = logging.getLogger(__name__)


class MarketService:
    """
    Responsibilities:
        - register_market(): insert a pending market with a fresh reference
        - list_markets(): all markets, newest first
        - get_market(): one market plus the caller's available transitions
        - update_status(): guarded status change

    Error Handling Strategy:
        SQLAlchemy errors are wrapped in DatabaseError with a fixed message.
        Workflow and lookup errors propagate unchanged.
    """

    async def register_market(
        self, db: AsyncSession, data: MarketCreateRequest
    ) -> CreatedResponse:
        """
        Create a market registration in status 'pending'.

        Returns:
            CreatedResponse carrying the generated MKT- reference.

        Raises:
            DatabaseError: insert failed (including a reference collision)
        """
        market = Market(
            ref_no=generate_reference(MARKET_PREFIX),
            name=data.name,
            owner_name=data.owner_name,
            owner_id_no=data.owner_id_no,
            owner_phone=data.owner_phone,
            owner_email=data.owner_email,
            owner_address=data.owner_address,
            address=data.address,
            type=data.type.value,
            size=data.size,
            stalls_count=data.stalls_count,
            year_established=data.year_established,
            operating_days=data.operating_days,
            operating_hours=data.operating_hours,
            manager_name=data.manager_name,
            manager_contact=data.manager_contact,
            status=MarketStatus.PENDING.value,
        )
        try:
            db.add(market)
            await db.flush()
            await db.commit()
        except SQLAlchemyError as e:
            await db.rollback()
            logger.error("Failed to register market: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="Failed to register market",
                context={"error_type": type(e).__name__},
            )

        logger.info("Market %s registered as %s", market.id, market.ref_no)
        return CreatedResponse(id=market.id, ref_no=market.ref_no, status=market.status)

    async def list_markets(self, db: AsyncSession) -> List[MarketResponse]:
        """All markets ordered by created_at DESC (id DESC breaks ties)."""
        try:
            result = await db.execute(
                select(Market).order_by(desc(Market.created_at), desc(Market.id))
            )
            markets = result.scalars().all()
        except SQLAlchemyError as e:
            logger.error("Database error listing markets: %s", str(e), exc_info=True)
            raise DatabaseError(message="Could not retrieve markets. Please try again.")
        return [MarketResponse.model_validate(m) for m in markets]

    async def load_market(self, db: AsyncSession, market_id: int) -> Market:
        """Fetch the ORM row or raise NotFoundError."""
        try:
            market = await db.get(Market, market_id)
        except SQLAlchemyError as e:
            logger.error("Database error fetching market %s: %s", market_id, str(e))
            raise DatabaseError(message="Could not retrieve the market. Please try again.")
        if market is None:
            raise NotFoundError(resource="market", resource_id=str(market_id))
        return market

    async def get_market(
        self, db: AsyncSession, market_id: int, actor: Optional[User] = None
    ) -> MarketDetailResponse:
        market = await self.load_market(db, market_id)
        detail = MarketDetailResponse.model_validate(market)
        if actor is not None:
            detail.allowed_transitions = allowed_transitions(
                actor.role, ENTITY_MARKET, market.status
            )
        return detail

    async def update_status(
        self,
        db: AsyncSession,
        market_id: int,
        new_status: MarketStatus,
        actor: Optional[User],
        enforce: bool = True,
    ) -> StatusUpdateResponse:
        """
        Move a market to `new_status`.

        Args:
            db: Async database session
            market_id: Market primary key
            new_status: Requested status
            actor: Acting user (required when enforce is True)
            enforce: Apply the workflow guard

        Raises:
            NotFoundError: unknown market (→ 404)
            AuthenticationError: enforcement on and no acting user (→ 401)
            InvalidTransitionError / PermissionDeniedError: guard refused (→ 409/403)
            DatabaseError: write failed (→ 500)
        """
        market = await self.load_market(db, market_id)
        previous = market.status

        if enforce:
            if actor is None:
                raise AuthenticationError(message="An acting user is required to change status")
            authorize_transition(actor.role, ENTITY_MARKET, previous, new_status)

        market.status = new_status.value
        try:
            await db.flush()
            await db.commit()
        except SQLAlchemyError as e:
            await db.rollback()
            logger.error("Failed to update market %s status: %s", market_id, str(e))
            raise DatabaseError(
                message="Failed to update market status",
                context={"market_id": market_id},
            )

        logger.info(
            "Market %s: %s → %s by user %s",
            market.ref_no,
            previous,
            market.status,
            actor.id if actor is not None else "anonymous",
        )
        return StatusUpdateResponse(id=market.id, status=market.status)


market_service = MarketService()
