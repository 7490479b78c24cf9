"""
Market Registry Backend — Statistics Service
==============================================

What:  Dashboard and report figures.
How:   Loads every market and vendor and counts in Python, the same way the
       dashboard derives them from the list endpoints. compute_stats() is
       pure so it can be tested without a database.
"""

import logging
from collections import Counter
from typing import Iterable

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.exceptions import DatabaseError
from app.models.enums import MarketStatus, MarketType, VendorStatus
from app.models.market import Market
from app.models.vendor import Vendor
from app.schemas.stats import StatsResponse

logger = logging.getLogger(__name__)


def compute_stats(markets: Iterable, vendors: Iterable) -> StatsResponse:
    """
    Args:
        markets: objects with .status, .type and .stalls_count
        vendors: objects with .status
    """
    markets = list(markets)
    vendors = list(vendors)

    market_status = Counter(m.status for m in markets)
    market_type = Counter(m.type for m in markets)
    vendor_status = Counter(v.status for v in vendors)

    total_stalls = sum(m.stalls_count or 0 for m in markets)
    occupied = vendor_status[VendorStatus.APPROVED.value]

    return StatsResponse(
        total_markets=len(markets),
        markets_by_status={s.value: market_status[s.value] for s in MarketStatus},
        markets_by_type={t.value: market_type[t.value] for t in MarketType},
        total_vendors=len(vendors),
        vendors_by_status={s.value: vendor_status[s.value] for s in VendorStatus},
        active_vendors=occupied,
        pending_applications=(
            market_status[MarketStatus.PENDING.value]
            + vendor_status[VendorStatus.PENDING.value]
        ),
        total_stalls=total_stalls,
        occupied_stalls=occupied,
        available_stalls=total_stalls - occupied,
    )


class StatsService:

    async def get_stats(self, db: AsyncSession) -> StatsResponse:
        try:
            markets = (await db.execute(select(Market))).scalars().all()
            vendors = (await db.execute(select(Vendor))).scalars().all()
        except SQLAlchemyError as e:
            logger.error("Database error computing stats: %s", str(e), exc_info=True)
            raise DatabaseError(message="Could not compute statistics. Please try again.")
        return compute_stats(markets, vendors)


stats_service = StatsService()
