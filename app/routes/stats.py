"""Dashboard statistics route."""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db_session
from app.schemas.stats import StatsResponse
from app.services.stats_service import stats_service

router = APIRouter(prefix="/api", tags=["Statistics"])


@router.get(
    "/stats",
    response_model=StatsResponse,
    summary="Counts for the dashboard and reports pages",
)
async def get_stats(db: AsyncSession = Depends(get_db_session)) -> StatsResponse:
    return await stats_service.get_stats(db)
