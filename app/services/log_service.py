"""Read-only access to the audit log table."""

import logging
from typing import List

from sqlalchemy import desc, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.exceptions import DatabaseError
from app.models.log import Log
from app.models.user import User
from app.schemas.log import LogResponse

logger = logging.getLogger(__name__)

LOG_LIMIT = 100


class LogService:

    async def list_logs(self, db: AsyncSession, limit: int = LOG_LIMIT) -> List[LogResponse]:
        """Latest `limit` entries, newest first, with the user's name."""
        try:
            result = await db.execute(
                select(Log, User.name.label("user_name"))
                .outerjoin(User, Log.user_id == User.id)
                .order_by(desc(Log.timestamp), desc(Log.id))
                .limit(limit)
            )
            rows = result.all()
        except SQLAlchemyError as e:
            logger.error("Database error listing logs: %s", str(e), exc_info=True)
            raise DatabaseError(message="Could not retrieve logs. Please try again.")

        entries = []
        for log, user_name in rows:
            entry = LogResponse.model_validate(log)
            entry.user_name = user_name
            entries.append(entry)
        return entries


log_service = LogService()
