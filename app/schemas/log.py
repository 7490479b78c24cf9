"""Read-only audit log entries, joined with the acting user's name."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel


class LogResponse(BaseModel):
    id: int
    user_id: Optional[int] = None
    user_name: Optional[str] = None
    action: str
    details: Optional[str] = None
    timestamp: datetime

    model_config = {"from_attributes": True}
