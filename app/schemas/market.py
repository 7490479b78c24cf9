"""
Market Registry Backend — Market Schemas
==========================================

What:  Request/response models for market registration and review.

Field naming:
    The browser client posts camelCase form fields (marketName, ownerId,
    stallsCount, ...). Each request field carries that name as its alias and
    populate_by_name lets API users send the snake_case column names instead.
    Blank strings from optional form inputs are read as "not supplied".
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

from app.models.enums import MarketStatus, MarketType


class MarketCreateRequest(BaseModel):
    # ── Owner ─────────────────────────────────────────────────────────────
    owner_name: str = Field(alias="ownerName", min_length=1)
    owner_id_no: str = Field(alias="ownerId", min_length=1)
    owner_phone: str = Field(alias="ownerPhone", min_length=1)
    owner_email: Optional[str] = Field(default=None, alias="ownerEmail")
    owner_address: str = Field(alias="ownerAddress", min_length=1)

    # ── Market ────────────────────────────────────────────────────────────
    name: str = Field(alias="marketName", min_length=1)
    address: str = Field(alias="marketAddress", min_length=1)
    type: MarketType = Field(default=MarketType.PUBLIC, alias="marketType")
    size: float = Field(alias="marketSize", ge=0)
    stalls_count: int = Field(alias="stallsCount", ge=0)
    year_established: Optional[int] = Field(
        default=None, alias="yearEstablished", ge=1800, le=2100
    )

    # ── Operations ────────────────────────────────────────────────────────
    operating_days: str = Field(default="Monday-Sunday", alias="operatingDays", min_length=1)
    operating_hours: str = Field(default="06:00 - 18:00", alias="operatingHours", min_length=1)
    manager_name: str = Field(alias="marketManagerName", min_length=1)
    manager_contact: str = Field(alias="marketManagerContact", min_length=1)

    model_config = {"populate_by_name": True}

    @field_validator("owner_email", "year_established", mode="before")
    @classmethod
    def blank_as_none(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return v


class MarketStatusUpdateRequest(BaseModel):
    status: MarketStatus


class MarketResponse(BaseModel):
    id: int
    ref_no: str
    name: str
    owner_name: str
    owner_id_no: str
    owner_phone: str
    owner_email: Optional[str] = None
    owner_address: str
    address: str
    type: str
    size: float
    stalls_count: int
    year_established: Optional[int] = None
    operating_days: str
    operating_hours: str
    manager_name: str
    manager_contact: str
    status: str
    created_at: datetime

    model_config = {"from_attributes": True}


class MarketDetailResponse(MarketResponse):
    """Single market plus the statuses the calling user may move it to."""
    allowed_transitions: List[str] = Field(default_factory=list)
