"""
Market Registry Backend — Vendor Schemas
==========================================

Same aliasing convention as the market schemas: camelCase from the browser
form, snake_case accepted too.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

from app.models.enums import StallType, VendorStatus


class VendorCreateRequest(BaseModel):
    user_id: int = Field(alias="userId")
    market_id: Optional[int] = Field(default=None, alias="marketId")
    full_name: str = Field(alias="fullName", min_length=1)
    national_id: str = Field(alias="nationalId", min_length=1)
    phone: str = Field(min_length=1)
    business_type: str = Field(alias="businessType", min_length=1)
    products: str = Field(min_length=1)
    stall_type: Optional[StallType] = Field(default=StallType.STALL, alias="stallType")

    model_config = {"populate_by_name": True}

    @field_validator("market_id", "stall_type", mode="before")
    @classmethod
    def blank_as_none(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return v


class VendorStatusUpdateRequest(BaseModel):
    """
    stall_no is required (non-blank) when a manager approves; the workflow
    guard enforces that, not this schema.
    """
    status: VendorStatus
    stall_no: Optional[str] = Field(default=None, max_length=50)


class VendorResponse(BaseModel):
    id: int
    ref_no: str
    user_id: int
    market_id: Optional[int] = None
    market_name: Optional[str] = None
    full_name: str
    national_id: str
    phone: str
    business_type: str
    products: str
    stall_type: Optional[str] = None
    stall_no: Optional[str] = None
    status: str
    created_at: datetime

    model_config = {"from_attributes": True}


class VendorDetailResponse(VendorResponse):
    allowed_transitions: List[str] = Field(default_factory=list)
