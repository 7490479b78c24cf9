"""
Market Registry Backend — Dashboard Statistics Schema
=======================================================

Figures shown on the dashboard and reports pages. All are plain counts over
the full market and vendor tables.
"""

from typing import Dict

from pydantic import BaseModel, Field


class StatsResponse(BaseModel):
    total_markets: int = Field(description="Number of market registrations")
    markets_by_status: Dict[str, int] = Field(description="Market count per workflow status")
    markets_by_type: Dict[str, int] = Field(description="Market count per type (Public, Private, Community)")
    total_vendors: int
    vendors_by_status: Dict[str, int]
    active_vendors: int = Field(description="Approved vendors")
    pending_applications: int = Field(description="Pending markets plus pending vendors")
    total_stalls: int = Field(description="Sum of stalls_count over all markets")
    occupied_stalls: int = Field(description="Approved vendors holding a stall")
    available_stalls: int = Field(description="total_stalls - occupied_stalls")
