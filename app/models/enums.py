"""
Closed value sets shared by models, schemas and the workflow guard.

Stored in the database as their plain string values.
"""

from enum import Enum


class UserRole(str, Enum):
    """Staff and public roles. Fixed at account creation."""
    ADMIN = "admin"
    OFFICER = "officer"
    APPLICANT = "applicant"
    VENDOR = "vendor"
    DIRECTOR = "director"
    MANAGER = "manager"
    SUPERVISOR = "supervisor"


class MarketStatus(str, Enum):
    """
    PENDING: submitted by an applicant
    RECOMMENDED: recommended by the markets manager
    APPROVED / REJECTED: final decision by the director
    """
    PENDING = "pending"
    RECOMMENDED = "recommended"
    APPROVED = "approved"
    REJECTED = "rejected"


class VendorStatus(str, Enum):
    """
    PENDING: submitted by the vendor
    VERIFIED: checked on site by the market supervisor
    APPROVED / REJECTED: final decision by the markets manager
    """
    PENDING = "pending"
    VERIFIED = "verified"
    APPROVED = "approved"
    REJECTED = "rejected"


class MarketType(str, Enum):
    PRIVATE = "Private"
    PUBLIC = "Public"
    COMMUNITY = "Community"


class StallType(str, Enum):
    STALL = "Stall"
    SHOP = "Shop"
    OPEN_SPACE = "Open Space"
