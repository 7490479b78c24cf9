# Importing every model registers its table on Base.metadata
from app.models.user import User
from app.models.market import Market
from app.models.vendor import Vendor
from app.models.log import Log

__all__ = ["User", "Market", "Vendor", "Log"]
