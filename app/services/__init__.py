# Services package init
"""
Market Registry Backend — Services Layer
==========================================

Service Inventory:
    - workflow:        pure transition guard (role × status table)
    - reference:       MKT-/VND- reference number generation
    - AuthService:     login, registration, user lookup, staff seed
    - MarketService:   market registration, listing, guarded status changes
    - VendorService:   vendor applications, stall allocation on approval
    - LogService:      read-only audit log listing
    - StatsService:    dashboard counts

Every service method takes the request's AsyncSession as its first argument.
"""
