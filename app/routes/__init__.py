# Routes package init
"""
Market Registry Backend — API Routes Package
==============================================

Route Inventory:
    - auth.py:     POST /api/auth/login, POST /api/auth/register
    - markets.py:  GET/POST /api/markets, GET /api/markets/{id},
                   PATCH /api/markets/{id}/status
    - vendors.py:  GET/POST /api/vendors, GET /api/vendors/{id},
                   PATCH /api/vendors/{id}/status
    - users.py:    GET /api/users, GET /api/logs
    - stats.py:    GET /api/stats
    - health.py:   GET /health

Routes stay thin: extract request data, resolve the session and acting
user, call a service, return its schema.
"""
