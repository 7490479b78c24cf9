# Middleware package init
"""
Market Registry Backend — Middleware Package
==============================================

Middleware Chain (request direction):
    Request → [Rate Limit] → [Request ID] → [Logging] → [GZip] → [CORS] → Route

    1. Rate Limit first: reject floods before touching the database
    2. Request ID: correlation id for log lines and error bodies
    3. Logging: method, path, status and duration with the request id
"""
