"""
NextShop Catalog — Middleware Package
=======================================

Middleware Chain:
    Request → [Request ID] → [Logging] → [GZip] → [CORS] → Route Handler

    Responses travel back through the same chain in reverse, so the access
    log sees the final status code and every response gets X-Request-ID.
"""
