# Middleware package init
"""
AccountHub Backend — Middleware Package
========================================

Middleware Chain (order matters!):
    Request → [Request ID] → [Rate Limit] → [Logging] → [GZip] → [CORS] → Route Handler

    The request ID is assigned first, so rate-limit rejections and access
    log lines carry the same X-Request-ID as the handler's error bodies.
"""
