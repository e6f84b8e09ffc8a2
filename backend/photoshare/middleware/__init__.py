# Middleware package init
"""
PhotoShare Backend — Middleware Package
=========================================

What:  Cross-cutting concerns applied to every request.

Middleware Chain (order matters):
    Request → [Request ID] → [Access Log] → [GZip] → [CORS] → Route Handler

    1. Request ID: correlation ID available to every log line and error body
    2. Access Log: method, path, status and duration, tagged with the request ID
    3. GZip / CORS: provided by Starlette and FastAPI

    Responses travel the chain in reverse, so the access log sees the final
    status code and the request ID header is set last.
"""
