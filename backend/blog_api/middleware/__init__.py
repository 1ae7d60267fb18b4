# Middleware package init
"""
Oleang Blog API: Middleware Package
===================================

What:  Cross-cutting concerns applied to every request.

Middleware Chain (outermost first):
    Request → [Request ID] → [Logging] → [Origin Policy] → [CORS] → Route Handler

    1. Request ID: correlation ID available to every later log line
    2. Logging: access line including rejected-origin requests
    3. Origin Policy: 403 for origins outside ALLOWED_ORIGINS
    4. CORS: preflight answers and Access-Control-* headers (Starlette)
"""
