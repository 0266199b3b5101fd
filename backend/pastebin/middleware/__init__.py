# Middleware package init
"""
Pastebin Backend: Middleware Package
=====================================

Middleware Chain:
    Request → [Request ID] → [Logging] → [CORS] → Route Handler

    1. Request ID: correlation ID for logs and error bodies
    2. Logging: access line with status and duration, tagged with the ID
    3. CORS: FastAPI's CORSMiddleware (handles preflight)

Responses pass back through the chain in reverse, so the X-Request-ID
header and the logged duration are set on the way out.
"""
