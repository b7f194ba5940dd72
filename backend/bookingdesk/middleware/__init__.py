# Middleware package init
"""
BookingDesk Backend — Middleware Package
==========================================

Middleware Chain (outermost first):
    Request → [Request ID] → [Access Log] → [GZip] → [CORS] → Router

    - Request ID runs first so every later log line can carry the id
    - Access Log sees the final status code and the total duration
    - Responses travel back through the chain in reverse order, picking up
      the X-Request-ID header on the way out
"""
