# Middleware package init
"""
Product API - Middleware Package
==================================

Middleware Chain (outermost first):
    Request → [Request ID] → [Logging] → [GZip] → [CORS] → Route Handler

The request ID is set before the logging middleware reads it, and is
added to every response header on the way out.
"""
