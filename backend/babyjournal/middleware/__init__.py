"""
BabyJournal Backend — Middleware Package
=========================================

Middleware Chain (outermost first):
    Request → [Request ID] → [Logging] → [Session] → [GZip] → [CORS] → Route

    - Request ID runs first so every later log line can be correlated.
    - Logging sees the final status code and total duration.
    - SessionMiddleware decodes the signed cookie into request.session
      before any dependency reads the identity.
"""
