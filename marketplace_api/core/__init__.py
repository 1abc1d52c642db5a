"""
Core application utilities for settings, logging, errors and FastAPI dependencies.

This package provides:
- Application-level settings (separate from DB settings)
- Structured logging with request correlation ids
- Typed API errors rendered by the central error responder
- Password hashing and bearer token helpers
- Dependency helpers (DB session, current user, login tracker)
"""
