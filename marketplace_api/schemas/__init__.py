"""
Public Pydantic schemas used by FastAPI routes, services, and tests.

Schemas are grouped by resource (auth, users, marketplace) and also include
common reusable models such as the page envelope and standard responses.
"""

from .common import MessageResponse, Page  # noqa: F401
