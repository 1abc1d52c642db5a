"""
ORM models for users and the marketplace product catalog.

Importing this package ensures model classes are registered with the Base
metadata for Alembic and runtime usage.
"""

from .users import User  # noqa: F401
from .marketplace import Product  # noqa: F401
