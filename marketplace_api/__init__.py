"""
Marketplace API: users and a product catalog behind a FastAPI service.
"""

__version__ = "0.1.0"
