"""
API route modules.

This package contains subrouters for:
- Authentication: login (with per-email lockout) and current user
- Users: user CRUD and password change
- Marketplace: product CRUD, buying and restocking

Routers are included from marketplace_api.api.main (under the /api/v1 prefix).
"""
