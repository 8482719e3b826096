"""API routers.

- **system**: Tenant-aware diagnostic endpoints
- **users**: User registration
"""
