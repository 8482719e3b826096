"""Tenantry - multi-tenant HTTP service with diagnostics and user registration.

Every request is bound to a tenant chosen from its Host header. Each tenant
owns its request metrics, its user store and a logger tagged with its
domain.

Architecture Overview:
- **API Layer**: FastAPI routers and middleware
- **Core Layer**: Configuration, logging, tracing, errors and hashing
- **Domain Layer**: Field validation, registration, tenants and metrics
- **Infrastructure Layer**: In-memory and PostgreSQL user stores, host facts
"""
