"""Infrastructure layer: user stores and host inspection.

This package provides the concrete implementations the domain layer depends
on:

- **memory_store**: Process-local user store, one per tenant
- **database**: Async PostgreSQL user store with SQLAlchemy 2.0+
- **host**: Facts about the machine and process serving requests

Stores implement :class:`tenantry.domain.users.UserStore`, so the tenant
registry can pick a backend from configuration without the domain knowing
which one it got.
"""
