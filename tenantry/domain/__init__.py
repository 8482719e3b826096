"""Domain layer: validation, registration, tenants and their metrics.

Nothing in this package imports FastAPI; the API layer adapts these
objects to HTTP.
"""
