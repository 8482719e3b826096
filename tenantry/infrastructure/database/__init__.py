"""PostgreSQL user store.

One ``users`` table holds the users of every tenant, keyed by tenant
domain; :class:`SqlUserStore` gives each tenant its own view of it. Engine
and sessions are async (SQLAlchemy over asyncpg) and shared by all
tenants.
"""

from tenantry.infrastructure.database.base import Base, BaseModel
from tenantry.infrastructure.database.models import UserModel
from tenantry.infrastructure.database.repository import BaseRepository
from tenantry.infrastructure.database.session import (
    check_database_connection,
    close_database,
    create_database_engine,
    get_async_session,
    get_engine,
    get_session_factory,
    init_models,
)
from tenantry.infrastructure.database.user_store import SqlUserStore

__all__ = [
    "Base",
    "BaseModel",
    "BaseRepository",
    "SqlUserStore",
    "UserModel",
    "check_database_connection",
    "close_database",
    "create_database_engine",
    "get_async_session",
    "get_engine",
    "get_session_factory",
    "init_models",
]
