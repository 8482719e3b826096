"""Declarative base for the ``users`` table and any table added later.

Constraint names follow
:data:`tenantry.infrastructure.constants.NAMING_CONVENTION`, so the unique
constraint on ``(tenant, email)`` gets a predictable name.
"""

from datetime import datetime

from sqlalchemy import BigInteger, DateTime, MetaData, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from tenantry.infrastructure.constants import NAMING_CONVENTION


class Base(DeclarativeBase):
    """Declarative base sharing one naming-convention aware metadata."""

    metadata = MetaData(naming_convention=NAMING_CONVENTION)


class BaseModel(Base):
    """Abstract table with a surrogate key and an insert timestamp."""

    __abstract__ = True

    id: Mapped[int] = mapped_column(
        BigInteger, primary_key=True, autoincrement=True, doc="Surrogate key"
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
        doc="Insert time, set by the database",
    )

    def __repr__(self) -> str:
        return f"<{type(self).__name__}(id={self.id})>"
