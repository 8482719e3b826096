"""Database tables."""

from sqlalchemy import String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from tenantry.domain.users import UserRecord
from tenantry.infrastructure.database.base import BaseModel


class UserModel(BaseModel):
    """A registered user of one tenant.

    Emails are unique per tenant, not globally.
    """

    __tablename__ = "users"
    __table_args__ = (UniqueConstraint("tenant", "email"),)

    tenant: Mapped[str] = mapped_column(String(255), index=True)
    email: Mapped[str] = mapped_column(String(255))
    password_hash: Mapped[str] = mapped_column(String(255))
    firstname: Mapped[str] = mapped_column(String(20))
    lastname: Mapped[str] = mapped_column(String(20))

    def to_record(self) -> UserRecord:
        """Convert to the domain record, dropping the hash."""
        return UserRecord(
            id=self.id,
            email=self.email,
            firstname=self.firstname,
            lastname=self.lastname,
        )

    def __repr__(self) -> str:
        return f"<UserModel(id={self.id}, tenant={self.tenant!r})>"
