"""PostgreSQL-backed user store."""

from collections.abc import Callable
from contextlib import AbstractAsyncContextManager

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from tenantry.core.exceptions import DuplicateKeyError, StorageError
from tenantry.domain.users import NewUser, UserRecord
from tenantry.infrastructure.database.models import UserModel
from tenantry.infrastructure.database.repository import BaseRepository
from tenantry.infrastructure.database.session import get_async_session

type SessionProvider = Callable[[], AbstractAsyncContextManager[AsyncSession]]


class UserRepository(BaseRepository[UserModel]):
    """Repository for the ``users`` table."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, UserModel)


class SqlUserStore:
    """User store for one tenant, rows scoped by the tenant column.

    Args:
        tenant: Domain of the owning tenant.
        session_provider: Opens a transactional session. Defaults to the
            process-wide session factory.
    """

    def __init__(
        self, tenant: str, session_provider: SessionProvider = get_async_session
    ) -> None:
        self.tenant = tenant
        self._session_provider = session_provider

    async def create(self, user: NewUser) -> UserRecord:
        """Insert a user.

        Raises:
            DuplicateKeyError: If the tenant already has a user with this email.
            StorageError: If the database rejects or cannot run the insert.
        """
        model = UserModel(
            tenant=self.tenant,
            email=user.email,
            password_hash=user.password_hash,
            firstname=user.firstname,
            lastname=user.lastname,
        )
        try:
            async with self._session_provider() as session:
                created = await UserRepository(session).create(model)
                return created.to_record()
        except IntegrityError as exc:
            raise DuplicateKeyError("email", cause=exc) from exc
        except SQLAlchemyError as exc:
            raise StorageError(
                context={"tenant": self.tenant, "operation": "users.create"},
                cause=exc,
            ) from exc
