"""Generic write helper shared by table-specific repositories."""

from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from tenantry.infrastructure.database.base import BaseModel


class BaseRepository[T: BaseModel]:
    """Inserts rows of one mapped class within a caller-owned session.

    The caller decides when to commit; :meth:`create` only flushes.

    Args:
        session: Session of the surrounding transaction.
        model_class: Mapped class handled by this repository.
    """

    def __init__(self, session: AsyncSession, model_class: type[T]) -> None:
        self.session = session
        self.model_class = model_class

    async def create(self, obj: T) -> T:
        """Insert ``obj`` and load the columns the database filled in.

        Constraint violations surface here, at flush time, rather than at
        commit.

        Returns:
            T: The same instance with ``id`` and ``created_at`` populated.
        """
        self.session.add(obj)
        await self.session.flush()
        await self.session.refresh(obj)
        logger.debug("Inserted {} id={}", self.model_class.__name__, obj.id)
        return obj
