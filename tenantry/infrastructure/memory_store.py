"""Process-local user store."""

import itertools

from tenantry.core.exceptions import DuplicateKeyError
from tenantry.domain.users import NewUser, UserRecord


class InMemoryUserStore:
    """Keeps one tenant's users in a dict keyed by email.

    Data lives as long as the process. Ids are sequential per store.
    """

    def __init__(self) -> None:
        self._users: dict[str, tuple[UserRecord, str]] = {}
        self._ids = itertools.count(1)

    async def create(self, user: NewUser) -> UserRecord:
        """Store a user.

        Raises:
            DuplicateKeyError: If the email is already registered.
        """
        # No await between the check and the insert
        if user.email in self._users:
            raise DuplicateKeyError("email")
        record = UserRecord(
            id=next(self._ids),
            email=user.email,
            firstname=user.firstname,
            lastname=user.lastname,
        )
        self._users[user.email] = (record, user.password_hash)
        return record

    def __len__(self) -> int:
        return len(self._users)

    def __contains__(self, email: object) -> bool:
        return email in self._users
