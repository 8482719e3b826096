"""User records and the store contract each tenant provides."""

from dataclasses import dataclass
from typing import Protocol


@dataclass(frozen=True, slots=True)
class NewUser:
    """A validated registration, ready to persist."""

    email: str
    password_hash: str
    firstname: str
    lastname: str

    def __repr__(self) -> str:
        # Keep the hash out of logs and tracebacks
        return f"NewUser(email={self.email!r})"


@dataclass(frozen=True, slots=True)
class UserRecord:
    """A stored user as returned by a store."""

    id: int
    email: str
    firstname: str
    lastname: str


class UserStore(Protocol):
    """Persistence for one tenant's users.

    Email uniqueness is the store's responsibility.
    """

    async def create(self, user: NewUser) -> UserRecord:
        """Persist a new user.

        Raises:
            DuplicateKeyError: If the email is already registered.
            StorageError: If the store cannot complete the write.
        """
        ...
