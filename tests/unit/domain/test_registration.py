"""Unit tests for the registration workflow."""

from unittest.mock import MagicMock

import pytest
from pytest_mock import MockerFixture

from tenantry.core.exceptions import StorageError
from tenantry.domain.registration import (
    RegistrationOutcome,
    RegistrationWorkflow,
    redact_secrets,
)
from tenantry.domain.users import NewUser, UserRecord
from tenantry.infrastructure.memory_store import InMemoryUserStore

VALID_BODY = {
    "email": "ada@example.com",
    "email2": "ada@example.com",
    "password": "correct horse battery",
    "password2": "correct horse battery",
    "firstname": "Ada",
    "lastname": "Lovelace",
}


def fake_hash(password: str) -> str:
    """Cheap deterministic stand-in for key stretching."""
    return f"hashed:{password[::-1]}"


class CapturingStore(InMemoryUserStore):
    """In-memory store that remembers what it was asked to save."""

    def __init__(self) -> None:
        super().__init__()
        self.received: list[NewUser] = []

    async def create(self, user: NewUser) -> UserRecord:
        self.received.append(user)
        return await super().create(user)


class FailingStore:
    """A store whose backend is down."""

    def __init__(self, error: Exception) -> None:
        self.error = error

    async def create(self, user: NewUser) -> UserRecord:
        raise self.error


@pytest.fixture
def workflow() -> RegistrationWorkflow:
    """Workflow with a fast hasher."""
    return RegistrationWorkflow(hasher=fake_hash)


@pytest.fixture
def store() -> CapturingStore:
    """An empty in-memory store."""
    return CapturingStore()


@pytest.fixture
def log() -> MagicMock:
    """Stand-in for the tenant logger."""
    return MagicMock()


@pytest.mark.unit
class TestRedactSecrets:
    """Removal of password fields from echoed input."""

    def test_removes_passwords(self) -> None:
        """Both password fields are dropped and the rest kept."""
        assert redact_secrets(VALID_BODY) == {
            "email": "ada@example.com",
            "email2": "ada@example.com",
            "firstname": "Ada",
            "lastname": "Lovelace",
        }

    def test_does_not_mutate_and_is_idempotent(self) -> None:
        """The input is untouched and a second pass changes nothing."""
        body = dict(VALID_BODY)

        once = redact_secrets(body)

        assert body == VALID_BODY
        assert redact_secrets(once) == once


@pytest.mark.unit
class TestRegister:
    """The four registration outcomes."""

    async def test_created(
        self,
        workflow: RegistrationWorkflow,
        store: CapturingStore,
        log: MagicMock,
    ) -> None:
        """A valid body creates the user and returns only id and email."""
        outcome = await workflow.register(VALID_BODY, store=store, log=log)

        assert outcome.status_code == 201
        assert outcome.success is True
        assert outcome.data == {"id": 1, "email": "ada@example.com"}
        assert outcome.errors == []
        (saved,) = store.received
        assert saved.password_hash == fake_hash("correct horse battery")

    async def test_validation_failure(
        self,
        workflow: RegistrationWorkflow,
        store: CapturingStore,
        log: MagicMock,
    ) -> None:
        """Invalid bodies report every error and echo the redacted input."""
        body = {**VALID_BODY, "email2": "other@example.com", "firstname": ""}

        outcome = await workflow.register(body, store=store, log=log)

        assert outcome.status_code == 400
        assert outcome.errors == ["email2 must match email", "firstname is required"]
        assert outcome.data == redact_secrets(body)
        assert "password" not in outcome.data
        assert len(store) == 0

    async def test_duplicate_email(
        self,
        workflow: RegistrationWorkflow,
        store: CapturingStore,
        log: MagicMock,
    ) -> None:
        """A second registration with the same email conflicts."""
        await workflow.register(VALID_BODY, store=store, log=log)

        outcome = await workflow.register(
            {**VALID_BODY, "email": "ADA@example.com"}, store=store, log=log
        )

        assert outcome.status_code == 409
        assert outcome.errors == ["Email already registered"]
        assert "password2" not in outcome.data
        assert len(store) == 1

    async def test_store_failure(
        self, workflow: RegistrationWorkflow, log: MagicMock
    ) -> None:
        """Unexpected store errors become a generic 500 and are logged."""
        store = FailingStore(ConnectionError("db at 10.0.0.5 unreachable"))

        outcome = await workflow.register(VALID_BODY, store=store, log=log)

        assert outcome.status_code == 500
        assert outcome.errors == ["Registration failed"]
        assert "10.0.0.5" not in str(outcome.to_envelope())
        assert outcome.data == redact_secrets(VALID_BODY)
        log.opt.assert_called_once()
        assert isinstance(log.opt.call_args.kwargs["exception"], ConnectionError)

    async def test_storage_error_is_wrapped(
        self, workflow: RegistrationWorkflow, log: MagicMock
    ) -> None:
        """A store's own StorageError also maps to the generic message."""
        store = FailingStore(StorageError("connection pool exhausted"))

        outcome = await workflow.register(VALID_BODY, store=store, log=log)

        assert outcome.status_code == 500
        assert outcome.errors == ["Registration failed"]

    @pytest.mark.parametrize("body", [None, [], "text", 42, True])
    async def test_body_not_an_object(
        self,
        workflow: RegistrationWorkflow,
        store: CapturingStore,
        log: MagicMock,
        body: object,
    ) -> None:
        """Anything but a JSON object is a 400 with empty data."""
        outcome = await workflow.register(body, store=store, log=log)

        assert outcome.status_code == 400
        assert outcome.data == {}
        assert outcome.errors == ["Request body must be a JSON object"]

    async def test_password_never_logged(
        self,
        workflow: RegistrationWorkflow,
        store: CapturingStore,
        log: MagicMock,
    ) -> None:
        """Nothing passed to the logger contains the password."""
        await workflow.register(VALID_BODY, store=store, log=log)
        await workflow.register(VALID_BODY, store=store, log=log)

        assert "correct horse battery" not in str(log.mock_calls)

    async def test_hashing_runs_in_a_thread(
        self,
        workflow: RegistrationWorkflow,
        store: CapturingStore,
        log: MagicMock,
        mocker: MockerFixture,
    ) -> None:
        """The hasher is handed to a worker thread."""
        to_thread = mocker.patch(
            "tenantry.domain.registration.asyncio.to_thread",
            return_value="hashed",
        )

        await workflow.register(VALID_BODY, store=store, log=log)

        to_thread.assert_awaited_once_with(fake_hash, "correct horse battery")


@pytest.mark.unit
def test_envelope_shape() -> None:
    """Outcomes render to the success/data/errors envelope."""
    outcome = RegistrationOutcome(409, {"email": "a@b.com"}, ["Email taken"])

    assert outcome.to_envelope() == {
        "success": False,
        "data": {"email": "a@b.com"},
        "errors": ["Email taken"],
    }


@pytest.mark.unit
async def test_minimal_registration(store: CapturingStore, log: MagicMock) -> None:
    """Shortest accepted password and one-letter names register."""
    body = {
        "email": "a@b.com",
        "email2": "a@b.com",
        "password": "123456789012",
        "password2": "123456789012",
        "firstname": "A",
        "lastname": "B",
    }

    outcome = await RegistrationWorkflow().register(body, store=store, log=log)

    assert outcome.status_code == 201
    assert set(outcome.data) == {"id", "email"}
