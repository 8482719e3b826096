"""Unit tests for the uvicorn entry point."""

import pytest
from pytest_mock import MockerFixture

import main


@pytest.mark.unit
class TestMain:
    """Server startup arguments."""

    def test_uses_configured_host_and_port(self, mocker: MockerFixture) -> None:
        """Settings decide where uvicorn listens."""
        run = mocker.patch("main.uvicorn.run")

        main.main()

        run.assert_called_once()
        args, kwargs = run.call_args
        assert args == ("tenantry.api.main:app",)
        assert kwargs["host"] == "127.0.0.1"
        assert kwargs["port"] == 8000
        assert kwargs["reload"] is True

    def test_port_variable_wins(
        self, mocker: MockerFixture, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """A hosting platform's PORT overrides the configured port."""
        monkeypatch.setenv("PORT", "9090")
        monkeypatch.setenv("DEBUG", "false")
        run = mocker.patch("main.uvicorn.run")

        main.main()

        assert run.call_args.kwargs["port"] == 9090
        assert run.call_args.kwargs["reload"] is False

    def test_uvicorn_logs_go_through_loguru(self, mocker: MockerFixture) -> None:
        """Uvicorn's loggers use the intercept handler."""
        run = mocker.patch("main.uvicorn.run")

        main.main()

        log_config = run.call_args.kwargs["log_config"]
        handler = log_config["handlers"]["default"]["class"]
        assert handler == "tenantry.core.logging.InterceptHandler"
        assert set(log_config["loggers"]) == {
            "uvicorn",
            "uvicorn.error",
            "uvicorn.access",
        }
