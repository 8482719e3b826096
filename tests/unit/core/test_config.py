"""Unit tests for the settings module."""

import pytest
from pydantic import ValidationError

from tenantry.core.config import (
    DatabaseConfig,
    LogConfig,
    Settings,
    TenantConfig,
    get_settings,
)


@pytest.mark.unit
class TestSettingsDefaults:
    """Default values when no environment is set."""

    def test_application_defaults(self) -> None:
        """Settings fall back to the documented defaults."""
        settings = Settings()

        assert settings.app_name == "Tenantry"
        assert settings.app_version == "0.1.0"
        assert settings.environment == "development"
        assert settings.api_prefix == ""
        assert settings.is_production is False

    def test_development_uses_console_formatter(self) -> None:
        """The console formatter is picked in development."""
        settings = Settings()

        assert settings.log_config.log_formatter_type == "console"

    def test_tracing_disabled_by_default(self) -> None:
        """Tracing is opt-in."""
        settings = Settings()

        assert settings.observability_config.enable_tracing is False

    def test_tenant_defaults(self) -> None:
        """Any host is accepted and users are kept in memory."""
        settings = Settings()

        assert settings.tenant_config.allowed_domains == []
        assert settings.tenant_config.default_domain is None
        assert settings.tenant_config.user_store == "memory"
        assert settings.tenant_config.max_tenants == 1000

    def test_sensitive_fields_cover_passwords(self) -> None:
        """Both password fields are redacted from logs."""
        config = LogConfig()

        assert "password" in config.sensitive_fields
        assert "password2" in config.sensitive_fields


@pytest.mark.unit
class TestSettingsFromEnvironment:
    """Values read from environment variables."""

    def test_production_environment(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Production switches to JSON logs and reduced sampling."""
        monkeypatch.setenv("ENVIRONMENT", "production")

        settings = Settings()

        assert settings.is_production is True
        assert settings.log_config.log_formatter_type == "json"
        assert settings.observability_config.trace_sample_rate == 0.1

    def test_managed_runtime_forces_json(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """A managed runtime gets JSON logs even in development."""
        monkeypatch.setenv("K_SERVICE", "tenantry")

        settings = Settings()

        assert settings.log_config.log_formatter_type == "json"

    def test_nested_tenant_config(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Nested sections are addressed with the double underscore delimiter."""
        monkeypatch.setenv(
            "TENANT_CONFIG__ALLOWED_DOMAINS", '["Example.com", " shop.test "]'
        )
        monkeypatch.setenv("TENANT_CONFIG__DEFAULT_DOMAIN", "Example.com")
        monkeypatch.setenv("TENANT_CONFIG__USER_STORE", "database")

        config = Settings().tenant_config

        assert config.allowed_domains == ["example.com", "shop.test"]
        assert config.default_domain == "example.com"
        assert config.user_store == "database"

    @pytest.mark.parametrize(
        ("raw", "expected"),
        [("", ""), ("api", "/api"), ("/api/", "/api"), ("/api/v1", "/api/v1")],
    )
    def test_api_prefix_normalized(
        self, monkeypatch: pytest.MonkeyPatch, raw: str, expected: str
    ) -> None:
        """The prefix gets a leading slash and loses trailing ones."""
        monkeypatch.setenv("API_PREFIX", raw)

        assert Settings().api_prefix == expected

    def test_empty_docs_url_disables_docs(
        self, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """An empty docs URL becomes None."""
        monkeypatch.setenv("DOCS_URL", "")

        assert Settings().docs_url is None


@pytest.mark.unit
class TestSectionValidation:
    """Validation rules of the nested configuration sections."""

    def test_database_url_requires_asyncpg(self) -> None:
        """Only the async PostgreSQL driver is accepted."""
        with pytest.raises(ValidationError, match="postgresql\\+asyncpg"):
            DatabaseConfig(database_url="postgresql://localhost/db")

    def test_blank_default_domain_is_none(self) -> None:
        """A blank default domain disables the fallback."""
        assert TenantConfig(default_domain="   ").default_domain is None

    def test_unknown_user_store_rejected(self) -> None:
        """The backend must be one of the supported stores."""
        with pytest.raises(ValidationError):
            TenantConfig(user_store="redis")  # type: ignore[arg-type]


@pytest.mark.unit
def test_get_settings_is_cached() -> None:
    """get_settings returns the same instance until the cache is cleared."""
    first = get_settings()

    assert get_settings() is first

    get_settings.cache_clear()

    assert get_settings() is not first
