"""Tests for the config module."""

from propmapper.config import (
    DEFAULT_STANDARD_PROPERTIES,
    Settings,
    _parse_cors_origins,
    _parse_list,
)


class TestParseCorsOrigins:
    """Test CORS origins parsing."""

    def test_parse_cors_origins_with_value(self, monkeypatch):
        """Test parsing CORS origins from environment variable."""
        monkeypatch.setenv("CORS_ALLOW_ORIGINS", "http://localhost:3000,http://localhost:8080")
        result = _parse_cors_origins()
        assert result == ["http://localhost:3000", "http://localhost:8080"]

    def test_parse_cors_origins_without_value(self, monkeypatch):
        """Test default CORS origins when not set."""
        monkeypatch.delenv("CORS_ALLOW_ORIGINS", raising=False)
        assert _parse_cors_origins() == ["*"]

    def test_parse_cors_origins_empty_string(self, monkeypatch):
        """Test parsing empty CORS origins defaults to wildcard."""
        monkeypatch.setenv("CORS_ALLOW_ORIGINS", "")
        assert _parse_cors_origins() == ["*"]


class TestParseList:
    """Test comma-separated list settings."""

    def test_items_are_trimmed(self, monkeypatch):
        """Test that whitespace and empty items are dropped."""
        monkeypatch.setenv("STANDARD_PROPERTIES", " Line Number , Tag Number,, ")
        assert _parse_list("STANDARD_PROPERTIES", []) == ["Line Number", "Tag Number"]

    def test_default_is_copied(self, monkeypatch):
        """Test that the default list is not shared with callers."""
        monkeypatch.delenv("STANDARD_PROPERTIES", raising=False)
        result = _parse_list("STANDARD_PROPERTIES", DEFAULT_STANDARD_PROPERTIES)

        assert result == DEFAULT_STANDARD_PROPERTIES
        assert result is not DEFAULT_STANDARD_PROPERTIES


class TestSettings:
    """Test Settings configuration."""

    def test_explicit_values(self):
        """Test Settings built with explicit parameters."""
        settings = Settings(
            llm_provider="openrouter",
            openrouter_api_key="sk-or-test456",
            schema_service_url="http://schema.test/api/v1",
            sample_row_limit=5,
            highlight_seconds=1.5,
            standard_properties=["Tag Number"],
            fallback_property_prefix="X_",
            port=9000,
        )

        assert settings.llm_provider == "openrouter"
        assert settings.schema_service_url == "http://schema.test/api/v1"
        assert settings.sample_row_limit == 5
        assert settings.highlight_seconds == 1.5
        assert settings.standard_properties == ["Tag Number"]
        assert settings.fallback_property_prefix == "X_"
        assert settings.port == 9000

    def test_active_model_follows_provider(self):
        """Test the model name used for each provider."""
        anthropic_settings = Settings(llm_provider="anthropic", model_name="claude-test")
        openrouter_settings = Settings(llm_provider="openrouter", openrouter_model="vendor/model")

        assert anthropic_settings.active_model == "claude-test"
        assert openrouter_settings.active_model == "vendor/model"

    def test_export_layout_defaults(self):
        """Test the default export layout."""
        settings = Settings(
            standard_properties=list(DEFAULT_STANDARD_PROPERTIES),
            line_identifier_target="Line Number",
        )

        assert settings.standard_properties[0] == settings.line_identifier_target
        assert "Unit of Measure" in settings.standard_properties
