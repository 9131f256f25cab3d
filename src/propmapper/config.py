"""Configuration management for PropMapper."""

import os
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel

load_dotenv()


def _parse_list(name: str, default: list[str]) -> list[str]:
    """Parse a comma-separated list from an environment variable."""
    value = os.getenv(name)
    if value:
        return [item.strip() for item in value.split(",") if item.strip()]
    return list(default)


def _parse_cors_origins() -> list[str]:
    """Parse CORS origins from environment variable."""
    return _parse_list("CORS_ALLOW_ORIGINS", ["*"])


DEFAULT_STANDARD_PROPERTIES = [
    "Line Number",
    "Tag Number",
    "Description",
    "Quantity",
    "Unit of Measure",
]


class Settings(BaseModel):
    """Application settings."""

    # LLM Provider settings ('anthropic' or 'openrouter')
    llm_provider: str = os.getenv("LLM_PROVIDER", "anthropic")

    # Anthropic API key (required when LLM_PROVIDER=anthropic)
    anthropic_api_key: Optional[str] = os.getenv("ANTHROPIC_API_KEY")

    # OpenRouter API configuration (required when LLM_PROVIDER=openrouter)
    openrouter_api_key: Optional[str] = os.getenv("OPENROUTER_API_KEY")
    openrouter_model: str = os.getenv("OPENROUTER_MODEL", "anthropic/claude-3.5-sonnet")

    model_name: str = os.getenv("MODEL_NAME", "claude-sonnet-4-20250514")
    suggestion_max_tokens: int = int(os.getenv("SUGGESTION_MAX_TOKENS", "2048"))

    # Schema / feedback service
    schema_service_url: str = os.getenv(
        "SCHEMA_SERVICE_URL", "https://684c168eed2578be881d9c58.mockapi.io/api/v1"
    )
    schema_properties_path: str = os.getenv("SCHEMA_PROPERTIES_PATH", "LineItemProperties")

    # Loader (ingestion pipeline) service
    loader_service_url: str = os.getenv("LOADER_SERVICE_URL", "http://localhost:810/api/v2")
    loader_classification_uid: str = os.getenv(
        "LOADER_CLASSIFICATION_UID", "LDRC_Load_BoM_LineItem"
    )
    loader_workflow_name: str = os.getenv("LOADER_WORKFLOW_NAME", "HEX DTO Loader Workflow")
    loader_tenant_id: str = os.getenv("LOADER_TENANT_ID", "1")
    loader_org_id: Optional[str] = os.getenv("LOADER_ORG_ID")

    http_timeout_seconds: float = float(os.getenv("HTTP_TIMEOUT_SECONDS", "30"))

    # Mapping behaviour
    sample_row_limit: int = int(os.getenv("SAMPLE_ROW_LIMIT", "10"))
    highlight_seconds: float = float(os.getenv("HIGHLIGHT_SECONDS", "3.0"))

    # Export layout
    standard_properties: list[str] = _parse_list(
        "STANDARD_PROPERTIES", DEFAULT_STANDARD_PROPERTIES
    )
    line_identifier_target: str = os.getenv("LINE_IDENTIFIER_TARGET", "Line Number")
    fallback_property_prefix: str = os.getenv("FALLBACK_PROPERTY_PREFIX", "UDP_")

    # Server settings
    host: str = os.getenv("HOST", "127.0.0.1")
    port: int = int(os.getenv("PORT", "8000"))
    debug: bool = os.getenv("DEBUG", "false").lower() == "true"

    # CORS settings (comma-separated list of allowed origins, or * for all)
    cors_allow_origins: list[str] = _parse_cors_origins()

    log_level: str = os.getenv("LOG_LEVEL", "INFO")

    @property
    def active_model(self) -> str:
        """Model name for the configured provider."""
        if self.llm_provider == "openrouter":
            return self.openrouter_model
        return self.model_name


settings = Settings()
