from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import field_validator


class Settings(BaseSettings):
    """
    Application-wide settings managed by Pydantic.
    Reads configuration from environment variables and .env files.
    """
    # General project metadata
    PROJECT_NAME: str = "MCP Hub"
    API_PREFIX: str = "/api"
    LOG_LEVEL: str = "INFO"

    # Upstream MCP registry
    # Both /v0/servers and /v0/servers/{id} are resolved against this base
    REGISTRY_BASE_URL: str = "https://registry.modelcontextprotocol.io"
    REGISTRY_TIMEOUT_SECONDS: float = 10.0
    REGISTRY_PAGE_LIMIT: int = 100
    # Upper bound on pages walked by a single aggregation
    REGISTRY_MAX_PAGES: int = 5
    # How long an aggregated catalog is served before the registry is asked again
    REGISTRY_CACHE_TTL_SECONDS: int = 300
    REGISTRY_USER_AGENT: str = "mcp-hub/1.0"

    @field_validator("REGISTRY_BASE_URL")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")

    @field_validator("REGISTRY_MAX_PAGES", "REGISTRY_PAGE_LIMIT")
    @classmethod
    def must_be_positive(cls, v: int) -> int:
        if v < 1:
            raise ValueError(f"must be at least 1, got {v}")
        return v

    @field_validator("LOG_LEVEL")
    @classmethod
    def upper_log_level(cls, v: str) -> str:
        return v.upper()

    # Pydantic Configuration
    model_config = SettingsConfigDict(
        env_file=".env",              # Load variables from .env file
        env_file_encoding="utf-8",    # Ensure correct encoding
        case_sensitive=True,          # Environment variables are case-sensitive
        extra="ignore"                # Ignore extra fields in .env not defined here
    )


# Instantiate the settings object to be imported elsewhere
settings = Settings()
