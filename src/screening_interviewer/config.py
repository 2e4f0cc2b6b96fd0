"""
Application configuration using pydantic-settings.

Loads configuration from environment variables and .env files. Variable names
used by the earlier bot deployment are accepted as aliases.
"""

from functools import lru_cache
from typing import Literal

from pydantic import AliasChoices, Field, SecretStr, ValidationError, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class ConfigurationError(RuntimeError):
    """Raised when required settings are absent or invalid at startup."""


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        populate_by_name=True,
        extra="ignore",
    )

    # Understanding backend (OpenAI-compatible chat completions)
    llm_endpoint: str = Field(
        ...,
        validation_alias=AliasChoices("llm_endpoint", "AzureOpenAIEndpoint"),
        description="Base URL of the chat-completions service",
    )
    llm_api_key: SecretStr = Field(
        ...,
        validation_alias=AliasChoices("llm_api_key", "AzureOpenAIKey"),
        description="API key sent with every backend request",
    )
    llm_deployment_name: str = Field(
        ...,
        validation_alias=AliasChoices("llm_deployment_name", "AzureOpenAIDeploymentName"),
        description="Model deployment to route requests to",
    )
    llm_api_version: str = Field(
        default="2024-08-01-preview",
        description="API version query parameter",
    )
    llm_timeout: int = Field(
        default=30,
        gt=0,
        description="Timeout in seconds for a single backend round-trip",
    )

    # Job descriptions
    available_jds: str = Field(
        ...,
        validation_alias=AliasChoices("available_jds", "AVAILABLE_JDS"),
        description="Comma-separated list of selectable job description identifiers",
    )
    jd_store_path: str | None = Field(
        default=None,
        description="Directory holding job description files",
    )
    jd_store_url: str | None = Field(
        default=None,
        validation_alias=AliasChoices("jd_store_url", "JOB_DESCRIPTION_CONTAINER_URL"),
        description="HTTP base URL serving job descriptions by identifier",
    )

    # Interview pacing
    max_questions: int = Field(
        default=5,
        gt=0,
        description="Number of dynamic job-description questions per interview",
    )
    history_window: int = Field(
        default=6,
        gt=0,
        description="Recent conversation turns sent to question generation",
    )
    session_idle_timeout: int = Field(
        default=3600,
        ge=0,
        description="Seconds of inactivity before a session expires (0 disables)",
    )
    organization_name: str = Field(
        default="KPMG Global Services",
        description="Organization named in interviewer messages",
    )

    # Application
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Logging level",
    )
    debug: bool = Field(
        default=False,
        description="Enable debug mode",
    )

    @model_validator(mode="after")
    def _check_sources(self) -> "Settings":
        if not self.available_jd_ids:
            raise ValueError("AVAILABLE_JDS must list at least one job description")
        if not self.jd_store_path and not self.jd_store_url:
            raise ValueError("Either JD_STORE_PATH or JD_STORE_URL must be set")
        return self

    @property
    def available_jd_ids(self) -> list[str]:
        """Selectable job description identifiers, in configured order."""
        return [item.strip() for item in self.available_jds.split(",") if item.strip()]


@lru_cache
def get_settings() -> Settings:
    """
    Get cached application settings.

    Returns:
        Settings: Application settings instance.

    Raises:
        ConfigurationError: If required settings are missing or invalid.
    """
    try:
        return Settings()
    except ValidationError as e:
        problems = ", ".join(
            f"{'.'.join(str(part) for part in err['loc']) or 'settings'}: {err['msg']}"
            for err in e.errors()
        )
        raise ConfigurationError(f"Invalid configuration: {problems}") from e
