"""Client settings loaded from environment variables and .env file."""

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Settings for building an AzureClient from the environment."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    azure_devops_org: str | None = None
    azure_devops_host: str = "https://dev.azure.com"
    azure_devops_user_agent: str = "azure-devops-client"
    azure_devops_api_version: str = "5.1"

    # A personal access token is sent as Basic auth unless told otherwise
    azure_devops_token: str | None = None
    azure_devops_auth: Literal["basic", "token"] = "basic"
    azure_devops_client_id: str | None = None
    azure_devops_client_secret: str | None = None

    azure_devops_cache_dir: Path | None = None


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
