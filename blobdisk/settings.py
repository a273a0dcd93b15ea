"""Disk configuration powered by Pydantic.

Environment matrix:

| Section | Environment Variable                | Default  | Purpose                                      |
|---------|-------------------------------------|----------|----------------------------------------------|
| Account | `AZURE_STORAGE_NAME`                | `None`   | Storage account name                         |
| Account | `AZURE_STORAGE_KEY`                 | `None`   | Shared key; also signs temporary URLs        |
| Account | `AZURE_STORAGE_CONNECTION_STRING`   | `None`   | Full connection string (takes precedence)    |
| Account | `AZURE_STORAGE_SAS_TOKEN`           | `None`   | SAS token credential (needs an endpoint)     |
| Account | `AZURE_STORAGE_ENDPOINT`            | `None`   | Blob service endpoint override               |
| Disk    | `AZURE_STORAGE_CONTAINER`           | `None`   | Container backing the disk                   |
| Disk    | `AZURE_STORAGE_URL`                 | `None`   | Public base URL used by `get_url`            |
| Disk    | `AZURE_STORAGE_PREFIX`              | `""`     | Virtual directory prepended to every path    |
| Retry   | `AZURE_STORAGE_RETRY_TRIES`         | `3`      | Retry attempts handed to the SDK pipeline    |
| Retry   | `AZURE_STORAGE_RETRY_INTERVAL`      | `1000`   | Backoff interval in milliseconds             |
| Retry   | `AZURE_STORAGE_RETRY_INCREASE`      | `linear` | Backoff growth: `linear` or `exponential`    |

Exactly one authentication mode is used, resolved in this order: connection string,
SAS token plus endpoint, account name plus key.

Settings objects are read-only. `get_settings()` loads a `.env` file first so local
runs pick up the same variables as deployed ones.
"""

from __future__ import annotations

from typing import Any, Literal, Mapping

from dotenv import load_dotenv
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from blobdisk.core.exceptions import ConfigError

AuthMode = Literal["connection_string", "sas_token", "account_key"]


class _SettingsBase(BaseSettings):
    """Common configuration for BaseSettings subclasses."""

    model_config = SettingsConfigDict(
        env_prefix="",
        populate_by_name=True,
        extra="ignore",
        case_sensitive=True,
        frozen=True,
    )


class RetrySettings(_SettingsBase):
    """Retry options passed through to the SDK transport."""

    tries: int = Field(default=3, ge=1, alias="AZURE_STORAGE_RETRY_TRIES")
    interval: int = Field(default=1000, ge=0, alias="AZURE_STORAGE_RETRY_INTERVAL")
    increase: Literal["linear", "exponential"] = Field(
        default="linear", alias="AZURE_STORAGE_RETRY_INCREASE"
    )

    @field_validator("increase", mode="before")
    @classmethod
    def _normalize_increase(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.strip().lower() or "linear"
        return value

    @property
    def interval_seconds(self) -> float:
        return self.interval / 1000.0


class DiskSettings(_SettingsBase):
    """Configuration for one Azure blob disk."""

    name: str | None = Field(default=None, alias="AZURE_STORAGE_NAME")
    key: str | None = Field(default=None, alias="AZURE_STORAGE_KEY")
    container: str | None = Field(default=None, alias="AZURE_STORAGE_CONTAINER")
    url: str | None = Field(default=None, alias="AZURE_STORAGE_URL")
    prefix: str = Field(default="", alias="AZURE_STORAGE_PREFIX")
    connection_string: str | None = Field(
        default=None, alias="AZURE_STORAGE_CONNECTION_STRING"
    )
    endpoint: str | None = Field(default=None, alias="AZURE_STORAGE_ENDPOINT")
    sas_token: str | None = Field(default=None, alias="AZURE_STORAGE_SAS_TOKEN")
    retry: RetrySettings = Field(default_factory=RetrySettings)

    @field_validator(
        "name",
        "key",
        "container",
        "url",
        "connection_string",
        "endpoint",
        "sas_token",
        mode="before",
    )
    @classmethod
    def _blank_to_none(cls, value: Any) -> Any:
        if isinstance(value, str):
            value = value.strip()
            return value or None
        return value

    @field_validator("prefix", mode="before")
    @classmethod
    def _normalize_prefix(cls, value: Any) -> str:
        if value is None:
            return ""
        return str(value).strip().strip("/")

    @field_validator("sas_token", mode="after")
    @classmethod
    def _strip_sas_question_mark(cls, value: str | None) -> str | None:
        # portal-copied tokens often carry the leading "?"
        if value is None:
            return None
        return value.lstrip("?") or None

    @property
    def auth_mode(self) -> AuthMode:
        """Return the active authentication mode.

        Raises:
            ConfigError: If no usable credential is configured, or a SAS token is
                configured without an endpoint.
        """
        if self.connection_string:
            return "connection_string"
        if self.sas_token:
            if not self.endpoint:
                raise ConfigError("A SAS token requires an endpoint to be configured")
            return "sas_token"
        if self.name and self.key:
            return "account_key"
        raise ConfigError(
            "Azure storage not configured: set a connection string, "
            "a SAS token with an endpoint, or an account name and key"
        )

    @classmethod
    def from_mapping(cls, config: Mapping[str, Any]) -> "DiskSettings":
        """Validate a plain configuration mapping without reading the environment.

        Accepts the camel-cased ``sasToken`` key alongside ``sas_token``.
        """
        data = dict(config)
        if "sasToken" in data:
            data.setdefault("sas_token", data.pop("sasToken"))
        retry = data.get("retry")
        if not isinstance(retry, RetrySettings):
            data["retry"] = RetrySettings.model_validate(dict(retry or {}))
        return cls.model_validate(data)


def get_settings(env_file: str | None = ".env") -> DiskSettings:
    """Instantiate disk settings from the current environment."""
    if env_file:
        load_dotenv(dotenv_path=env_file, override=False)
    return DiskSettings()


def reload_settings(env_file: str | None = ".env") -> DiskSettings:
    """Alias for get_settings to maintain a consistent API."""
    return get_settings(env_file)


__all__ = [
    "AuthMode",
    "DiskSettings",
    "RetrySettings",
    "get_settings",
    "reload_settings",
]
