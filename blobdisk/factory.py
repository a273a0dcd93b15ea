"""Composition root: configuration -> SDK client -> storage adapter."""

from __future__ import annotations

from typing import Any, Mapping, Union

from azure.storage.blob import BlobServiceClient, ExponentialRetry, LinearRetry
from loguru import logger

from blobdisk.adapters.storage.azure_blob import AzureBlobStorageAdapter
from blobdisk.adapters.storage.blob_filesystem import AzureBlobFilesystem
from blobdisk.adapters.storage.blob_service import AzureBlobClient
from blobdisk.core.exceptions import ConfigError
from blobdisk.settings import DiskSettings, RetrySettings


def default_endpoint(account_name: str) -> str:
    return f"https://{account_name}.blob.core.windows.net"


def build_retry_policy(retry: RetrySettings) -> Union[LinearRetry, ExponentialRetry]:
    """Translate retry settings into the SDK pipeline's retry policy."""
    if retry.increase == "exponential":
        return ExponentialRetry(
            initial_backoff=retry.interval_seconds, retry_total=retry.tries
        )
    return LinearRetry(backoff=retry.interval_seconds, retry_total=retry.tries)


def build_service_client(settings: DiskSettings) -> BlobServiceClient:
    """
    Returns a BlobServiceClient for the configured auth mode.

    Precedence: connection string -> SAS token + endpoint -> account name + key.

    Raises:
        ConfigError: If no usable credential is configured.
    """
    mode = settings.auth_mode
    retry_policy = build_retry_policy(settings.retry)
    logger.debug("[blob] building service client auth_mode={}", mode)

    if mode == "connection_string":
        return BlobServiceClient.from_connection_string(
            settings.connection_string, retry_policy=retry_policy
        )

    if mode == "sas_token":
        return BlobServiceClient(
            settings.endpoint, credential=settings.sas_token, retry_policy=retry_policy
        )

    return BlobServiceClient(
        settings.endpoint or default_endpoint(settings.name),
        credential={"account_name": settings.name, "account_key": settings.key},
        retry_policy=retry_policy,
    )


def create_adapter(
    config: Union[DiskSettings, Mapping[str, Any]],
    *,
    service: BlobServiceClient | None = None,
) -> AzureBlobStorageAdapter:
    """
    Build a ready-to-use storage adapter.

    Args:
        config: Disk settings, or a plain mapping validated into them.
        service: Pre-built SDK client; skips credential resolution when given.

    Raises:
        ConfigError: If the container or credentials are missing.
        InvalidCustomUrl: If the configured public URL is malformed.
    """
    settings = config if isinstance(config, DiskSettings) else DiskSettings.from_mapping(config)
    if not settings.container:
        raise ConfigError("A container name is required")

    client = AzureBlobClient(service or build_service_client(settings))
    filesystem = AzureBlobFilesystem(client.container_client(settings.container), settings.prefix)
    return AzureBlobStorageAdapter(
        client,
        settings.container,
        key=settings.key,
        url=settings.url,
        prefix=settings.prefix,
        filesystem=filesystem,
    )


__all__ = ["build_retry_policy", "build_service_client", "create_adapter", "default_endpoint"]
