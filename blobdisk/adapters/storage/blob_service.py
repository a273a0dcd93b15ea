from __future__ import annotations

from typing import TYPE_CHECKING, Optional, Protocol, Union

from azure.storage.blob import BlobServiceClient, PublicAccess

if TYPE_CHECKING:
    from azure.storage.blob import ContainerClient  # pragma: no cover


def _strip_query(url: str) -> str:
    return url.split("?", 1)[0]


class BlobClientCapability(Protocol):
    """What the storage adapter needs from a blob service client."""

    @property
    def account_name(self) -> str: ...

    def blob_url(self, container: str, path: str) -> str: ...

    def create_container(
        self, name: str, public_access: Optional[Union[PublicAccess, str]] = None
    ) -> None: ...

    def container_client(self, name: str) -> "ContainerClient": ...


class AzureBlobClient:
    """Wrapper around the Azure Blob Storage SDK service client."""

    def __init__(self, service: BlobServiceClient) -> None:
        self.service = service

    @property
    def account_name(self) -> str:
        return self.service.account_name

    def blob_url(self, container: str, path: str) -> str:
        """Return the canonical URL of a blob without any SAS credential query.

        An empty ``path`` yields the container URL with a trailing slash.
        """
        if not path:
            return _strip_query(self.service.get_container_client(container).url).rstrip("/") + "/"
        return _strip_query(self.service.get_blob_client(container, path).url)

    def create_container(
        self, name: str, public_access: Optional[Union[PublicAccess, str]] = None
    ) -> None:
        self.service.create_container(name, public_access=public_access)

    def container_client(self, name: str) -> "ContainerClient":
        return self.service.get_container_client(name)


__all__ = ["AzureBlobClient", "BlobClientCapability"]
