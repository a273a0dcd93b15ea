# blobdisk/adapters/storage/azure_blob.py
"""
Azure Blob Storage disk adapter.

Adds three behaviours on top of the base blob filesystem:
- get_url(path): public URL, optionally under a custom base URL (CDN, proxy)
- get_temporary_url(path, ttl, options): URL carrying a service SAS token
- create_directory(name): idempotent, publicly readable container creation

Everything else (read/write/delete/list/metadata) is forwarded unchanged to the
base filesystem adapter it wraps.
"""

from __future__ import annotations

from typing import IO, Any, Callable, Iterator, Mapping, Optional, Union

from azure.core.exceptions import ResourceExistsError
from azure.storage.blob import PublicAccess
from loguru import logger
from pydantic import AnyUrl, TypeAdapter, ValidationError

from blobdisk.adapters.storage.base import FileAttributes, FilesystemAdapter, StorageAttributes
from blobdisk.adapters.storage.blob_filesystem import AzureBlobFilesystem, join_prefix
from blobdisk.adapters.storage.blob_service import BlobClientCapability
from blobdisk.adapters.storage.signing import BlobSasSigner
from blobdisk.core.exceptions import DirectoryCreationFailed, InvalidCustomUrl, KeyNotSet

ROOT_CONTAINER = "$root"

_URL_ADAPTER = TypeAdapter(AnyUrl)

# option name -> default, in the order the signer takes them after the expiry
_SAS_DEFAULTS = (
    ("signed_start", ""),
    ("signed_ip", ""),
    ("signed_protocol", "https"),
    ("signed_identifier", ""),
    ("cache_control", ""),
    ("content_disposition", ""),
    ("content_encoding", ""),
    ("content_language", ""),
    ("content_type", ""),
)

SignerFactory = Callable[[str, str], Any]


def is_valid_url(value: str) -> bool:
    """Return True for absolute URLs with a scheme and a host."""
    try:
        parsed = _URL_ADAPTER.validate_python(value)
    except ValidationError:
        return False
    return bool(parsed.host)


def _already_exists(exc: Exception) -> bool:
    if not isinstance(exc, ResourceExistsError):
        return False
    return getattr(exc, "error_code", None) in (None, "ContainerAlreadyExists")


class AzureBlobStorageAdapter(FilesystemAdapter):
    """Blob storage adapter for one container."""

    def __init__(
        self,
        client: BlobClientCapability,
        container: str,
        key: Optional[str] = None,
        url: Optional[str] = None,
        prefix: str = "",
        *,
        filesystem: Optional[FilesystemAdapter] = None,
        signer_factory: SignerFactory = BlobSasSigner,
    ) -> None:
        """
        Args:
            client: Blob client capability (URL builder, container creation, account name).
            container: Container name; ``$root`` addresses the account root container.
            key: Account key used to sign temporary URLs.
            url: Custom public base URL for ``get_url``.
            prefix: Virtual directory prepended to every path.
            filesystem: Adapter receiving the forwarded file operations. Defaults
                to an ``AzureBlobFilesystem`` over the same container and prefix.
            signer_factory: Builds a SAS signer from ``(account_name, key)``.

        Raises:
            InvalidCustomUrl: If ``url`` is given and is not a valid absolute URL.
            ValueError: If ``container`` is empty.
        """
        if not container:
            raise ValueError("container must be a non-empty string")
        if url and not is_valid_url(url):
            raise InvalidCustomUrl(url)

        self.client = client
        self.container = container
        self.key = key
        self.url = url
        self.prefix = prefix or ""
        self.signer_factory = signer_factory
        self._filesystem = filesystem

    @property
    def filesystem(self) -> FilesystemAdapter:
        if self._filesystem is None:
            container_client = self.client.container_client(self.container)
            self._filesystem = AzureBlobFilesystem(container_client, self.prefix)
        return self._filesystem

    # --------------------------
    # URLs
    # --------------------------

    def _custom_base(self) -> str:
        container = "" if self.container == ROOT_CONTAINER else f"{self.container}/"
        return f"{self.url.rstrip('/')}/{container}"

    def _url_for(self, location: str) -> str:
        if self.url:
            return self._custom_base() + location.lstrip("/")
        return self.client.blob_url(self.container, location)

    def get_url(self, path: str) -> str:
        """Get the public URL of ``path``.

        Without a custom base URL the client builder receives ``path`` as given,
        without the prefix.
        """
        if self.url:
            prefix = f"{self.prefix}/" if self.prefix else ""
            return self._custom_base() + prefix + path.lstrip("/")
        return self.client.blob_url(self.container, path)

    def get_temporary_url(
        self, path: str, ttl: Any, options: Optional[Mapping[str, Any]] = None
    ) -> str:
        """
        Generate a temporary URL carrying a shared access signature.

        Args:
            path: Blob path, relative to the prefix.
            ttl: Expiry, a ``datetime``/ISO string or a ``timedelta`` from now.
            options: Overrides for the signing options (``signed_permissions``,
                ``signed_resource``, ``content_type``, ...).

        Returns:
            str: ``<public url>?<sas token>``

        Raises:
            KeyNotSet: If no account key was configured.
        """
        if not self.key:
            raise KeyNotSet()

        location = join_prefix(self.prefix, path)
        resource_name = f"{self.container}/{location}" if location else self.container
        options = options or {}

        signer = self.signer_factory(self.client.account_name, self.key)
        token = signer.generate_blob_service_sas_token(
            str(options.get("signed_resource", "b")),
            resource_name,
            str(options.get("signed_permissions", "r")),
            ttl,
            *(str(options.get(name, default)) for name, default in _SAS_DEFAULTS),
        )
        return f"{self._url_for(location)}?{token}"

    # --------------------------
    # Directories
    # --------------------------

    def create_directory(self, path: str, options: Optional[Mapping[str, Any]] = None) -> None:
        """Create a publicly readable container named ``path``; existing containers are fine."""
        try:
            self.client.create_container(path, public_access=PublicAccess.CONTAINER)
        except Exception as exc:
            if _already_exists(exc):
                logger.debug("[blob] container {} already exists", path)
                return
            reason = getattr(exc, "message", None) or str(exc)
            raise DirectoryCreationFailed.at_location(path, reason, exc) from exc

    # --------------------------
    # Forwarded operations
    # --------------------------

    def file_exists(self, path: str) -> bool:
        return self.filesystem.file_exists(path)

    def directory_exists(self, path: str) -> bool:
        return self.filesystem.directory_exists(path)

    def read(self, path: str) -> bytes:
        return self.filesystem.read(path)

    def read_stream(self, path: str) -> Iterator[bytes]:
        return self.filesystem.read_stream(path)

    def write(
        self, path: str, contents: Union[bytes, str], options: Optional[Mapping[str, Any]] = None
    ) -> None:
        self.filesystem.write(path, contents, options)

    def write_stream(
        self, path: str, stream: IO[bytes], options: Optional[Mapping[str, Any]] = None
    ) -> None:
        self.filesystem.write_stream(path, stream, options)

    def delete(self, path: str) -> None:
        self.filesystem.delete(path)

    def delete_directory(self, path: str) -> None:
        self.filesystem.delete_directory(path)

    def list_contents(self, path: str = "", deep: bool = False) -> Iterator[StorageAttributes]:
        return self.filesystem.list_contents(path, deep)

    def file_size(self, path: str) -> FileAttributes:
        return self.filesystem.file_size(path)

    def mime_type(self, path: str) -> FileAttributes:
        return self.filesystem.mime_type(path)

    def last_modified(self, path: str) -> FileAttributes:
        return self.filesystem.last_modified(path)

    def visibility(self, path: str) -> str:
        return self.filesystem.visibility(path)

    def set_visibility(self, path: str, visibility: str) -> None:
        self.filesystem.set_visibility(path, visibility)

    def move(
        self, source: str, destination: str, options: Optional[Mapping[str, Any]] = None
    ) -> None:
        self.filesystem.move(source, destination, options)

    def copy(
        self, source: str, destination: str, options: Optional[Mapping[str, Any]] = None
    ) -> None:
        self.filesystem.copy(source, destination, options)


__all__ = ["AzureBlobStorageAdapter", "ROOT_CONTAINER", "is_valid_url"]
