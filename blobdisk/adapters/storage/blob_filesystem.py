"""
Base filesystem operations over one Azure blob container.

Design notes:
- Every path is resolved under the configured prefix; reported paths are
  relative to it.
- Directories are virtual: a directory exists while a blob name starts with it.
- SDK errors (azure.core.exceptions) propagate unchanged, except a missing blob
  on delete, which is not an error.
"""

from __future__ import annotations

import mimetypes
from typing import IO, TYPE_CHECKING, Any, Iterator, Mapping, Optional, Union

from azure.core.exceptions import ResourceNotFoundError
from azure.storage.blob import ContentSettings
from loguru import logger

from blobdisk.adapters.storage.base import (
    DirectoryAttributes,
    FileAttributes,
    FilesystemAdapter,
    StorageAttributes,
)
from blobdisk.core.exceptions import VisibilityNotSupported

if TYPE_CHECKING:
    from azure.storage.blob import ContainerClient  # pragma: no cover


def join_prefix(prefix: str, path: str) -> str:
    """Return ``prefix/path`` with redundant slashes removed."""
    prefix = (prefix or "").strip("/")
    path = (path or "").lstrip("/")
    if not prefix:
        return path
    if not path:
        return prefix
    return f"{prefix}/{path}"


class AzureBlobFilesystem(FilesystemAdapter):
    """Read/write/list blobs of a single container under a path prefix."""

    def __init__(self, container_client: "ContainerClient", prefix: str = "") -> None:
        self.container_client = container_client
        self.prefix = (prefix or "").strip("/")

    # --------------------------
    # Path helpers
    # --------------------------

    def _location(self, path: str) -> str:
        return join_prefix(self.prefix, path)

    def _directory_location(self, path: str) -> str:
        location = self._location(path).rstrip("/")
        return f"{location}/" if location else ""

    def _relative(self, name: str) -> str:
        if self.prefix and name.startswith(self.prefix + "/"):
            return name[len(self.prefix) + 1 :]
        return name

    def _file_attributes(self, name: str, props: Any) -> FileAttributes:
        content_settings = getattr(props, "content_settings", None)
        return FileAttributes(
            path=self._relative(name),
            file_size=getattr(props, "size", None),
            last_modified=getattr(props, "last_modified", None),
            mime_type=getattr(content_settings, "content_type", None),
        )

    def _properties(self, path: str) -> FileAttributes:
        location = self._location(path)
        props = self.container_client.get_blob_client(location).get_blob_properties()
        return self._file_attributes(location, props)

    # --------------------------
    # Reads
    # --------------------------

    def file_exists(self, path: str) -> bool:
        return bool(self.container_client.get_blob_client(self._location(path)).exists())

    def directory_exists(self, path: str) -> bool:
        blobs = self.container_client.list_blobs(
            name_starts_with=self._directory_location(path) or None
        )
        return next(iter(blobs), None) is not None

    def read(self, path: str) -> bytes:
        return self.container_client.download_blob(self._location(path)).readall()

    def read_stream(self, path: str) -> Iterator[bytes]:
        return self.container_client.download_blob(self._location(path)).chunks()

    def list_contents(self, path: str = "", deep: bool = False) -> Iterator[StorageAttributes]:
        """Yield files and, for shallow listings, the directories directly under ``path``."""
        starts_with = self._directory_location(path) or None
        if deep:
            for props in self.container_client.list_blobs(name_starts_with=starts_with):
                yield self._file_attributes(props.name, props)
            return

        for item in self.container_client.walk_blobs(name_starts_with=starts_with, delimiter="/"):
            if item.name.endswith("/"):
                yield DirectoryAttributes(path=self._relative(item.name).rstrip("/"))
            else:
                yield self._file_attributes(item.name, item)

    def file_size(self, path: str) -> FileAttributes:
        return self._properties(path)

    def mime_type(self, path: str) -> FileAttributes:
        return self._properties(path)

    def last_modified(self, path: str) -> FileAttributes:
        return self._properties(path)

    def visibility(self, path: str) -> str:
        raise VisibilityNotSupported(path)

    # --------------------------
    # Writes
    # --------------------------

    def _content_settings(
        self, path: str, options: Optional[Mapping[str, Any]]
    ) -> Optional[ContentSettings]:
        options = options or {}
        content_type = options.get("mimetype") or mimetypes.guess_type(path)[0]
        cache_control = options.get("cache_control")
        if not content_type and not cache_control:
            return None
        return ContentSettings(content_type=content_type, cache_control=cache_control)

    def write(
        self, path: str, contents: Union[bytes, str], options: Optional[Mapping[str, Any]] = None
    ) -> None:
        if isinstance(contents, str):
            contents = contents.encode("utf-8")
        self._upload(path, contents, options)

    def write_stream(
        self, path: str, stream: IO[bytes], options: Optional[Mapping[str, Any]] = None
    ) -> None:
        self._upload(path, stream, options)

    def _upload(self, path: str, data: Any, options: Optional[Mapping[str, Any]]) -> None:
        location = self._location(path)
        self.container_client.upload_blob(
            name=location,
            data=data,
            overwrite=True,
            content_settings=self._content_settings(path, options),
        )
        logger.debug("[blob] wrote {}", location)

    def delete(self, path: str) -> None:
        location = self._location(path)
        try:
            self.container_client.delete_blob(location)
        except ResourceNotFoundError:
            logger.debug("[blob] delete skipped, {} not found", location)

    def delete_directory(self, path: str) -> None:
        starts_with = self._directory_location(path) or None
        for props in self.container_client.list_blobs(name_starts_with=starts_with):
            self.container_client.delete_blob(props.name)

    def create_directory(self, path: str, options: Optional[Mapping[str, Any]] = None) -> None:
        # directories are implied by blob names
        return None

    def set_visibility(self, path: str, visibility: str) -> None:
        raise VisibilityNotSupported(path)

    def copy(
        self, source: str, destination: str, options: Optional[Mapping[str, Any]] = None
    ) -> None:
        source_url = self.container_client.get_blob_client(self._location(source)).url
        target = self.container_client.get_blob_client(self._location(destination))
        target.start_copy_from_url(source_url)

    def move(
        self, source: str, destination: str, options: Optional[Mapping[str, Any]] = None
    ) -> None:
        self.copy(source, destination, options)
        self.delete(source)


__all__ = ["AzureBlobFilesystem", "join_prefix"]
