"""Filesystem adapter contract.

Every disk backend exposes the same capability set so the layer routing user
calls (read/write/delete/list, URLs, directories) does not care which storage
sits underneath.
"""

from __future__ import annotations

import abc
from dataclasses import dataclass
from datetime import datetime
from typing import IO, Any, Iterator, Mapping, Optional, Union

StorageAttributes = Union["FileAttributes", "DirectoryAttributes"]


@dataclass(frozen=True)
class FileAttributes:
    """Metadata for a single file (blob).

    Attributes:
        path: Path relative to the adapter prefix.
        file_size: Content length in bytes, if known.
        last_modified: Last modification time, if known.
        mime_type: Content type recorded on the blob, if any.
    """

    path: str
    file_size: Optional[int] = None
    last_modified: Optional[datetime] = None
    mime_type: Optional[str] = None

    @property
    def is_file(self) -> bool:
        return True

    @property
    def is_dir(self) -> bool:
        return False


@dataclass(frozen=True)
class DirectoryAttributes:
    """A virtual directory (common blob name prefix)."""

    path: str

    @property
    def is_file(self) -> bool:
        return False

    @property
    def is_dir(self) -> bool:
        return True


class FilesystemAdapter(abc.ABC):
    """Base class for disk backends."""

    @abc.abstractmethod
    def file_exists(self, path: str) -> bool:
        """Return True if a file exists at ``path``."""

    @abc.abstractmethod
    def directory_exists(self, path: str) -> bool:
        """Return True if at least one file lives under ``path``."""

    @abc.abstractmethod
    def read(self, path: str) -> bytes:
        """Return the full contents of ``path``."""

    @abc.abstractmethod
    def read_stream(self, path: str) -> Iterator[bytes]:
        """Yield the contents of ``path`` in chunks."""

    @abc.abstractmethod
    def write(
        self, path: str, contents: Union[bytes, str], options: Optional[Mapping[str, Any]] = None
    ) -> None:
        """Create or overwrite ``path`` with ``contents``."""

    @abc.abstractmethod
    def write_stream(
        self, path: str, stream: IO[bytes], options: Optional[Mapping[str, Any]] = None
    ) -> None:
        """Create or overwrite ``path`` from a readable binary stream."""

    @abc.abstractmethod
    def delete(self, path: str) -> None:
        """Delete ``path``; deleting a missing file is not an error."""

    @abc.abstractmethod
    def delete_directory(self, path: str) -> None:
        """Delete every file under ``path``."""

    @abc.abstractmethod
    def create_directory(self, path: str, options: Optional[Mapping[str, Any]] = None) -> None:
        """Create a directory at ``path``."""

    @abc.abstractmethod
    def list_contents(self, path: str = "", deep: bool = False) -> Iterator[StorageAttributes]:
        """Yield files and directories under ``path``."""

    @abc.abstractmethod
    def file_size(self, path: str) -> FileAttributes:
        """Return attributes carrying the size of ``path``."""

    @abc.abstractmethod
    def mime_type(self, path: str) -> FileAttributes:
        """Return attributes carrying the content type of ``path``."""

    @abc.abstractmethod
    def last_modified(self, path: str) -> FileAttributes:
        """Return attributes carrying the modification time of ``path``."""

    @abc.abstractmethod
    def visibility(self, path: str) -> str:
        """Return the visibility of ``path``."""

    @abc.abstractmethod
    def set_visibility(self, path: str, visibility: str) -> None:
        """Change the visibility of ``path``."""

    @abc.abstractmethod
    def move(
        self, source: str, destination: str, options: Optional[Mapping[str, Any]] = None
    ) -> None:
        """Move ``source`` to ``destination``."""

    @abc.abstractmethod
    def copy(
        self, source: str, destination: str, options: Optional[Mapping[str, Any]] = None
    ) -> None:
        """Copy ``source`` to ``destination``."""

    def get_url(self, path: str) -> str:
        raise NotImplementedError(f"{type(self).__name__} does not generate public URLs.")

    def get_temporary_url(
        self, path: str, ttl: Any, options: Optional[Mapping[str, Any]] = None
    ) -> str:
        raise NotImplementedError(f"{type(self).__name__} does not generate temporary URLs.")


__all__ = ["FilesystemAdapter", "FileAttributes", "DirectoryAttributes", "StorageAttributes"]
