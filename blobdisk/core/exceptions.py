class BlobDiskError(Exception):
    """Base class for all blob disk exceptions."""


class ConfigError(BlobDiskError):
    """Raised for missing/malformed disk configuration."""


class InvalidCustomUrl(BlobDiskError):
    """Raised when the configured public base URL is not a valid absolute URL."""

    def __init__(self, url: str | None = None) -> None:
        message = "The provided custom URL is not a valid URL"
        if url:
            message = f"{message}: {url!r}"
        super().__init__(message)
        self.url = url


class KeyNotSet(BlobDiskError):
    """Raised when a temporary URL is requested without an account key."""

    def __init__(self, message: str = "You must provide an account key to generate temporary URLs") -> None:
        super().__init__(message)


class DirectoryCreationFailed(BlobDiskError):
    """Raised when a container cannot be created for a reason other than it already existing."""

    def __init__(self, location: str, reason: str = "", *, cause: Exception | None = None) -> None:
        message = f"Unable to create directory at location: {location}."
        if reason:
            message = f"{message} {reason}"
        super().__init__(message)
        self.location = location
        self.reason = reason
        self.cause = cause

    @classmethod
    def at_location(
        cls, location: str, reason: str = "", cause: Exception | None = None
    ) -> "DirectoryCreationFailed":
        return cls(location, reason, cause=cause)


class VisibilityNotSupported(BlobDiskError):
    """Raised when per-blob visibility is read or changed; Azure only has container-level access."""

    def __init__(self, location: str) -> None:
        super().__init__(
            f"Unable to handle visibility for file at location: {location}. "
            "Azure Blob Storage does not support visibility per blob."
        )
        self.location = location


__all__ = [
    "BlobDiskError",
    "ConfigError",
    "InvalidCustomUrl",
    "KeyNotSet",
    "DirectoryCreationFailed",
    "VisibilityNotSupported",
]
