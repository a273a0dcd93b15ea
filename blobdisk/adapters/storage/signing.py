"""Shared access signature helper.

Wraps the SDK's service-SAS generators behind a single signing call. The
signature itself (string-to-sign, HMAC) is produced by ``azure-storage-blob``.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Optional, Tuple, Union

from azure.storage.blob import generate_blob_sas, generate_container_sas

SasTime = Union[datetime, timedelta, str]

# blob and container service SAS; snapshot/version/directory resources are not signed here
SUPPORTED_RESOURCES = ("b", "c")


def _optional(value: str) -> Optional[str]:
    return value or None


def _resolve_time(value: Optional[SasTime]) -> Optional[Union[datetime, str]]:
    if value is None or value == "":
        return None
    if isinstance(value, timedelta):
        return datetime.now(timezone.utc) + value
    return value


def split_resource_name(resource_name: str) -> Tuple[str, str]:
    """Split ``container/blob/path`` into ``("container", "blob/path")``."""
    container, _, blob = resource_name.strip("/").partition("/")
    return container, blob


class BlobSasSigner:
    """Generates blob service SAS tokens keyed on an account name and key."""

    def __init__(self, account_name: str, account_key: str) -> None:
        self.account_name = account_name
        self.account_key = account_key

    def generate_blob_service_sas_token(
        self,
        signed_resource: str,
        resource_name: str,
        signed_permissions: str,
        signed_expiry: SasTime,
        signed_start: SasTime = "",
        signed_ip: str = "",
        signed_protocol: str = "https",
        signed_identifier: str = "",
        cache_control: str = "",
        content_disposition: str = "",
        content_encoding: str = "",
        content_language: str = "",
        content_type: str = "",
    ) -> str:
        """Return the SAS query string (without the leading ``?``).

        ``signed_resource`` ``"c"`` or a resource name without a blob part signs
        the container; ``"b"`` signs the blob. Empty strings mean "unset".
        A ``timedelta`` expiry or start is taken relative to now (UTC).
        """
        if signed_resource not in SUPPORTED_RESOURCES:
            raise ValueError(
                f"Unsupported signed resource {signed_resource!r}; expected one of {SUPPORTED_RESOURCES}"
            )
        container, blob = split_resource_name(resource_name)
        common = dict(
            account_name=self.account_name,
            container_name=container,
            account_key=self.account_key,
            permission=_optional(signed_permissions),
            expiry=_resolve_time(signed_expiry),
            start=_resolve_time(signed_start),
            policy_id=_optional(signed_identifier),
            ip=_optional(signed_ip),
            protocol=_optional(signed_protocol),
            cache_control=_optional(cache_control),
            content_disposition=_optional(content_disposition),
            content_encoding=_optional(content_encoding),
            content_language=_optional(content_language),
            content_type=_optional(content_type),
        )

        if signed_resource == "c" or not blob:
            return generate_container_sas(**common)
        return generate_blob_sas(blob_name=blob, **common)


__all__ = ["BlobSasSigner", "split_resource_name"]
