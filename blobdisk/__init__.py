"""Azure Blob Storage disk adapter.

Exposes the adapter and the composition helpers most callers need:

- AzureBlobStorageAdapter: URL resolution, SAS temporary URLs, container creation
- create_adapter(config): build an adapter from settings or a plain mapping
- DiskSettings: configuration schema
"""

__version__ = "0.3.0"

from blobdisk.adapters.storage.azure_blob import AzureBlobStorageAdapter  # noqa: E402
from blobdisk.factory import create_adapter  # noqa: E402
from blobdisk.settings import DiskSettings  # noqa: E402

__all__ = ["__version__", "AzureBlobStorageAdapter", "create_adapter", "DiskSettings"]
