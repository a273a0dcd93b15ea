"""Lazy export surface for storage adapters."""

_EXPORTS = {
    "AzureBlobStorageAdapter": "azure_blob",
    "AzureBlobFilesystem": "blob_filesystem",
    "AzureBlobClient": "blob_service",
    "BlobSasSigner": "signing",
    "FilesystemAdapter": "base",
    "FileAttributes": "base",
    "DirectoryAttributes": "base",
}

__all__ = list(_EXPORTS)


def __getattr__(name: str):
    if name in _EXPORTS:
        from importlib import import_module

        module = import_module(f"{__name__}.{_EXPORTS[name]}")  # local import = lazy load
        return getattr(module, name)
    raise AttributeError(name)
