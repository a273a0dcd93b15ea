"""Outbound adapters package for the blob disk.

- storage: Azure Blob Storage filesystem adapters and their collaborators

This module avoids eager imports to reduce side effects at import time.
"""

__all__ = ["storage"]
