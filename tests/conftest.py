from __future__ import annotations

import os
from pathlib import Path

import pytest

from blobdisk.logging_utils import setup_test_logging

os.environ.setdefault("ENV", "test")

_DISK_ENV = (
    "AZURE_STORAGE_NAME",
    "AZURE_STORAGE_KEY",
    "AZURE_STORAGE_CONTAINER",
    "AZURE_STORAGE_URL",
    "AZURE_STORAGE_PREFIX",
    "AZURE_STORAGE_CONNECTION_STRING",
    "AZURE_STORAGE_ENDPOINT",
    "AZURE_STORAGE_SAS_TOKEN",
    "AZURE_STORAGE_RETRY_TRIES",
    "AZURE_STORAGE_RETRY_INTERVAL",
    "AZURE_STORAGE_RETRY_INCREASE",
)


@pytest.fixture(scope="session", autouse=True)
def configure_logging():
    setup_test_logging(Path("blobdisk-logs/"))
    yield


@pytest.fixture
def clean_env(monkeypatch):
    """Remove disk variables so settings only see what a test sets."""
    for key in _DISK_ENV:
        monkeypatch.delenv(key, raising=False)
    return monkeypatch
