from __future__ import annotations

import base64
from datetime import timedelta
from urllib.parse import parse_qs, urlsplit

import pytest
from azure.storage.blob import ExponentialRetry, LinearRetry

from blobdisk import factory
from blobdisk.adapters.storage.azure_blob import AzureBlobStorageAdapter
from blobdisk.adapters.storage.blob_filesystem import AzureBlobFilesystem
from blobdisk.core.exceptions import ConfigError, InvalidCustomUrl
from blobdisk.settings import DiskSettings, RetrySettings

ACCOUNT_KEY = base64.b64encode(b"not-a-real-account-key").decode()
CONNECTION_STRING = (
    "DefaultEndpointsProtocol=https;AccountName=acct;"
    f"AccountKey={ACCOUNT_KEY};EndpointSuffix=core.windows.net"
)


class _RecordingServiceClient:
    instances: list["_RecordingServiceClient"] = []

    def __init__(self, account_url, credential=None, **kwargs):
        self.account_url = account_url
        self.credential = credential
        self.kwargs = kwargs
        _RecordingServiceClient.instances.append(self)

    @classmethod
    def from_connection_string(cls, conn_str, **kwargs):
        client = cls(conn_str, **kwargs)
        client.from_connection_string = True
        return client


@pytest.fixture
def recorded(monkeypatch):
    _RecordingServiceClient.instances = []
    monkeypatch.setattr(factory, "BlobServiceClient", _RecordingServiceClient)
    return _RecordingServiceClient.instances


def test_linear_retry_policy():
    policy = factory.build_retry_policy(RetrySettings.model_validate({"tries": 4, "interval": 1500}))
    assert isinstance(policy, LinearRetry)
    assert policy.backoff == 1.5
    assert policy.total_retries == 4


def test_exponential_retry_policy():
    policy = factory.build_retry_policy(
        RetrySettings.model_validate({"tries": 2, "interval": 500, "increase": "exponential"})
    )
    assert isinstance(policy, ExponentialRetry)
    assert policy.initial_backoff == 0.5
    assert policy.total_retries == 2


def test_connection_string_mode(recorded):
    settings = DiskSettings.from_mapping({"connection_string": CONNECTION_STRING, "container": "media"})
    factory.build_service_client(settings)
    (client,) = recorded
    assert client.account_url == CONNECTION_STRING
    assert client.from_connection_string is True
    assert isinstance(client.kwargs["retry_policy"], LinearRetry)


def test_sas_token_mode(recorded):
    settings = DiskSettings.from_mapping(
        {"sasToken": "sv=2024&sig=abc", "endpoint": "https://acct.blob.core.windows.net"}
    )
    factory.build_service_client(settings)
    (client,) = recorded
    assert client.account_url == "https://acct.blob.core.windows.net"
    assert client.credential == "sv=2024&sig=abc"


@pytest.mark.parametrize(
    "endpoint,expected",
    [
        (None, "https://acct.blob.core.windows.net"),
        ("http://127.0.0.1:10000/acct", "http://127.0.0.1:10000/acct"),
    ],
)
def test_account_key_mode(recorded, endpoint, expected):
    settings = DiskSettings.from_mapping({"name": "acct", "key": ACCOUNT_KEY, "endpoint": endpoint})
    factory.build_service_client(settings)
    (client,) = recorded
    assert client.account_url == expected
    assert client.credential == {"account_name": "acct", "account_key": ACCOUNT_KEY}


def test_missing_credentials(recorded):
    with pytest.raises(ConfigError):
        factory.build_service_client(DiskSettings.from_mapping({"container": "media"}))
    assert recorded == []


def test_create_adapter_requires_container():
    with pytest.raises(ConfigError):
        factory.create_adapter({"connection_string": CONNECTION_STRING})


def test_create_adapter_rejects_invalid_url():
    with pytest.raises(InvalidCustomUrl):
        factory.create_adapter(
            {"connection_string": CONNECTION_STRING, "container": "media", "url": "not a url"}
        )


def test_create_adapter_with_real_sdk_client():
    adapter = factory.create_adapter(
        {"name": "acct", "key": ACCOUNT_KEY, "container": "media", "prefix": "tenant"}
    )
    assert isinstance(adapter, AzureBlobStorageAdapter)
    assert isinstance(adapter.filesystem, AzureBlobFilesystem)
    assert adapter.filesystem.prefix == "tenant"
    assert adapter.get_url("a.txt") == "https://acct.blob.core.windows.net/media/a.txt"

    url = adapter.get_temporary_url("a.txt", timedelta(minutes=5))
    parts = urlsplit(url)
    assert f"{parts.scheme}://{parts.netloc}{parts.path}" == (
        "https://acct.blob.core.windows.net/media/tenant/a.txt"
    )
    query = parse_qs(parts.query)
    assert query["sp"] == ["r"]
    assert query["sr"] == ["b"]
    assert query["sig"][0]


def test_empty_path_resolves_to_container_url_with_real_sdk_client():
    adapter = factory.create_adapter({"name": "acct", "key": ACCOUNT_KEY, "container": "media"})
    assert adapter.get_url("") == "https://acct.blob.core.windows.net/media/"

    url = adapter.get_temporary_url("", timedelta(minutes=5), {"signed_resource": "c"})
    parts = urlsplit(url)
    assert f"{parts.scheme}://{parts.netloc}{parts.path}" == "https://acct.blob.core.windows.net/media/"
    query = parse_qs(parts.query)
    assert query["sr"] == ["c"]
    assert query["sig"][0]


def test_sas_credential_is_not_leaked_into_public_url():
    adapter = factory.create_adapter(
        {
            "sas_token": "sv=2024-01-01&sig=secret",
            "endpoint": "https://acct.blob.core.windows.net",
            "container": "media",
        }
    )
    assert adapter.get_url("a.txt") == "https://acct.blob.core.windows.net/media/a.txt"
