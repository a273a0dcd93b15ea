from __future__ import annotations

import base64
from datetime import datetime, timedelta, timezone
from urllib.parse import parse_qs

import pytest

from blobdisk.adapters.storage import signing
from blobdisk.adapters.storage.signing import BlobSasSigner, split_resource_name

ACCOUNT_KEY = base64.b64encode(b"not-a-real-account-key").decode()


@pytest.fixture
def captured(monkeypatch):
    calls: dict[str, dict] = {}

    def _blob(**kwargs):
        calls["blob"] = kwargs
        return "sr=b"

    def _container(**kwargs):
        calls["container"] = kwargs
        return "sr=c"

    monkeypatch.setattr(signing, "generate_blob_sas", _blob)
    monkeypatch.setattr(signing, "generate_container_sas", _container)
    return calls


def _sign(signer: BlobSasSigner, resource: str, name: str, expiry, **overrides) -> str:
    args = {
        "signed_start": "",
        "signed_ip": "",
        "signed_protocol": "https",
        "signed_identifier": "",
        "cache_control": "",
        "content_disposition": "",
        "content_encoding": "",
        "content_language": "",
        "content_type": "",
    }
    args.update(overrides)
    return signer.generate_blob_service_sas_token(resource, name, "r", expiry, **args)


def test_split_resource_name():
    assert split_resource_name("media") == ("media", "")
    assert split_resource_name("media/a.txt") == ("media", "a.txt")
    assert split_resource_name("/media/dir/a.txt") == ("media", "dir/a.txt")


def test_blob_resource_uses_blob_sas(captured):
    expiry = datetime(2030, 1, 1, tzinfo=timezone.utc)
    token = _sign(BlobSasSigner("acct", ACCOUNT_KEY), "b", "media/dir/a.txt", expiry)

    assert token == "sr=b"
    kwargs = captured["blob"]
    assert kwargs["account_name"] == "acct"
    assert kwargs["account_key"] == ACCOUNT_KEY
    assert kwargs["container_name"] == "media"
    assert kwargs["blob_name"] == "dir/a.txt"
    assert kwargs["permission"] == "r"
    assert kwargs["expiry"] == expiry
    assert kwargs["protocol"] == "https"


def test_empty_strings_are_unset(captured):
    _sign(BlobSasSigner("acct", ACCOUNT_KEY), "b", "media/a.txt", "2030-01-01T00:00:00Z")
    kwargs = captured["blob"]
    for name in (
        "start",
        "ip",
        "policy_id",
        "cache_control",
        "content_disposition",
        "content_encoding",
        "content_language",
        "content_type",
    ):
        assert kwargs[name] is None, name


def test_container_resource_or_bare_container_uses_container_sas(captured):
    signer = BlobSasSigner("acct", ACCOUNT_KEY)
    assert _sign(signer, "c", "media/a.txt", "2030-01-01") == "sr=c"
    assert _sign(signer, "b", "media", "2030-01-01") == "sr=c"
    assert "blob_name" not in captured["container"]
    assert captured["container"]["container_name"] == "media"


def test_timedelta_expiry_is_relative_to_now(captured):
    before = datetime.now(timezone.utc)
    _sign(BlobSasSigner("acct", ACCOUNT_KEY), "b", "media/a.txt", timedelta(minutes=10))
    expiry = captured["blob"]["expiry"]
    assert isinstance(expiry, datetime)
    assert before + timedelta(minutes=9) < expiry <= datetime.now(timezone.utc) + timedelta(minutes=10)


def test_real_sdk_token_carries_signing_options():
    token = _sign(
        BlobSasSigner("acct", ACCOUNT_KEY),
        "b",
        "media/a.txt",
        datetime(2030, 1, 1, tzinfo=timezone.utc),
        content_type="text/plain",
    )
    query = parse_qs(token)
    assert query["sp"] == ["r"]
    assert query["sr"] == ["b"]
    assert query["spr"] == ["https"]
    assert query["rsct"] == ["text/plain"]
    assert query["se"][0].startswith("2030-01-01")
    assert query["sig"][0]


@pytest.mark.parametrize("resource", ["bs", "bv", "d", ""])
def test_unsupported_resource_type_is_rejected(captured, resource):
    with pytest.raises(ValueError):
        _sign(BlobSasSigner("acct", ACCOUNT_KEY), resource, "media/a.txt", "2030-01-01")
    assert captured == {}
