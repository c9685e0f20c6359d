# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Unit tests for API key decoding and the source and target HTTP clients."""

import base64
import json

import httpx
import jwt
import pytest
from pytest_httpx import HTTPXMock

from lpi.api_keys import (
    InvalidApiKeyError,
    decode_source_api_key,
    decode_target_api_key,
)
from lpi.model import ValidatedStandard
from lpi.source_api import SourceApiError, SourceCatalogClient, SourceCollection
from lpi.target_api import TargetImportClient, TargetImportError

SIGNING_KEY = "legacy-practice-import-test-signing-key"


def _source_key(host: str = "legacy.example.com", secure: bool = True) -> str:
    return jwt.encode({"host": host, "secure": secure}, SIGNING_KEY, algorithm="HS256")


def _target_key(host: str = "https://target.example.com") -> str:
    return json.dumps({"host": host, "jwt": "opaque-credential"})


def _b64(value: str) -> str:
    return base64.b64encode(value.encode("utf-8")).decode("ascii")


def test_ph3_key_001_source_key_decodes_directly_and_base64_wrapped() -> None:
    direct = decode_source_api_key(_source_key())
    wrapped = decode_source_api_key(_b64(_source_key(secure=False)))

    assert direct.base_url == "https://legacy.example.com"
    assert wrapped.base_url == "http://legacy.example.com"


def test_ph3_key_002_source_key_requires_host_and_secure() -> None:
    token = jwt.encode({"host": "legacy.example.com"}, SIGNING_KEY, algorithm="HS256")

    with pytest.raises(InvalidApiKeyError):
        decode_source_api_key(token)
    with pytest.raises(InvalidApiKeyError):
        decode_source_api_key("not-a-key")
    with pytest.raises(InvalidApiKeyError):
        decode_source_api_key("  ")


def test_ph3_key_003_target_key_decodes_directly_and_base64_wrapped() -> None:
    direct = decode_target_api_key(_target_key())
    wrapped = decode_target_api_key(_b64(_target_key("http://other:8081")))

    assert (direct.host, direct.jwt) == ("https://target.example.com", "opaque-credential")
    assert wrapped.host == "http://other:8081"


def test_ph3_key_004_target_key_requires_host_and_jwt() -> None:
    with pytest.raises(InvalidApiKeyError):
        decode_target_api_key(json.dumps({"host": "https://target.example.com"}))
    with pytest.raises(InvalidApiKeyError):
        decode_target_api_key(_b64("[1, 2]"))


def test_ph3_src_001_get_collections_sends_key_header(httpx_mock: HTTPXMock) -> None:
    key = _source_key()
    httpx_mock.add_response(
        method="GET",
        url="https://legacy.example.com/api/plugin/common/space",
        match_headers={"promyze-api-key": key},
        json=[{"_id": "s1", "name": "Backend"}, {"_id": "s2", "name": "Mobile App"}],
    )

    collections = SourceCatalogClient(key).get_collections()

    assert collections == [
        SourceCollection(id="s1", name="Backend"),
        SourceCollection(id="s2", name="Mobile App"),
    ]


def test_ph3_src_002_http_error_raises_source_api_error(httpx_mock: HTTPXMock) -> None:
    httpx_mock.add_response(status_code=401)

    with pytest.raises(SourceApiError, match="401"):
        SourceCatalogClient(_source_key()).get_collections()


def test_ph3_src_003_malformed_payload_raises_source_api_error(
    httpx_mock: HTTPXMock,
) -> None:
    httpx_mock.add_response(json={"spaces": "nope"})

    with pytest.raises(SourceApiError, match="Unexpected"):
        SourceCatalogClient(_source_key()).get_collections()


def test_ph3_tgt_001_import_posts_single_standard_with_bearer(
    httpx_mock: HTTPXMock,
) -> None:
    key = _target_key()
    httpx_mock.add_response(
        method="POST",
        url="https://target.example.com/api/v0/import-legacy",
        match_headers={"Authorization": f"Bearer {key}"},
        json={"imported": 1},
    )
    standard = ValidatedStandard(name="Backend - Style", description="d", rules=[])

    result = TargetImportClient(key).import_payload({"standards": [standard.to_dict()]})

    assert result == {"imported": 1}
    request = httpx_mock.get_request()
    assert request is not None
    assert json.loads(request.content) == {
        "standards": [{"name": "Backend - Style", "description": "d", "rules": []}]
    }


def test_ph3_tgt_002_rejection_carries_status_and_server_message(
    httpx_mock: HTTPXMock,
) -> None:
    httpx_mock.add_response(status_code=422, json={"message": "Standard already exists"})

    with pytest.raises(TargetImportError, match="Standard already exists") as exc_info:
        TargetImportClient(_target_key()).import_payload({"standards": []})

    assert exc_info.value.status_code == 422


def test_ph3_tgt_003_unreachable_server_is_reported(httpx_mock: HTTPXMock) -> None:
    httpx_mock.add_exception(httpx.ConnectError("connection refused"))

    with pytest.raises(TargetImportError, match="not accessible") as exc_info:
        TargetImportClient(_target_key()).import_payload({"standards": []})

    assert exc_info.value.status_code is None


def test_ph3_tgt_004_invalid_key_fails_at_construction() -> None:
    with pytest.raises(InvalidApiKeyError):
        TargetImportClient("garbage")
