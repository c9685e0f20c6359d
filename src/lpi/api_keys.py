# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Decoding of the source and target API key blobs.

Both keys are self-describing. Each is decoded directly first and, when that
fails, once more after removing one layer of base64 encoding.
"""

import base64
import binascii
import json
import logging
from dataclasses import dataclass
from typing import Any, Callable

import jwt

logger = logging.getLogger(__name__)


class InvalidApiKeyError(ValueError):
    """Represent an API key that cannot be decoded or lacks required fields."""


@dataclass(frozen=True)
class SourceServer:
    """Represent the legacy server a source key points to."""

    host: str
    secure: bool

    @property
    def base_url(self) -> str:
        """Return the server base URL without a trailing slash."""
        protocol = "https" if self.secure else "http"
        return f"{protocol}://{self.host.rstrip('/')}"


@dataclass(frozen=True)
class TargetCredentials:
    """Represent the target server and credential a target key carries."""

    host: str
    jwt: str


def _unwrap_base64(value: str) -> str:
    padded = value + "=" * (-len(value) % 4)
    return base64.b64decode(padded).decode("utf-8")


def _decode_with_fallback(
    key: str,
    decode: Callable[[str], Any],
    accept: Callable[[Any], bool],
) -> dict[str, Any]:
    """Decode a key directly, then after one base64 unwrap.

    Args:
        key: Raw key.
        decode: Payload decoder.
        accept: Predicate validating a decoded payload.

    Returns:
        First accepted payload.

    Raises:
        InvalidApiKeyError: If neither stage yields an accepted payload.
    """
    candidates: list[Callable[[], str]] = [lambda: key, lambda: _unwrap_base64(key)]
    for stage, candidate in enumerate(candidates, start=1):
        try:
            payload = decode(candidate())
        except (
            jwt.PyJWTError,
            json.JSONDecodeError,
            binascii.Error,
            UnicodeDecodeError,
            ValueError,
        ) as exc:
            logger.debug("api_key_decode_failed stage=%s error=%s", stage, exc)
            continue
        if isinstance(payload, dict) and accept(payload):
            return payload
    raise InvalidApiKeyError(
        "Your API Key seems to be invalid. Please check it and try again."
    )


def _decode_jwt_claims(token: str) -> Any:
    return jwt.decode(token, options={"verify_signature": False})


def decode_source_api_key(key: str) -> SourceServer:
    """Extract the legacy server location from a source API key.

    Args:
        key: Source API key (a JWT, possibly base64-wrapped).

    Returns:
        Server host and protocol flag.

    Raises:
        InvalidApiKeyError: If the key is empty or carries no host/secure claims.
    """
    key = key.strip()
    if not key:
        raise InvalidApiKeyError("Source API key is empty")
    payload = _decode_with_fallback(
        key,
        _decode_jwt_claims,
        lambda claims: isinstance(claims.get("host"), str)
        and bool(claims["host"])
        and isinstance(claims.get("secure"), bool),
    )
    return SourceServer(host=payload["host"], secure=payload["secure"])


def decode_target_api_key(key: str) -> TargetCredentials:
    """Extract the target host and credential from a target API key.

    Args:
        key: Target API key (a JSON object, possibly base64-wrapped).

    Returns:
        Target host and credential.

    Raises:
        InvalidApiKeyError: If the key is empty or lacks host/jwt fields.
    """
    key = key.strip()
    if not key:
        raise InvalidApiKeyError("Target API key is empty")
    payload = _decode_with_fallback(
        key,
        json.loads,
        lambda data: all(
            isinstance(data.get(field), str) and bool(data[field])
            for field in ("host", "jwt")
        ),
    )
    return TargetCredentials(host=payload["host"], jwt=payload["jwt"])
