# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Client for the legacy source catalog API."""

import logging
from dataclasses import dataclass

import httpx

from lpi.api_keys import decode_source_api_key

logger = logging.getLogger(__name__)

COLLECTIONS_PATH: str = "/api/plugin/common/space"
API_KEY_HEADER: str = "promyze-api-key"


class SourceApiError(RuntimeError):
    """Represent a failed source catalog request."""


@dataclass(frozen=True)
class SourceCollection:
    """Represent one source collection (space) of the legacy system."""

    id: str
    name: str


class SourceCatalogClient:
    """Fetch source collections from the legacy server."""

    def __init__(self, api_key: str, timeout: float = 30.0) -> None:
        """Initialize client.

        Args:
            api_key: Source API key; also locates the server.
            timeout: Request timeout in seconds.

        Raises:
            InvalidApiKeyError: If the key cannot be decoded.
        """
        self._api_key = api_key
        self._base_url = decode_source_api_key(api_key).base_url
        self._timeout = timeout

    @property
    def base_url(self) -> str:
        """Return the decoded server base URL."""
        return self._base_url

    def get_collections(self) -> list[SourceCollection]:
        """Fetch all collections visible to the key.

        Returns:
            Collections as ``(id, name)`` pairs.

        Raises:
            SourceApiError: If the request fails or the payload is malformed.
        """
        url = f"{self._base_url}{COLLECTIONS_PATH}"
        headers = {
            "Accept": "application/json",
            "Content-Type": "application/json",
            API_KEY_HEADER: self._api_key,
        }
        try:
            with httpx.Client(timeout=self._timeout) as client:
                response = client.get(url, headers=headers)
        except httpx.HTTPError as exc:
            logger.warning(f"Source catalog request failed (url={url} error={exc})")
            raise SourceApiError(f"Source API request failed: {exc}") from exc

        if response.is_error:
            logger.warning(
                f"Source catalog returned an error (url={url} "
                f"status={response.status_code})"
            )
            raise SourceApiError(
                f"API error: {response.status_code} {response.reason_phrase}"
            )

        try:
            payload = response.json()
            return [
                SourceCollection(id=str(item["_id"]), name=str(item["name"]))
                for item in payload
            ]
        except (ValueError, TypeError, KeyError) as exc:
            raise SourceApiError(f"Unexpected source API payload: {exc}") from exc
