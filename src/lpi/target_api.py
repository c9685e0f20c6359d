# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Client for the target system's legacy import endpoint."""

import logging
from typing import Any

import httpx

from lpi.api_keys import decode_target_api_key

logger = logging.getLogger(__name__)

IMPORT_PATH: str = "/api/v0/import-legacy"


class TargetImportError(RuntimeError):
    """Represent a rejected or failed import request.

    Attributes:
        status_code: HTTP status of the response, when one was received.
    """

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class TargetImportClient:
    """Import standards into the target system one request at a time."""

    def __init__(self, api_key: str, timeout: float = 60.0) -> None:
        """Initialize client.

        Args:
            api_key: Target API key carrying the host and credential.
            timeout: Request timeout in seconds.

        Raises:
            InvalidApiKeyError: If the key cannot be decoded.
        """
        self._api_key = api_key
        self._host = decode_target_api_key(api_key).host.rstrip("/")
        self._timeout = timeout

    def import_payload(self, payload: dict[str, Any]) -> dict[str, Any]:
        """Send one validation document to the import endpoint.

        Args:
            payload: Document ``{standards: [...]}``.

        Returns:
            Decoded response body.

        Raises:
            TargetImportError: If the server is unreachable or rejects the payload.
        """
        url = f"{self._host}{IMPORT_PATH}"
        try:
            with httpx.Client(timeout=self._timeout) as client:
                response = client.post(
                    url,
                    json=payload,
                    headers={"Authorization": f"Bearer {self._api_key}"},
                )
        except (httpx.ConnectError, httpx.TimeoutException) as exc:
            logger.warning(f"Target server not reachable (url={url} error={exc})")
            raise TargetImportError(
                f"Target server is not accessible at {self._host}. Please check "
                f"your network connection or the server URL."
            ) from exc
        except httpx.HTTPError as exc:
            raise TargetImportError(f"Failed to import legacy data: {exc}") from exc

        if response.is_error:
            message = (
                f"API request failed: {response.status_code} {response.reason_phrase}"
            )
            try:
                body = response.json()
            except ValueError:
                body = None
            if isinstance(body, dict) and "message" in body:
                message = str(body["message"])
            raise TargetImportError(message, status_code=response.status_code)

        try:
            body = response.json()
        except ValueError:
            return {}
        return body if isinstance(body, dict) else {"result": body}
