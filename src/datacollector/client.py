"""HTTP transport for the Data Collector ingestion endpoint."""

from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import Mapping
from typing import Any

import httpx
from pydantic import BaseModel

from src.datacollector.config import DataCollectorConfig

LOGGER = logging.getLogger(__name__)

AUTH_HEADER_VALUE = "version=1.0"


class DataCollectorError(RuntimeError):
    """Base error for failed Data Collector deliveries."""


class DataCollectorConfigError(DataCollectorError):
    """Raised when the endpoint configuration cannot produce a client."""


class PayloadEncodingError(DataCollectorError):
    """Raised when a payload cannot be serialized to JSON."""


class DataCollectorTransportError(DataCollectorError):
    """Raised on connection, TLS, or timeout failures."""


class DataCollectorTimeoutError(DataCollectorTransportError):
    """Raised when a request does not finish within the configured timeout."""


class DataCollectorResponseError(DataCollectorError):
    """Raised when the endpoint answers with a non-2xx status."""

    def __init__(self, status_code: int, url: str) -> None:
        super().__init__(f"Data Collector at {url} rejected message with HTTP {status_code}")
        self.status_code = status_code
        self.url = url


def _parse_url(raw: str) -> httpx.URL:
    try:
        url = httpx.URL(raw)
    except (httpx.InvalidURL, TypeError) as exc:
        raise DataCollectorConfigError(f"invalid Data Collector URL: {raw!r}") from exc
    if url.scheme not in {"http", "https"} or not url.host:
        raise DataCollectorConfigError(f"invalid Data Collector URL: {raw!r}")
    return url


def encode_payload(body: Mapping[str, Any] | BaseModel) -> bytes:
    """Serialize a message body to JSON bytes, failing instead of truncating or nulling."""
    try:
        if isinstance(body, BaseModel):
            data: Any = body.model_dump(mode="json")
        else:
            data = dict(body)
        return json.dumps(data, allow_nan=False).encode("utf-8")
    except (TypeError, ValueError) as exc:
        raise PayloadEncodingError(f"cannot encode Data Collector payload: {exc}") from exc


def _check_token(token: str) -> str:
    if not isinstance(token, str) or not token.isascii() or not token.isprintable():
        raise DataCollectorConfigError(
            "Data Collector token must be printable ASCII without line breaks"
        )
    return token


class DataCollectorClient:
    """Single-endpoint client that POSTs one message per `update` call.

    `timeout_s` bounds the whole request, from connect to the last body byte.
    """

    def __init__(
        self,
        config: DataCollectorConfig,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        if config.timeout_s <= 0:
            raise DataCollectorConfigError("timeout_s must be positive")
        self.url = _parse_url(config.url)
        self.token = _check_token(config.token)
        self.verify = not config.skip_ssl_verify
        self.timeout_s = config.timeout_s
        self._transport = transport

    def headers(self) -> dict[str, str]:
        return {
            "Content-Type": "application/json",
            "x-data-collector-auth": AUTH_HEADER_VALUE,
            "x-data-collector-token": self.token,
        }

    async def _post(self, content: bytes) -> httpx.Response:
        async with httpx.AsyncClient(
            verify=self.verify,
            timeout=self.timeout_s,
            transport=self._transport,
        ) as client:
            return await client.post(self.url, content=content, headers=self.headers())

    async def _post_with_deadline(self, content: bytes) -> httpx.Response:
        return await asyncio.wait_for(self._post(content), timeout=self.timeout_s)

    def update(self, body: Mapping[str, Any] | BaseModel) -> None:
        """Send one message; raises a `DataCollectorError` subclass on failure.

        Runs its own event loop, so it must not be called from inside a running one.
        """
        content = encode_payload(body)

        LOGGER.debug("POST %s (%d bytes)", self.url, len(content))
        try:
            response = asyncio.run(self._post_with_deadline(content))
        except (TimeoutError, httpx.TimeoutException) as exc:
            LOGGER.warning("Data Collector delivery to %s timed out", self.url)
            raise DataCollectorTimeoutError(
                f"Data Collector request to {self.url} exceeded {self.timeout_s}s"
            ) from exc
        except httpx.TransportError as exc:
            LOGGER.warning("Data Collector delivery to %s failed: %s", self.url, exc)
            raise DataCollectorTransportError(
                f"Data Collector request to {self.url} failed: {exc}"
            ) from exc

        if not response.is_success:
            LOGGER.warning(
                "Data Collector at %s answered HTTP %d", self.url, response.status_code
            )
            raise DataCollectorResponseError(response.status_code, str(self.url))
