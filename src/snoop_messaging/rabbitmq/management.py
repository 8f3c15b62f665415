"""Client for the RabbitMQ management HTTP API."""

from __future__ import annotations

import logging
from typing import Any
from urllib.parse import quote

import httpx
from pydantic import ValidationError

from ..conventions import DEFAULT_MAX_MESSAGES
from ..decoder import MessageDecoder
from ..exceptions import ManagementApiError, MessagingConnectionError, MessagingError
from ..models import DecodedMessage, QueueInfo

logger = logging.getLogger(__name__)


class ManagementApiClient:
    """Async client for the endpoints needed to browse and re-route queues.

    HTTP error statuses raise ManagementApiError; transport failures raise
    MessagingConnectionError.
    """

    def __init__(
        self,
        base_url: str = "http://localhost:15672",
        *,
        username: str = "guest",
        password: str = "guest",
        vhost: str = "/",
        timeout: float = 10.0,
        decoder: MessageDecoder | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        """Configure client.

        Args:
            base_url: Management plugin root URL.
            username: Basic auth user.
            password: Basic auth password.
            vhost: Virtual host the queues live in.
            timeout: Request timeout in seconds (ignored when client is given).
            decoder: Decodes message snapshots; default MessageDecoder().
            client: Pre-built httpx client, e.g. with a mock transport.
        """
        self._base_url = base_url.rstrip("/")
        self._vhost = quote(vhost, safe="")
        self._decoder = decoder or MessageDecoder()
        self._client = client or httpx.AsyncClient(
            auth=(username, password),
            timeout=timeout,
        )

    @property
    def base_url(self) -> str:
        return self._base_url

    def _queue_path(self, queue_name: str, suffix: str = "") -> str:
        return f"/api/queues/{self._vhost}/{quote(queue_name, safe='')}{suffix}"

    async def _request(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        url = f"{self._base_url}{path}"
        try:
            response = await self._client.request(method, url, **kwargs)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise ManagementApiError(
                f"{method} {path} failed with HTTP {e.response.status_code}",
                status_code=e.response.status_code,
                response_body=e.response.text,
            ) from e
        except httpx.HTTPError as e:
            raise MessagingConnectionError(f"{method} {path} failed: {e}") from e
        return response

    @staticmethod
    def _json(response: httpx.Response) -> Any:
        try:
            return response.json()
        except ValueError as e:
            raise ManagementApiError(
                f"Management API returned invalid JSON: {e}",
                status_code=response.status_code,
                response_body=response.text,
            ) from e

    @staticmethod
    def _json_list(response: httpx.Response) -> list[Any]:
        data = ManagementApiClient._json(response)
        if not isinstance(data, list):
            raise ManagementApiError(
                f"Expected a JSON array, got {type(data).__name__}",
                status_code=response.status_code,
                response_body=response.text,
            )
        return data

    async def get_queues(self) -> list[QueueInfo]:
        """List every queue the user can see."""
        response = await self._request("GET", "/api/queues")
        try:
            return [QueueInfo.model_validate(item) for item in self._json_list(response)]
        except ValidationError as e:
            raise ManagementApiError(f"Unexpected queue listing: {e}") from e

    async def get_messages(
        self, queue_name: str, max_messages: int = DEFAULT_MAX_MESSAGES
    ) -> list[DecodedMessage]:
        """Fetch up to *max_messages* snapshots and decode them.

        Messages are requeued by the broker; undecodable entries are omitted.
        """
        response = await self._request(
            "POST",
            self._queue_path(queue_name, "/get"),
            json={
                "count": max_messages,
                "ackmode": "ack_requeue_true",
                "encoding": "base64",
            },
        )
        snapshots = []
        for item in self._json_list(response):
            if isinstance(item, dict):
                snapshots.append({**item, "source": "snapshot"})
            else:
                logger.warning(f"Skipping non-object message entry from {queue_name}")
        return self._decoder.decode_many(snapshots)

    async def test_connection(self) -> bool:
        """Return True if the management API answers ``/api/overview``."""
        try:
            await self._request("GET", "/api/overview")
        except MessagingError as e:
            logger.debug(f"Management API connection test failed: {e}")
            return False
        return True

    async def purge_queue(self, queue_name: str) -> None:
        await self._request("DELETE", self._queue_path(queue_name, "/contents"))

    async def publish(
        self,
        routing_key: str,
        payload: str,
        *,
        headers: dict[str, str] | None = None,
        content_type: str = "application/json",
    ) -> bool:
        """Publish *payload* through the default exchange.

        Returns the broker's ``routed`` flag (False when no queue matched).
        """
        response = await self._request(
            "POST",
            f"/api/exchanges/{self._vhost}/amq.default/publish",
            json={
                "properties": {
                    "content_type": content_type,
                    "headers": headers or {},
                },
                "routing_key": routing_key,
                "payload": payload,
                "payload_encoding": "string",
            },
        )
        data = self._json(response)
        return bool(isinstance(data, dict) and data.get("routed"))

    async def close(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> ManagementApiClient:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()
