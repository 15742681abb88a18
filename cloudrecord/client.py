"""HTTP client that flushes record operations to the remote store.

Handles network delivery with retry logic. Each save sends a snapshot of the
pending table and clears only the entries of that snapshot, so mutations made
while a request is in flight stay pending for the next save.
"""

import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any

import httpx

from .config import ClientConfig, ServerConfig
from .errors import RemoteError
from .record import Record

logger = logging.getLogger(__name__)

_METADATA_KEYS = ("objectId", "createdAt", "updatedAt")


@dataclass
class SaveResult:
    """Result of a save."""

    object_id: str | None
    created: bool = False
    operations_sent: int = 0
    timestamp: datetime | None = None


class RecordClient:
    """Client for saving, fetching and deleting records.

    Uses exponential backoff for server errors and connection failures.
    Client errors (4xx) are not retried.
    """

    def __init__(
        self,
        server: ServerConfig,
        client: ClientConfig | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """Initialize the record client.

        Args:
            server: Application credentials and server URL.
            client: Timeout and retry settings.
            transport: Optional httpx transport (used by tests).
        """
        self.server = server
        self.settings = client or ClientConfig()
        self._transport = transport

    def _headers(self) -> dict[str, str]:
        return {
            "X-LC-Id": self.server.app_id,
            "X-LC-Key": self.server.app_key,
            "Content-Type": "application/json",
        }

    def _class_path(self, record: Record) -> str:
        path = f"/classes/{record.class_name}"
        if record.object_id:
            path += f"/{record.object_id}"
        return path

    async def _request_with_retry(
        self,
        method: str,
        path: str,
        json_data: Any = None,
    ) -> Any:
        """Make HTTP request with exponential backoff retry.

        Args:
            method: HTTP method.
            path: URL path appended to the server base URL.
            json_data: Optional JSON body.

        Returns:
            Decoded JSON response body.

        Raises:
            RemoteError: On a client error or once retries are exhausted.
        """
        url = f"{self.server.base_url}{path}"
        backoff = self.settings.retry_backoff_seconds
        max_retries = max(1, self.settings.max_retries)
        last_error = "no attempt made"

        async with httpx.AsyncClient(
            timeout=self.settings.timeout,
            headers=self._headers(),
            transport=self._transport,
        ) as client:
            for attempt in range(max_retries):
                try:
                    response = await client.request(method, url, json=json_data)

                    if response.status_code < 300:
                        return self._decode_body(response)

                    if response.status_code >= 500:
                        # Server error, retry
                        last_error = f"HTTP {response.status_code}"
                        logger.warning(
                            f"Server error {response.status_code}, "
                            f"attempt {attempt + 1}/{max_retries}"
                        )
                    else:
                        # Client error, don't retry
                        raise self._client_error(response)

                except httpx.ConnectError:
                    last_error = "Connection failed"
                    logger.warning(
                        f"Connection failed, attempt {attempt + 1}/{max_retries}"
                    )
                except httpx.TimeoutException:
                    last_error = "Request timeout"
                    logger.warning(
                        f"Request timeout, attempt {attempt + 1}/{max_retries}"
                    )
                except httpx.TransportError as e:
                    last_error = f"Transport error: {e}"
                    logger.warning(
                        f"Transport error ({e}), attempt {attempt + 1}/{max_retries}"
                    )

                # Exponential backoff
                if attempt < max_retries - 1:
                    await asyncio.sleep(backoff)
                    backoff *= 2

        raise RemoteError(f"Max retries ({max_retries}) exceeded: {last_error}")

    @staticmethod
    def _decode_body(response: httpx.Response) -> Any:
        if not response.content:
            return {}
        try:
            return response.json()
        except ValueError as e:
            raise RemoteError(
                f"Invalid JSON in HTTP {response.status_code} response: {e}",
                status_code=response.status_code,
            ) from e

    @staticmethod
    def _client_error(response: httpx.Response) -> RemoteError:
        code = None
        message = response.text
        try:
            body = response.json()
            code = body.get("code")
            message = body.get("error", message)
        except ValueError:
            pass
        return RemoteError(
            f"HTTP {response.status_code}: {message}",
            status_code=response.status_code,
            code=code,
        )

    async def save(self, record: Record) -> SaveResult:
        """Send the record's pending operations.

        New records are created with POST, existing ones updated with PUT.
        Only the operations included in the request are cleared afterwards.

        Raises:
            RemoteError: The save failed; pending operations are kept.
        """
        created = record.object_id is None
        if not record.has_pending_changes and not created:
            return SaveResult(object_id=record.object_id, timestamp=datetime.now())

        snapshot = record.begin_flush()
        payload = record.update_payload(snapshot)
        method = "POST" if created else "PUT"

        try:
            data = await self._request_with_retry(
                method, self._class_path(record), payload
            )
        except Exception:
            record.abort_flush(snapshot)
            raise

        record.apply_server_data(
            {key: data[key] for key in _METADATA_KEYS if key in data}
        )
        record.clear_operations(snapshot)

        logger.info(
            f"Saved {record.class_name}/{record.object_id} "
            f"({len(snapshot)} operations)"
        )
        return SaveResult(
            object_id=record.object_id,
            created=created,
            operations_sent=len(snapshot),
            timestamp=datetime.now(),
        )

    async def fetch(self, record: Record) -> Record:
        """Replace local values with the stored ones.

        Pending operations are discarded, since the fetched values supersede
        them.
        """
        if not record.object_id:
            raise ValueError("Cannot fetch a record without an object id")

        data = await self._request_with_retry("GET", self._class_path(record))

        if record.has_pending_changes:
            logger.info(
                f"Discarding {len(record.pending_operations)} pending operations "
                f"on {record.class_name}/{record.object_id}"
            )
        record.discard_changes()
        record.apply_server_data(data, replace=True)
        return record

    async def delete(self, record: Record) -> None:
        """Delete the record from the remote store."""
        if not record.object_id:
            raise ValueError("Cannot delete a record without an object id")

        await self._request_with_retry("DELETE", self._class_path(record))
        logger.info(f"Deleted {record.class_name}/{record.object_id}")
