"""HTTP client for the fleet management API."""

from __future__ import annotations

import logging
import time
from typing import Any

import httpx

from ...config import settings
from ...models.domain import TransportStatus

logger = logging.getLogger(__name__)


class FleetClient:
    def __init__(
        self,
        base_url: str | None = None,
        token: str | None = None,
        timeout: float | None = None,
        max_retries: int | None = None,
        backoff_seconds: float | None = None,
    ) -> None:
        self.base_url = base_url or settings.fleet_base_url
        if not self.base_url:
            raise ValueError("Fleet base URL is not configured.")
        self.base_url = self.base_url.rstrip("/")
        self.token = token if token is not None else settings.fleet_api_token
        self.timeout = timeout if timeout is not None else settings.request_timeout_seconds
        self.max_retries = max_retries if max_retries is not None else settings.osrm_max_retries
        self.backoff_seconds = backoff_seconds if backoff_seconds is not None else settings.osrm_backoff_seconds

    def _headers(self) -> dict:
        return {"Authorization": f"Bearer {self.token}"} if self.token else {}

    def _get_client(self) -> httpx.Client:
        return httpx.Client(timeout=httpx.Timeout(self.timeout, connect=10.0), headers=self._headers())

    def _send(self, method: str, path: str, payload: dict | None = None) -> dict:
        url = f"{self.base_url}{path}"
        client = self._get_client()
        try:
            attempt = 0
            while True:
                try:
                    response = client.request(method, url, json=payload)
                    response.raise_for_status()
                    return response.json() if response.content else {}
                except httpx.HTTPStatusError as e:
                    attempt += 1
                    if attempt > self.max_retries:
                        raise ConnectionError(
                            f"Fleet service at {self.base_url} answered {e.response.status_code} for {method} {path}"
                        ) from e
                    logger.debug(f"Fleet returned {e.response.status_code}, retrying (attempt {attempt}/{self.max_retries})")
                    time.sleep(self.backoff_seconds * attempt)
                except httpx.TransportError as e:
                    attempt += 1
                    if attempt > self.max_retries:
                        raise ConnectionError(f"Failed to reach fleet service at {self.base_url}: {e}") from e
                    wait_time = self.backoff_seconds * (2 ** (attempt - 1))
                    logger.debug(f"Fleet request error, retrying in {wait_time:.1f}s (attempt {attempt}/{self.max_retries}): {e}")
                    time.sleep(wait_time)
        finally:
            client.close()

    def create_transport(
        self,
        lat: float,
        lng: float,
        status: TransportStatus = TransportStatus.ONLINE,
        metadata: dict | None = None,
    ) -> "RemoteTransport":
        """Register a transport with the fleet and return a handle on it."""
        body = {
            "latitude": lat,
            "longitude": lng,
            "status": status.value,
            "metadata": metadata or {},
        }
        data = self._send("POST", "/transports", body)
        transport_id = str(data["id"])
        logger.info(f"Registered transport {transport_id} with fleet at ({lat}, {lng})")
        return RemoteTransport(transport_id, self)

    def update_transport_location(self, transport_id: str, lat: float, lng: float) -> None:
        self._send("PUT", f"/transports/{transport_id}/location", {"latitude": lat, "longitude": lng})

    def update_transport_status(self, transport_id: str, status: TransportStatus) -> None:
        self._send("PUT", f"/transports/{transport_id}/status", {"status": status.value})

    def commodity_picked_up(self, commodity_id: str, transport_id: str | None) -> None:
        self._send("PUT", f"/commodities/{commodity_id}/picked-up", {"transport_id": transport_id})

    def commodity_dropped_off(self, commodity_id: str) -> None:
        self._send("PUT", f"/commodities/{commodity_id}/dropped-off")


class RemoteTransport:
    """Fleet-side transport record addressed by id."""

    def __init__(self, transport_id: str, client: FleetClient) -> None:
        self.transport_id = transport_id
        self.client = client

    def update_location(self, lat: float, lng: float) -> None:
        self.client.update_transport_location(self.transport_id, lat, lng)

    def update_status(self, status: TransportStatus) -> None:
        self.client.update_transport_status(self.transport_id, status)


class RemoteCommodity:
    """Adapts a commodity id to the ``Commodity`` notifications."""

    def __init__(self, commodity_id: str, client: FleetClient | None) -> None:
        self.commodity_id = commodity_id
        self.client = client

    def picked_up(self, carrier: Any) -> None:
        if self.client is None:
            logger.info(f"Commodity {self.commodity_id} picked up (no fleet bound)")
            return
        self.client.commodity_picked_up(self.commodity_id, getattr(carrier, "transport_id", None))

    def dropped_off(self) -> None:
        if self.client is None:
            logger.info(f"Commodity {self.commodity_id} dropped off (no fleet bound)")
            return
        self.client.commodity_dropped_off(self.commodity_id)

    def __repr__(self) -> str:
        return f"RemoteCommodity({self.commodity_id!r})"
