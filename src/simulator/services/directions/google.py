"""Google Directions API client; accepts free-form addresses as well as coordinates."""

from __future__ import annotations

import logging
import time

import httpx

from ...config import settings
from ...models.domain import Coordinate
from .base import GeometryUnavailableError, Location, describe
from .polyline import decode_polyline

logger = logging.getLogger(__name__)


class GoogleDirectionsClient:
    def __init__(
        self,
        api_key: str | None = None,
        url: str | None = None,
        timeout: float | None = None,
        max_retries: int | None = None,
        backoff_seconds: float | None = None,
    ) -> None:
        self.api_key = api_key or settings.google_api_key
        if not self.api_key:
            raise ValueError("Google Directions API key is not configured.")
        self.url = url or settings.google_directions_url
        self.timeout = timeout if timeout is not None else settings.request_timeout_seconds
        self.max_retries = max_retries if max_retries is not None else settings.osrm_max_retries
        self.backoff_seconds = backoff_seconds if backoff_seconds is not None else settings.osrm_backoff_seconds

    def _get_client(self) -> httpx.Client:
        return httpx.Client(timeout=httpx.Timeout(self.timeout, connect=10.0))

    def _request(self, params: dict) -> dict:
        client = self._get_client()
        try:
            attempt = 0
            while True:
                try:
                    response = client.get(self.url, params=params)
                    response.raise_for_status()
                    return response.json()
                except (httpx.TransportError, httpx.HTTPStatusError) as e:
                    attempt += 1
                    if attempt > self.max_retries:
                        raise
                    wait_time = self.backoff_seconds * (2 ** (attempt - 1))
                    logger.debug(f"Directions request failed, retrying in {wait_time:.1f}s (attempt {attempt}/{self.max_retries}): {e}")
                    time.sleep(wait_time)
        finally:
            client.close()

    def get_directions(self, origin: Location, destination: Location) -> list[Coordinate]:
        params = {
            "origin": describe(origin),
            "destination": describe(destination),
            "key": self.api_key,
        }
        logger.info(f"Requesting Google directions {params['origin']} -> {params['destination']}")
        try:
            data = self._request(params)
        except (httpx.HTTPError, ValueError) as exc:
            raise GeometryUnavailableError(f"Google directions request failed: {exc}") from exc

        status = data.get("status")
        if status != "OK":
            message = data.get("error_message", "")
            raise GeometryUnavailableError(f"Google directions returned {status}: {message}".rstrip(": "))
        try:
            encoded = data["routes"][0]["overview_polyline"]["points"]
            points = [Coordinate(lat, lng) for lat, lng in decode_polyline(encoded)]
        except (KeyError, IndexError, TypeError, ValueError) as exc:
            raise GeometryUnavailableError(f"Malformed Google directions response: {exc}") from exc
        if not points:
            raise GeometryUnavailableError("Google directions returned an empty geometry.")
        return points
