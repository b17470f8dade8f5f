"""HTTP client for requesting route geometry from OSRM services."""

from __future__ import annotations

import logging
import time
from typing import Sequence

import httpx

from ...config import settings
from ...models.domain import Coordinate
from .base import GeometryUnavailableError, Location, describe
from .polyline import decode_polyline

logger = logging.getLogger(__name__)


class OSRMClient:
    def __init__(
        self,
        base_url: str | None = None,
        profile: str | None = None,
        timeout: float | None = None,
        max_retries: int | None = None,
        backoff_seconds: float | None = None,
    ) -> None:
        self.base_url = base_url or settings.osrm_base_url
        if not self.base_url:
            raise ValueError("OSRM base URL is not configured.")
        self.base_url = self.base_url.rstrip("/")
        self.profile = profile or settings.osrm_profile
        self.max_retries = max_retries if max_retries is not None else settings.osrm_max_retries
        self.backoff_seconds = backoff_seconds if backoff_seconds is not None else settings.osrm_backoff_seconds
        self.timeout = timeout if timeout is not None else settings.request_timeout_seconds

    def _get_client(self) -> httpx.Client:
        return httpx.Client(timeout=httpx.Timeout(self.timeout, connect=10.0))

    def route(self, coordinates: Sequence[Coordinate]) -> dict:
        """Get route geometry between coordinates using the OSRM route endpoint.

        Args:
            coordinates: Waypoints in travel order.

        Returns:
            The decoded OSRM JSON response; ``routes[0].geometry`` is an
            encoded polyline.
        """
        if len(coordinates) < 2:
            raise ValueError("At least two coordinates are required for OSRM route.")

        # OSRM route endpoint expects coordinates as "lon,lat;lon,lat;..."
        coordinate_str = ";".join(f"{c.lng},{c.lat}" for c in coordinates)
        params = {
            "overview": "full",
            "geometries": "polyline",
            "steps": "false",
        }
        url = f"{self.base_url}/route/v1/{self.profile}/{coordinate_str}"

        client = self._get_client()
        try:
            attempt = 0
            while True:
                try:
                    response = client.get(url, params=params)
                    response.raise_for_status()
                    data = response.json()

                    if data.get("code") != "Ok":
                        error_msg = data.get("message", "Unknown OSRM route error")
                        raise ValueError(f"OSRM route request failed: {error_msg}")

                    return data
                except httpx.HTTPStatusError:
                    attempt += 1
                    if attempt > self.max_retries:
                        raise
                    time.sleep(self.backoff_seconds * attempt)
                except httpx.TimeoutException as e:
                    attempt += 1
                    if attempt > self.max_retries:
                        logger.warning(f"OSRM route request timed out after {self.max_retries} attempts: {e}")
                        raise
                    wait_time = self.backoff_seconds * (2 ** (attempt - 1))
                    logger.debug(f"OSRM route timeout, retrying in {wait_time:.1f}s (attempt {attempt}/{self.max_retries})")
                    time.sleep(wait_time)
                except (httpx.NetworkError, OSError) as e:
                    attempt += 1
                    if attempt > self.max_retries:
                        raise ConnectionError(
                            f"Failed to connect to OSRM service at {self.base_url}: {e}"
                        ) from e
                    wait_time = self.backoff_seconds * (2 ** (attempt - 1))
                    logger.debug(f"OSRM network error, retrying in {wait_time:.1f}s (attempt {attempt}/{self.max_retries}): {e}")
                    time.sleep(wait_time)
                except (httpx.HTTPError, ValueError):
                    attempt += 1
                    if attempt > self.max_retries:
                        raise
                    time.sleep(self.backoff_seconds * attempt)
        finally:
            client.close()

    def get_directions(self, origin: Location, destination: Location) -> list[Coordinate]:
        start = _resolve(origin)
        end = _resolve(destination)
        logger.info(f"Requesting OSRM directions {describe(start)} -> {describe(end)}")
        try:
            data = self.route([start, end])
            geometry = data["routes"][0]["geometry"]
            points = [Coordinate(lat, lng) for lat, lng in decode_polyline(geometry)]
        except (httpx.HTTPError, ConnectionError, ValueError, KeyError, IndexError, TypeError) as exc:
            raise GeometryUnavailableError(
                f"OSRM directions {describe(start)} -> {describe(end)} unavailable: {exc}"
            ) from exc
        if not points:
            raise GeometryUnavailableError(f"OSRM returned an empty geometry for {describe(start)} -> {describe(end)}")
        return points


def _resolve(location: Location) -> Coordinate:
    if isinstance(location, Coordinate):
        return location
    try:
        return Coordinate.parse(location)
    except ValueError as exc:
        raise GeometryUnavailableError(
            f"OSRM cannot resolve address {location!r}; use 'lat,lng' waypoints or the google provider."
        ) from exc


def check_health(base_url: str | None = None) -> bool:
    """Check OSRM service health by requesting a short route.

    Public OSRM endpoints may not have a /health endpoint, so we test
    connectivity with a minimal two-point route request.
    """
    base = base_url or settings.osrm_base_url
    if not base:
        return False
    try:
        # Two points in Berlin; works with public and self-hosted instances
        test_coords = "13.388860,52.517037;13.385983,52.496891"
        url = f"{base.rstrip('/')}/route/v1/{settings.osrm_profile}/{test_coords}"
        response = httpx.get(url, params={"overview": "false"}, timeout=5.0)
        response.raise_for_status()
        return response.json().get("code") == "Ok"
    except (httpx.HTTPError, ValueError):
        return False
