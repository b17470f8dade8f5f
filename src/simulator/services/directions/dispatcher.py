"""Factory for route geometry providers based on configuration."""

from __future__ import annotations

from .base import DirectionsProvider
from .google import GoogleDirectionsClient
from .osrm_client import OSRMClient


def get_provider(name: str) -> DirectionsProvider:
    match name:
        case "osrm":
            return OSRMClient()
        case "google":
            return GoogleDirectionsClient()
        case _:
            raise ValueError(f"Unknown directions provider '{name}'.")
