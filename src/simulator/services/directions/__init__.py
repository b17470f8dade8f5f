"""Route geometry providers."""

from .base import DirectionsProvider, GeometryUnavailableError, Location
from .dispatcher import get_provider

__all__ = ["DirectionsProvider", "GeometryUnavailableError", "Location", "get_provider"]
