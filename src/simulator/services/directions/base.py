"""Contract for route geometry providers."""

from __future__ import annotations

from typing import Protocol, Union

from ...models.domain import Coordinate

Location = Union[str, Coordinate]


class GeometryUnavailableError(ConnectionError):
    """Route geometry could not be fetched or parsed."""


class DirectionsProvider(Protocol):
    def get_directions(self, origin: Location, destination: Location) -> list[Coordinate]:
        """Return the ordered polyline connecting ``origin`` to ``destination``."""
        ...


def describe(location: Location) -> str:
    return location.as_query() if isinstance(location, Coordinate) else str(location)
