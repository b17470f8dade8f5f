"""Loop path construction from an ordered list of waypoints."""

from __future__ import annotations

import logging
from typing import Sequence

from ...models.domain import Polyline
from ..directions.base import DirectionsProvider, Location

logger = logging.getLogger(__name__)


def build_loop(waypoints: Sequence[Location], provider: DirectionsProvider) -> Polyline:
    """Concatenate the directions between each consecutive waypoint pair.

    The last waypoint connects back to the first. Any failed segment raises
    ``GeometryUnavailableError``; no partial loop is returned.
    """
    if len(waypoints) < 2:
        raise ValueError("A loop needs at least two waypoints.")

    logger.info(f"Creating loop from {len(waypoints)} waypoints: {list(waypoints)}")
    path = []
    for i, origin in enumerate(waypoints):
        destination = waypoints[(i + 1) % len(waypoints)]
        path.extend(provider.get_directions(origin, destination))
    logger.info(f"Loop has {len(path)} points")
    return tuple(path)
