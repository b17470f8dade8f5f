"""Domain models for the simulated transport and its assignments."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Sequence, Tuple


@dataclass(frozen=True, slots=True)
class Coordinate:
    """A (latitude, longitude) pair.

    Distances are planar in degree space. This is the approximation the
    simulator moves with; it is not a geodesic distance.
    """

    lat: float
    lng: float

    def distance(self, other: Coordinate) -> float:
        return math.hypot(other.lat - self.lat, other.lng - self.lng)

    def move_towards(self, target: Coordinate, distance: float) -> Coordinate:
        """Return the point ``distance`` along the straight line to ``target``.

        The result never passes ``target``.
        """
        total = self.distance(target)
        if total <= distance or total == 0.0:
            return target
        ratio = distance / total
        return Coordinate(
            self.lat + (target.lat - self.lat) * ratio,
            self.lng + (target.lng - self.lng) * ratio,
        )

    def as_query(self) -> str:
        return f"{self.lat},{self.lng}"

    @classmethod
    def parse(cls, value: str) -> Coordinate:
        """Parse a ``"lat,lng"`` string."""
        parts = [part.strip() for part in value.split(",")]
        if len(parts) != 2:
            raise ValueError(f"Expected 'lat,lng', got {value!r}.")
        try:
            return cls(float(parts[0]), float(parts[1]))
        except ValueError as exc:
            raise ValueError(f"Expected 'lat,lng', got {value!r}.") from exc


Polyline = Tuple[Coordinate, ...]


def polyline_length(points: Sequence[Coordinate], closed: bool = False) -> float:
    """Sum of segment lengths; ``closed`` adds the last -> first segment."""
    total = sum(a.distance(b) for a, b in zip(points, points[1:]))
    if closed and len(points) > 1:
        total += points[-1].distance(points[0])
    return total


class ActionKind(str, Enum):
    START = "START"
    PICK_UP = "PICK_UP"
    DROP_OFF = "DROP_OFF"


class TransportStatus(str, Enum):
    ONLINE = "ONLINE"
    OFFLINE = "OFFLINE"


class Mode(str, Enum):
    ON_LOOP = "ON_LOOP"
    RETURNING = "RETURNING"
    SERVICING = "SERVICING"


@dataclass(frozen=True, slots=True)
class Action:
    """A pickup or drop-off assigned by the fleet system."""

    kind: ActionKind
    target: Coordinate
    commodity: Any = field(default=None, compare=False)


@dataclass(frozen=True, slots=True)
class VehicleState:
    """Snapshot of the vehicle: where it is and what it is walking.

    ``next_index`` indexes the detour when one is set, the loop otherwise.
    ``reroute_pending`` marks a detour that could not be refreshed and must be
    fetched again on the next tick.
    """

    position: Coordinate
    next_index: int
    detour: Polyline = ()
    actions: Tuple[Action, ...] = ()
    reroute_pending: bool = False

    @property
    def mode(self) -> Mode:
        if self.actions:
            return Mode.SERVICING
        if self.detour:
            return Mode.RETURNING
        return Mode.ON_LOOP

    @property
    def head(self) -> Action | None:
        return self.actions[0] if self.actions else None
