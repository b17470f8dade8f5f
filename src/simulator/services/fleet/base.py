"""Contracts for the fleet system the simulated transport reports to."""

from __future__ import annotations

from typing import Any, Protocol

from ...models.domain import TransportStatus


class FleetTransport(Protocol):
    """Handle on the transport record held by the fleet system."""

    def update_location(self, lat: float, lng: float) -> None:
        ...

    def update_status(self, status: TransportStatus) -> None:
        ...


class Commodity(Protocol):
    """A commodity referenced by an action; notified when it is serviced."""

    def picked_up(self, carrier: Any) -> None:
        ...

    def dropped_off(self) -> None:
        ...
