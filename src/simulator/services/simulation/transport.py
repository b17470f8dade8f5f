"""Simulated transport: the movement engine bound to a fleet transport record."""

from __future__ import annotations

import logging
import threading
from typing import Iterable, Sequence

from ...config import Settings, settings as default_settings
from ...models.domain import Action, Coordinate, Polyline, TransportStatus
from ..directions.base import DirectionsProvider, Location
from ..directions.dispatcher import get_provider
from ..fleet.base import FleetTransport
from ..fleet.client import FleetClient
from ..geospatial import path_length_km
from .engine import MovementEngine
from .loop import build_loop

logger = logging.getLogger(__name__)


class SimulatedTransport:
    def __init__(
        self,
        engine: MovementEngine,
        movement_delta: float,
        *,
        wait_for_route: bool = True,
        fleet_client: FleetClient | None = None,
    ) -> None:
        if engine.arrival_epsilon < movement_delta:
            raise ValueError(
                f"arrival_epsilon ({engine.arrival_epsilon}) must be >= movement_delta ({movement_delta})."
            )
        self.engine = engine
        self.movement_delta = movement_delta
        self.fleet_client = fleet_client
        self.waiting = wait_for_route
        self._fleet: FleetTransport | None = None
        self._stopped = False
        self._location_lock = threading.Lock()
        self._unsent_location: Coordinate | None = None

    @classmethod
    def create(
        cls,
        waypoints: Sequence[Location],
        provider: DirectionsProvider,
        *,
        movement_delta: float | None = None,
        arrival_epsilon: float | None = None,
        wait_for_route: bool = True,
    ) -> "SimulatedTransport":
        loop = build_loop(waypoints, provider)
        engine = MovementEngine(
            loop,
            provider,
            arrival_epsilon=arrival_epsilon if arrival_epsilon is not None else default_settings.arrival_epsilon,
        )
        return cls(
            engine,
            movement_delta if movement_delta is not None else default_settings.movement_delta,
            wait_for_route=wait_for_route,
        )

    @property
    def start(self) -> Coordinate:
        return self.engine.start

    @property
    def loop_path(self) -> Polyline:
        return self.engine.loop

    @property
    def fleet(self) -> FleetTransport | None:
        return self._fleet

    def attach(self, fleet: FleetTransport) -> None:
        self._fleet = fleet
        self.engine.carrier = fleet

    def routed(self, actions: Iterable[Action]) -> bool:
        """Fleet event: a new ordered action list was assigned to this transport."""
        self.waiting = False
        actions = list(actions)
        logger.info(f"Received new route: {[(a.kind.value, a.target.as_query()) for a in actions]}")
        return self.engine.on_actions_assigned(actions)

    def tick(self, delta: float | None = None) -> Coordinate:
        if self.waiting:
            return self.engine.position
        position = self.engine.advance(self.movement_delta if delta is None else delta)
        if self._fleet is not None:
            self._notify_fleet(position)
        return position

    def stop(self) -> None:
        """Send OFFLINE once, then drain and close the notification queue."""
        if self._stopped:
            return
        self._stopped = True
        if self._fleet is not None:
            logger.info("Taking transport offline")
            self.engine.notifications.submit("Fleet status update", self._fleet.update_status, TransportStatus.OFFLINE)
        self.engine.notifications.shutdown(wait=True)

    def _notify_fleet(self, position: Coordinate) -> None:
        # Only the newest position is sent; a slow fleet never builds a backlog.
        with self._location_lock:
            queued = self._unsent_location is not None
            self._unsent_location = position
        if not queued:
            self.engine.notifications.submit("Fleet location update", self._send_location)

    def _send_location(self) -> None:
        with self._location_lock:
            position, self._unsent_location = self._unsent_location, None
        if position is None or self._fleet is None:
            return
        logger.debug(f"Updating fleet location to {position}")
        self._fleet.update_location(position.lat, position.lng)

    def snapshot(self) -> dict:
        state = self.engine.state
        return {
            "latitude": state.position.lat,
            "longitude": state.position.lng,
            "mode": state.mode.value,
            "next_index": state.next_index,
            "pending_actions": len(state.actions),
            "detour_points": len(state.detour),
            "reroute_pending": state.reroute_pending,
            "waiting": self.waiting,
            "fleet_bound": self._fleet is not None,
            "loop_points": len(self.engine.loop),
            "loop_length_km": round(path_length_km(self.engine.loop, closed=True), 3),
        }


def create_simulation(config: Settings | None = None) -> SimulatedTransport:
    """Build the loop, the engine and, when configured, the fleet binding."""
    config = config or default_settings
    if len(config.loop_waypoints) < 2:
        raise ValueError("SIM_LOOP_WAYPOINTS must list at least two waypoints.")

    provider = get_provider(config.directions_provider)
    transport = SimulatedTransport.create(
        config.loop_waypoints,
        provider,
        movement_delta=config.movement_delta,
        arrival_epsilon=config.arrival_epsilon,
        wait_for_route=config.wait_for_route,
    )

    if config.fleet_base_url:
        client = FleetClient(base_url=config.fleet_base_url, token=config.fleet_api_token)
        metadata = {"mpg": config.transport_mpg, "capacity": config.transport_capacity}
        fleet = client.create_transport(transport.start.lat, transport.start.lng, TransportStatus.ONLINE, metadata)
        transport.fleet_client = client
        transport.attach(fleet)
    else:
        logger.info("No fleet configured; location updates are disabled")
    return transport
