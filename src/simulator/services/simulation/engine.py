"""Movement engine: walks the loop, detours to assigned actions, rejoins the loop."""

from __future__ import annotations

import logging
import threading
from dataclasses import replace
from typing import Any, Iterable, Sequence

from ...models.domain import (
    Action,
    ActionKind,
    Coordinate,
    Mode,
    Polyline,
    VehicleState,
    polyline_length,
)
from ..directions.base import DirectionsProvider
from ..fleet.base import Commodity
from .notifications import NotificationQueue

logger = logging.getLogger(__name__)


class InvalidActionSequenceError(RuntimeError):
    """An action that is neither PICK_UP nor DROP_OFF reached the head of the queue."""


def _detour_to(points: Sequence[Coordinate], target: Coordinate) -> Polyline:
    # Providers snap endpoints to the road network; the detour must end on the target itself.
    detour = tuple(points)
    if not detour or detour[-1] != target:
        detour += (target,)
    return detour


def _first_step(detour: Polyline) -> int:
    return 1 if len(detour) > 1 else 0


class MovementEngine:
    """Single-writer state machine over a :class:`VehicleState`.

    ``advance`` and ``on_actions_assigned`` share one re-entrant lock, and
    route geometry is fetched synchronously while it is held, so a tick that
    triggers a fetch completes before the next tick or assignment runs.
    Commodity notifications go through ``notifications`` and never run under
    the lock.
    """

    def __init__(
        self,
        loop: Sequence[Coordinate],
        provider: DirectionsProvider,
        *,
        arrival_epsilon: float,
        carrier: Any = None,
        notifications: NotificationQueue | None = None,
    ) -> None:
        if not loop:
            raise ValueError("Loop path must contain at least one coordinate.")
        if arrival_epsilon <= 0:
            raise ValueError("arrival_epsilon must be positive.")
        self._loop: Polyline = tuple(loop)
        self._loop_length = polyline_length(self._loop, closed=True)
        self._provider = provider
        self.arrival_epsilon = arrival_epsilon
        self.carrier = carrier
        self.notifications = notifications or NotificationQueue("fleet-notify")
        self._lock = threading.RLock()
        self._state = VehicleState(position=self._loop[0], next_index=1 % len(self._loop))

    @property
    def loop(self) -> Polyline:
        return self._loop

    @property
    def start(self) -> Coordinate:
        return self._loop[0]

    @property
    def state(self) -> VehicleState:
        with self._lock:
            return self._state

    @property
    def position(self) -> Coordinate:
        return self.state.position

    @property
    def mode(self) -> Mode:
        return self.state.mode

    def advance(self, delta: float) -> Coordinate:
        """Move up to ``delta`` along the active path and return the new position."""
        with self._lock:
            state = self._state
            if delta <= 0:
                return state.position
            if state.reroute_pending:
                state = self._reroute(state)
            if state.mode is Mode.SERVICING and state.position.distance(state.head.target) < self.arrival_epsilon:
                state = self._complete_head(state)
            state = self._walk(state, delta)
            self._state = state
            return state.position

    def on_actions_assigned(self, actions: Iterable[Action]) -> bool:
        """Replace the action queue; returns True when a new detour was fetched."""
        filtered = tuple(action for action in actions if action.kind is not ActionKind.START)
        with self._lock:
            state = self._state
            head = state.head
            if filtered and (head is None or filtered[0].target != head.target):
                logger.info(f"Switching to {len(filtered)} new actions, heading to {filtered[0].target}")
                target = filtered[0].target
                try:
                    points = self._provider.get_directions(state.position, target)
                except ConnectionError as exc:
                    logger.error(f"Failed to get directions to {target}, keeping previous actions: {exc}")
                    return False
                detour = _detour_to(points, target)
                self._state = replace(
                    state,
                    actions=filtered,
                    detour=detour,
                    next_index=_first_step(detour),
                    reroute_pending=False,
                )
                return True

            logger.info(f"Using {len(filtered)} new actions without requesting directions")
            # Dropping every action mid-detour leaves a path to a stale target; fetch the return path next tick.
            pending = state.reroute_pending or (not filtered and head is not None)
            self._state = replace(state, actions=filtered, reroute_pending=pending)
            return False

    def _complete_head(self, state: VehicleState) -> VehicleState:
        action = state.head
        if action.kind is ActionKind.PICK_UP:
            self._notify(action, "picked_up")
        elif action.kind is ActionKind.DROP_OFF:
            self._notify(action, "dropped_off")
        else:
            raise InvalidActionSequenceError(f"Cannot complete action of kind {action.kind} at {action.target}")

        remaining = state.actions[1:]
        if remaining:
            logger.info(f"Completed {action.kind.value}, setting course towards next action")
        else:
            logger.info(f"Completed final action, returning to loop start {self.start}")
        return self._reroute(replace(state, actions=remaining))

    def _reroute(self, state: VehicleState) -> VehicleState:
        target = state.head.target if state.actions else self.start
        try:
            points = self._provider.get_directions(state.position, target)
        except ConnectionError as exc:
            logger.error(f"Failed to get directions to {target}, continuing on previous path: {exc}")
            return replace(state, reroute_pending=True)
        detour = _detour_to(points, target)
        return replace(state, detour=detour, next_index=_first_step(detour), reroute_pending=False)

    def _notify(self, action: Action, event: str) -> None:
        commodity: Commodity | None = action.commodity
        if commodity is None:
            logger.warning(f"{action.kind.value} at {action.target} has no commodity to notify")
            return
        description = f"Commodity {commodity!r} {event}"
        if event == "picked_up":
            self.notifications.submit(description, commodity.picked_up, self.carrier)
        else:
            self.notifications.submit(description, commodity.dropped_off)

    def _walk(self, state: VehicleState, delta: float) -> VehicleState:
        on_loop = not state.detour
        if on_loop and self._loop_length == 0.0:
            return state
        path = self._loop if on_loop else state.detour
        position = state.position
        index = state.next_index
        remaining = delta

        while remaining > 0.0:
            waypoint = path[index]
            gap = position.distance(waypoint)
            if gap > remaining:
                position = position.move_towards(waypoint, remaining)
                break
            position = waypoint
            remaining -= gap
            if on_loop:
                index = (index + 1) % len(path)
            elif index < len(path) - 1:
                index += 1
            elif state.mode is Mode.RETURNING and not state.reroute_pending:
                logger.info("Detour exhausted, back on loop")
                return replace(state, position=self.start, detour=(), next_index=1 % len(self._loop))
            else:
                # Hold at the end of the detour until the next arrival check or reroute.
                break

        return replace(state, position=position, next_index=index)
