"""Simulated transport endpoints: fleet route events and status."""

from __future__ import annotations

import logging
from typing import List, Optional

from fastapi import APIRouter, HTTPException, Query, Request, status

from ...models.domain import Action, Coordinate
from ...schemas.transport import (
    CoordinateModel,
    RouteModel,
    RoutedResponse,
    TransportSnapshotModel,
)
from ...services.fleet.client import RemoteCommodity
from ...services.simulation.transport import SimulatedTransport

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/transport", tags=["transport"])


def _get_transport(request: Request) -> SimulatedTransport:
    transport = getattr(request.app.state, "transport", None)
    if transport is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Simulation is not initialised. Configure SIM_LOOP_WAYPOINTS and restart.",
        )
    return transport


@router.get("", response_model=TransportSnapshotModel, status_code=status.HTTP_200_OK)
def get_transport(request: Request) -> TransportSnapshotModel:
    transport = _get_transport(request)
    return TransportSnapshotModel(**transport.snapshot())


@router.get("/loop", response_model=List[CoordinateModel], status_code=status.HTTP_200_OK)
def get_loop(request: Request) -> List[CoordinateModel]:
    transport = _get_transport(request)
    return [CoordinateModel(lat=point.lat, lng=point.lng) for point in transport.loop_path]


@router.post("/routed", response_model=RoutedResponse, status_code=status.HTTP_200_OK)
def routed(payload: RouteModel, request: Request) -> RoutedResponse:
    """Deliver a new action list from the fleet system."""
    transport = _get_transport(request)
    actions = [
        Action(
            kind=item.kind,
            target=Coordinate(item.latitude, item.longitude),
            commodity=RemoteCommodity(item.commodity_id, transport.fleet_client) if item.commodity_id else None,
        )
        for item in payload.actions
    ]
    try:
        rerouted = transport.routed(actions)
    except Exception as exc:
        logger.exception(f"Error applying route: {exc}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to apply route: {str(exc)}"
        ) from exc
    return RoutedResponse(rerouted=rerouted, transport=TransportSnapshotModel(**transport.snapshot()))


@router.post("/tick", response_model=TransportSnapshotModel, status_code=status.HTTP_200_OK)
def tick(
    request: Request,
    delta: Optional[float] = Query(default=None, description="Distance to move; configured delta when omitted."),
) -> TransportSnapshotModel:
    """Advance the simulation by one tick outside the timer."""
    transport = _get_transport(request)
    transport.tick(delta)
    return TransportSnapshotModel(**transport.snapshot())
