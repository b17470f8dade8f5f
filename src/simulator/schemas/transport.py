"""Transport request/response schemas."""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field

from ..models.domain import ActionKind, Mode


class CoordinateModel(BaseModel):
    lat: float
    lng: float


class ActionModel(BaseModel):
    kind: ActionKind
    latitude: float = Field(..., ge=-90, le=90)
    longitude: float = Field(..., ge=-180, le=180)
    commodity_id: Optional[str] = Field(default=None, description="Fleet id of the commodity serviced by this action.")


class RouteModel(BaseModel):
    """Ordered actions assigned by the fleet; a leading START marker is ignored."""

    actions: List[ActionModel] = Field(default_factory=list)


class TransportSnapshotModel(BaseModel):
    latitude: float
    longitude: float
    mode: Mode
    next_index: int
    pending_actions: int
    detour_points: int
    reroute_pending: bool
    waiting: bool
    fleet_bound: bool
    loop_points: int
    loop_length_km: float


class RoutedResponse(BaseModel):
    rerouted: bool
    transport: TransportSnapshotModel
