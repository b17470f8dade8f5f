import pytest

from src.simulator.models.domain import (
    Action,
    ActionKind,
    Coordinate,
    Mode,
    VehicleState,
    polyline_length,
)
from src.simulator.services.directions.polyline import decode_polyline
from src.simulator.services.geospatial import haversine_km, path_length_km


def test_move_towards_stops_short_of_target():
    start = Coordinate(0.0, 0.0)
    target = Coordinate(0.0, 0.01)

    moved = start.move_towards(target, 0.004)

    assert moved.lat == pytest.approx(0.0)
    assert moved.lng == pytest.approx(0.004)
    assert start.distance(moved) == pytest.approx(0.004)


def test_move_towards_never_overshoots():
    start = Coordinate(1.0, 1.0)
    target = Coordinate(1.003, 1.004)

    assert start.move_towards(target, 1.0) == target
    assert target.move_towards(target, 0.5) == target


def test_parse_coordinate_string():
    assert Coordinate.parse(" 43.4723, -80.5449 ") == Coordinate(43.4723, -80.5449)
    assert Coordinate(43.4723, -80.5449).as_query() == "43.4723,-80.5449"
    with pytest.raises(ValueError):
        Coordinate.parse("University of Waterloo")


def test_polyline_length_open_and_closed():
    square = [Coordinate(0, 0), Coordinate(0, 1), Coordinate(1, 1), Coordinate(1, 0)]

    assert polyline_length(square) == pytest.approx(3.0)
    assert polyline_length(square, closed=True) == pytest.approx(4.0)
    assert polyline_length(square[:1], closed=True) == 0.0


def test_vehicle_state_mode():
    here = Coordinate(0, 0)
    action = Action(ActionKind.PICK_UP, Coordinate(0, 1))

    assert VehicleState(position=here, next_index=1).mode is Mode.ON_LOOP
    assert VehicleState(position=here, next_index=1, detour=(here,)).mode is Mode.RETURNING
    assert VehicleState(position=here, next_index=1, detour=(here,), actions=(action,)).mode is Mode.SERVICING


def test_action_equality_ignores_commodity():
    target = Coordinate(1, 2)
    assert Action(ActionKind.DROP_OFF, target, object()) == Action(ActionKind.DROP_OFF, target, object())


def test_decode_polyline_reference_vector():
    points = decode_polyline("_p~iF~ps|U_ulLnnqC_mqNvxq`@")

    assert points == [
        pytest.approx((38.5, -120.2)),
        pytest.approx((40.7, -120.95)),
        pytest.approx((43.252, -126.453)),
    ]


def test_decode_polyline_rejects_truncated_input():
    with pytest.raises(ValueError):
        decode_polyline("_p~iF~ps|U_")


def test_path_length_km_matches_haversine():
    a = Coordinate(43.4723, -80.5449)
    b = Coordinate(43.4643, -80.5204)

    assert path_length_km([a, b]) == pytest.approx(haversine_km(a.lat, a.lng, b.lat, b.lng))
    assert path_length_km([a, b], closed=True) == pytest.approx(2 * haversine_km(a.lat, a.lng, b.lat, b.lng))
