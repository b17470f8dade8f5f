import pytest

from src.simulator.models.domain import Coordinate
from src.simulator.services.directions.base import GeometryUnavailableError
from src.simulator.services.simulation.loop import build_loop


class SegmentDirections:
    """Serves canned segments keyed by (origin, destination)."""

    def __init__(self, segments: dict, failing: set | None = None):
        self.segments = segments
        self.failing = failing or set()
        self.calls = []

    def get_directions(self, origin, destination):
        self.calls.append((origin, destination))
        if (origin, destination) in self.failing:
            raise GeometryUnavailableError(f"no route {origin} -> {destination}")
        return list(self.segments[(origin, destination)])


def _point(i: float) -> Coordinate:
    return Coordinate(43.0 + i / 1000, -80.0)


def test_build_loop_concatenates_segments_in_order():
    segments = {
        ("A", "B"): [_point(1), _point(2)],
        ("B", "C"): [_point(3), _point(4), _point(5)],
        ("C", "A"): [_point(6)],
    }
    provider = SegmentDirections(segments)

    loop = build_loop(["A", "B", "C"], provider)

    assert loop == tuple(_point(i) for i in range(1, 7))
    assert provider.calls == [("A", "B"), ("B", "C"), ("C", "A")]


def test_build_loop_keeps_shared_joint_points():
    segments = {
        ("A", "B"): [_point(0), _point(1)],
        ("B", "A"): [_point(1), _point(0)],
    }

    loop = build_loop(["A", "B"], SegmentDirections(segments))

    assert loop == (_point(0), _point(1), _point(1), _point(0))


def test_build_loop_with_two_waypoints_goes_there_and_back():
    a = Coordinate(43.4723, -80.5449)
    b = Coordinate(43.4643, -80.5204)
    provider = SegmentDirections({(a, b): [a, b], (b, a): [b, a]})

    loop = build_loop([a, b], provider)

    assert loop == (a, b, b, a)


def test_build_loop_fails_when_any_segment_fails():
    segments = {("A", "B"): [_point(1)], ("B", "C"): [_point(2)], ("C", "A"): [_point(3)]}
    provider = SegmentDirections(segments, failing={("C", "A")})

    with pytest.raises(GeometryUnavailableError):
        build_loop(["A", "B", "C"], provider)


def test_build_loop_requires_two_waypoints():
    with pytest.raises(ValueError):
        build_loop(["A"], SegmentDirections({}))
