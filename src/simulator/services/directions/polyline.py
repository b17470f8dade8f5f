"""Encoded polyline decoding."""

from __future__ import annotations


def decode_polyline(polyline: str, precision: int = 5) -> list[tuple[float, float]]:
    """Decode Google polyline string to list of (lat, lon) coordinates.

    Both OSRM (``geometries=polyline``) and the Google Directions API use
    this encoding with five decimal places of precision.

    Args:
        polyline: Encoded polyline string
        precision: Number of decimal places encoded

    Returns:
        List of (latitude, longitude) tuples
    """
    factor = 10 ** precision
    coordinates = []
    index = 0
    lat = 0
    lon = 0

    while index < len(polyline):
        lat += _decode_value(polyline, index)
        index = _skip_value(polyline, index)
        lon += _decode_value(polyline, index)
        index = _skip_value(polyline, index)
        coordinates.append((lat / factor, lon / factor))

    return coordinates


def _decode_value(polyline: str, index: int) -> int:
    shift = 0
    result = 0
    while True:
        if index >= len(polyline):
            raise ValueError("Truncated polyline.")
        b = ord(polyline[index]) - 63
        index += 1
        result |= (b & 0x1f) << shift
        shift += 5
        if b < 0x20:
            break
    return ~(result >> 1) if (result & 1) else (result >> 1)


def _skip_value(polyline: str, index: int) -> int:
    while index < len(polyline) and ord(polyline[index]) - 63 >= 0x20:
        index += 1
    return index + 1
