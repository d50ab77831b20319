"""
Map coordinate hashing for grave placement.

This module turns an opaque device identifier into a preferred district on
the square map grid:
- A 32-bit rolling hash over the identifier (hash * 31 + code unit)
- XOR with the current hour number so one device drifts across the map
- Hash split into (x, y) inside [0, grid_size)

District keys ("{x}_{y}") used by the occupancy index also live here.
"""

import time
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from numbers import Integral
from typing import Optional, Tuple

MILLIS_PER_HOUR = 1000 * 60 * 60
DEFAULT_GRID_SIZE = 16
EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


class GridConfigurationError(ValueError):
    """Raised when a grid size or coordinate is not usable for placement."""


@dataclass(frozen=True)
class MapCoordinates:
    """A district position on the map grid."""

    x: int
    y: int

    @property
    def key(self) -> str:
        return district_key(self.x, self.y)

    def as_dict(self) -> dict:
        return {"x": self.x, "y": self.y}


def validate_grid_size(grid_size) -> int:
    """
    Check that grid_size is a positive integer.

    Raises:
        GridConfigurationError: For zero, negative or non-integer sizes
    """
    if isinstance(grid_size, bool) or not isinstance(grid_size, Integral):
        raise GridConfigurationError(f"grid_size must be an integer, got {grid_size!r}")
    if grid_size < 1:
        raise GridConfigurationError(f"grid_size must be >= 1, got {grid_size}")
    return int(grid_size)


def validate_coordinate(name: str, value) -> int:
    if isinstance(value, bool) or not isinstance(value, Integral):
        raise GridConfigurationError(f"{name} must be an integer, got {value!r}")
    return int(value)


def clamp_grid_size(grid_size: int, min_size: int, max_size: int) -> int:
    """Clamp a requested grid size into [min_size, max_size]."""
    return min(max(grid_size, min_size), max_size)


def district_key(x: int, y: int) -> str:
    """Canonical occupancy key for a district."""
    return f"{x}_{y}"


def parse_district_key(key: str) -> Tuple[int, int]:
    """Inverse of district_key."""
    x, sep, y = key.partition("_")
    if not sep:
        raise ValueError(f"Invalid district key: {key!r}")
    return int(x), int(y)


def _int32(n: int) -> int:
    """Wrap to a signed 32-bit integer."""
    n &= 0xFFFFFFFF
    return n - 0x100000000 if n & 0x80000000 else n


def _utf16_units(text: str):
    data = text.encode("utf-16-le", "surrogatepass")
    for i in range(0, len(data), 2):
        yield data[i] | (data[i + 1] << 8)


def identifier_hash(identifier: str) -> int:
    """
    Signed 32-bit rolling hash of an identifier.

    Iterates UTF-16 code units so identifiers outside the BMP hash the same
    way browsers and Node hash them.
    """
    hash_value = 0
    for unit in _utf16_units(identifier):
        hash_value = _int32(hash_value * 31 + unit)
    return hash_value


def current_time_bucket(now: Optional[float] = None) -> int:
    """
    Hour number since the Unix epoch.

    Args:
        now: Unix time in seconds, defaults to the wall clock

    Returns:
        floor(unix_millis / 3,600,000)
    """
    if now is None:
        now = time.time()
    return int(now * 1000) // MILLIS_PER_HOUR


def coordinates_from_hash(hash_value: int, grid_size: int = DEFAULT_GRID_SIZE) -> MapCoordinates:
    """Split a signed hash into grid coordinates."""
    grid_size = validate_grid_size(grid_size)
    x = abs(hash_value) % grid_size
    y = abs(hash_value // grid_size) % grid_size
    return MapCoordinates(x, y)


def generate_map_coordinates(
    identifier: str,
    grid_size: int = DEFAULT_GRID_SIZE,
    time_bucket: Optional[int] = None,
) -> MapCoordinates:
    """
    Preferred district for an identifier.

    Stable for the same identifier within one time bucket, and drifts
    between buckets so a single device does not stack every grave on one
    district.

    Args:
        identifier: Opaque device identifier, may be empty
        grid_size: Side of the square grid
        time_bucket: Hour number to mix in, defaults to current_time_bucket()

    Returns:
        MapCoordinates inside [0, grid_size)
    """
    grid_size = validate_grid_size(grid_size)
    if time_bucket is None:
        time_bucket = current_time_bucket()
    time_bucket = validate_coordinate("time_bucket", time_bucket)

    hash_value = _int32(identifier_hash(identifier) ^ time_bucket)
    return coordinates_from_hash(hash_value, grid_size)


def timestamp_coordinates(created_at: datetime, grid_size: int = DEFAULT_GRID_SIZE) -> MapCoordinates:
    """
    Preferred district derived from a creation timestamp.

    Used for graves that carry no device identifier. Naive datetimes are
    taken as UTC.
    """
    grid_size = validate_grid_size(grid_size)
    if created_at.tzinfo is None:
        created_at = created_at.replace(tzinfo=timezone.utc)
    millis = (created_at - EPOCH) // timedelta(milliseconds=1)
    value = millis % (grid_size * grid_size)
    return MapCoordinates(value % grid_size, (value // grid_size) % grid_size)
