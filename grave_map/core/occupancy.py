"""
District occupancy index.

A point-in-time snapshot of how many graves sit in each district, keyed by
district_key(x, y). Missing districts count as zero. Placement never
mutates the index; batch callers use increment() between allocations so
consecutive graves do not stack on the same district.
"""

from collections.abc import Mapping
from typing import Callable, Dict, Iterable, Iterator, Optional, Tuple, Union

from .coordinates import district_key

OccupancyLookup = Callable[[str], int]
OccupancySource = Union["DistrictOccupancy", Mapping, OccupancyLookup]


class DistrictOccupancy(Mapping):
    """Read-mostly mapping of district key -> grave count."""

    def __init__(self, counts: Optional[Dict[str, int]] = None):
        self._counts: Dict[str, int] = {}
        for key, count in (counts or {}).items():
            self._set(key, count)

    @classmethod
    def from_rows(cls, rows: Iterable[Tuple[int, int, int]]) -> "DistrictOccupancy":
        """Build from (x, y, count) rows such as a GROUP BY result."""
        occupancy = cls()
        for x, y, count in rows:
            if x is None or y is None:
                continue
            occupancy._set(district_key(x, y), count)
        return occupancy

    def _set(self, key: str, count: int) -> None:
        count = int(count)
        if count < 0:
            raise ValueError(f"District count must be non-negative, got {count} for {key}")
        self._counts[key] = count

    def __getitem__(self, key: str) -> int:
        return self._counts.get(key, 0)

    def __contains__(self, key) -> bool:
        return key in self._counts

    def __iter__(self) -> Iterator[str]:
        return iter(self._counts)

    def __len__(self) -> int:
        return len(self._counts)

    def get(self, key: str, default: int = 0) -> int:
        return self._counts.get(key, default)

    def count_at(self, x: int, y: int) -> int:
        return self._counts.get(district_key(x, y), 0)

    def increment(self, x: int, y: int, amount: int = 1) -> int:
        """Record newly placed graves and return the district's new count."""
        key = district_key(x, y)
        self._set(key, self._counts.get(key, 0) + amount)
        return self._counts[key]

    @property
    def total(self) -> int:
        return sum(self._counts.values())

    def copy(self) -> "DistrictOccupancy":
        return DistrictOccupancy(dict(self._counts))

    def __repr__(self) -> str:
        return f"DistrictOccupancy({self._counts!r})"


def as_lookup(occupancy: Optional[OccupancySource]) -> OccupancyLookup:
    """
    Normalize an occupancy source into a key -> count function.

    Accepts a DistrictOccupancy, any mapping (missing keys and None values
    count as zero), a plain callable, or None for an empty grid.
    """
    if occupancy is None:
        return lambda key: 0
    if isinstance(occupancy, Mapping):
        return lambda key: occupancy.get(key) or 0
    if callable(occupancy):
        return lambda key: occupancy(key) or 0
    raise TypeError(f"Unsupported occupancy source: {type(occupancy).__name__}")
