"""
Optimal district search for new graves.

Starting from a preferred district, every cell of the surrounding
(2 * radius + 1)^2 box is scored as

    score = count * crowding_weight + |dx| + |dy|

and the lowest score wins. Crowding dominates; distance from the preferred
district only separates similarly crowded cells. The grid is a torus, so
the box wraps around the edges instead of being clipped.
"""

from dataclasses import dataclass
from typing import List, Optional

import structlog

from .coordinates import (
    DEFAULT_GRID_SIZE,
    GridConfigurationError,
    MapCoordinates,
    current_time_bucket,
    district_key,
    generate_map_coordinates,
    validate_coordinate,
    validate_grid_size,
)
from .occupancy import OccupancySource, as_lookup

logger = structlog.get_logger()

SEARCH_RADIUS = 3
CROWDING_WEIGHT = 10  # one extra grave costs as much as ten cells of distance


@dataclass(frozen=True)
class PlacementCandidate:
    """A scored district inside the search box."""

    x: int
    y: int
    dx: int
    dy: int
    count: int
    distance: int
    score: int

    @property
    def coordinates(self) -> MapCoordinates:
        return MapCoordinates(self.x, self.y)


@dataclass(frozen=True)
class PlacementResult:
    """Outcome of a full allocation: where we wanted to go and where we went."""

    preferred: MapCoordinates
    optimal: MapCoordinates
    time_bucket: int
    grid_size: int


def iter_candidates(
    preferred_x: int,
    preferred_y: int,
    grid_size: int,
    occupancy: Optional[OccupancySource] = None,
    radius: int = SEARCH_RADIUS,
    crowding_weight: int = CROWDING_WEIGHT,
):
    """Yield scored candidates, dx outer and dy inner, both ascending."""
    lookup = as_lookup(occupancy)
    for dx in range(-radius, radius + 1):
        for dy in range(-radius, radius + 1):
            x = (preferred_x + dx) % grid_size
            y = (preferred_y + dy) % grid_size
            count = lookup(district_key(x, y))
            distance = abs(dx) + abs(dy)
            yield PlacementCandidate(
                x=x,
                y=y,
                dx=dx,
                dy=dy,
                count=count,
                distance=distance,
                score=count * crowding_weight + distance,
            )


def _check_inputs(preferred_x, preferred_y, grid_size, radius):
    grid_size = validate_grid_size(grid_size)
    preferred_x = validate_coordinate("preferred_x", preferred_x)
    preferred_y = validate_coordinate("preferred_y", preferred_y)
    radius = validate_coordinate("radius", radius)
    if radius < 0:
        raise GridConfigurationError(f"radius must be >= 0, got {radius}")
    return preferred_x, preferred_y, grid_size, radius


def rank_candidates(
    preferred_x: int,
    preferred_y: int,
    grid_size: int = DEFAULT_GRID_SIZE,
    occupancy: Optional[OccupancySource] = None,
    *,
    radius: int = SEARCH_RADIUS,
    crowding_weight: int = CROWDING_WEIGHT,
) -> List[PlacementCandidate]:
    """All candidates sorted by score; equal scores keep enumeration order."""
    preferred_x, preferred_y, grid_size, radius = _check_inputs(
        preferred_x, preferred_y, grid_size, radius
    )
    candidates = iter_candidates(
        preferred_x, preferred_y, grid_size, occupancy, radius, crowding_weight
    )
    return sorted(candidates, key=lambda c: c.score)


def find_optimal_coordinates(
    preferred_x: int,
    preferred_y: int,
    grid_size: int = DEFAULT_GRID_SIZE,
    occupancy: Optional[OccupancySource] = None,
    *,
    radius: int = SEARCH_RADIUS,
    crowding_weight: int = CROWDING_WEIGHT,
) -> MapCoordinates:
    """
    Least crowded, closest district around a preferred one.

    Args:
        preferred_x: Preferred column, any integer (wrapped into the grid)
        preferred_y: Preferred row, any integer (wrapped into the grid)
        grid_size: Side of the square grid
        occupancy: District counts as a DistrictOccupancy, mapping or
            key -> count callable; missing districts count as zero
        radius: Half-width of the search box
        crowding_weight: Score cost of one grave already in a district

    Returns:
        MapCoordinates of the first lowest-scoring candidate
    """
    preferred_x, preferred_y, grid_size, radius = _check_inputs(
        preferred_x, preferred_y, grid_size, radius
    )
    # min() keeps the first of equal scores
    best = min(
        iter_candidates(preferred_x, preferred_y, grid_size, occupancy, radius, crowding_weight),
        key=lambda c: c.score,
    )
    return best.coordinates


def allocate_coordinates(
    identifier: str,
    occupancy: Optional[OccupancySource] = None,
    grid_size: int = DEFAULT_GRID_SIZE,
    time_bucket: Optional[int] = None,
    *,
    radius: int = SEARCH_RADIUS,
    crowding_weight: int = CROWDING_WEIGHT,
) -> PlacementResult:
    """Hash an identifier to its preferred district and rebalance it."""
    if time_bucket is None:
        time_bucket = current_time_bucket()

    preferred = generate_map_coordinates(identifier, grid_size, time_bucket)
    optimal = find_optimal_coordinates(
        preferred.x,
        preferred.y,
        grid_size,
        occupancy,
        radius=radius,
        crowding_weight=crowding_weight,
    )

    logger.debug(
        "Allocated district",
        preferred=preferred.key,
        optimal=optimal.key,
        time_bucket=time_bucket,
        grid_size=grid_size,
    )
    return PlacementResult(
        preferred=preferred, optimal=optimal, time_bucket=time_bucket, grid_size=grid_size
    )
