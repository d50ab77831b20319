"""
District distribution statistics.

Rasterizes an occupancy index onto a (grid_size, grid_size) array, indexed
[y, x], and summarizes how evenly graves are spread across districts.
"""

from dataclasses import asdict, dataclass

import numpy as np

from .coordinates import parse_district_key, validate_grid_size
from .occupancy import DistrictOccupancy


@dataclass
class DistributionSummary:
    """Spread of graves across a grid."""

    grid_size: int
    total: int
    occupied_districts: int
    max_count: int
    mean: float  # over all districts, empty ones included
    std: float

    def as_dict(self) -> dict:
        return asdict(self)


def occupancy_grid(occupancy: DistrictOccupancy, grid_size: int) -> np.ndarray:
    """
    Counts laid out as a 2D array.

    Keys outside [0, grid_size) on either axis are ignored.
    """
    grid_size = validate_grid_size(grid_size)
    grid = np.zeros((grid_size, grid_size), dtype=np.int64)

    for key, count in occupancy.items():
        x, y = parse_district_key(key)
        if 0 <= x < grid_size and 0 <= y < grid_size:
            grid[y, x] = count

    return grid


def summarize_distribution(occupancy: DistrictOccupancy, grid_size: int) -> DistributionSummary:
    grid = occupancy_grid(occupancy, grid_size)
    return DistributionSummary(
        grid_size=grid.shape[0],
        total=int(grid.sum()),
        occupied_districts=int(np.count_nonzero(grid)),
        max_count=int(grid.max()),
        mean=float(grid.mean()),
        std=float(grid.std()),
    )
