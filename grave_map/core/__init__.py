"""
Core map placement functionality.
"""

from .coordinates import (
    GridConfigurationError, MapCoordinates, district_key, parse_district_key,
    generate_map_coordinates, timestamp_coordinates, current_time_bucket,
)
from .occupancy import DistrictOccupancy
from .placement import (
    PlacementCandidate, PlacementResult, find_optimal_coordinates,
    rank_candidates, allocate_coordinates,
)
from .distribution import DistributionSummary, occupancy_grid, summarize_distribution

__all__ = ['GridConfigurationError', 'MapCoordinates', 'district_key', 'parse_district_key',
           'generate_map_coordinates', 'timestamp_coordinates', 'current_time_bucket',
           'DistrictOccupancy', 'PlacementCandidate', 'PlacementResult',
           'find_optimal_coordinates', 'rank_candidates', 'allocate_coordinates',
           'DistributionSummary', 'occupancy_grid', 'summarize_distribution']
