#!/usr/bin/env python3
"""Assign map coordinates to graves that don't have them."""

import argparse
import sys
from typing import Optional

import structlog
from sqlalchemy.orm import Session

from ..config.config import settings
from ..core.coordinates import (
    current_time_bucket,
    generate_map_coordinates,
    timestamp_coordinates,
    validate_grid_size,
)
from ..core.distribution import summarize_distribution
from ..core.placement import CROWDING_WEIGHT, SEARCH_RADIUS, find_optimal_coordinates
from .connection import db
from .queries import GraveQueries

logger = structlog.get_logger()


def assign_missing_coordinates(
    session: Session,
    grid_size: int = 16,
    time_bucket: Optional[int] = None,
    radius: int = SEARCH_RADIUS,
    crowding_weight: int = CROWDING_WEIGHT,
) -> int:
    """
    Place every grave that lacks coordinates.

    The occupancy snapshot and time bucket are taken once; each placement
    is added to the in-memory snapshot so later graves in the batch see it.

    Returns:
        Number of graves updated
    """
    grid_size = validate_grid_size(grid_size)
    if time_bucket is None:
        time_bucket = current_time_bucket()

    queries = GraveQueries(session)
    graves = queries.graves_without_coordinates()
    logger.info("Found graves without coordinates", count=len(graves))

    if not graves:
        return 0

    occupancy = queries.get_district_grave_counts(grid_size)
    logger.info("Loaded district counts", occupied_districts=len(occupancy))

    for grave in graves:
        if grave.creator_device_hash:
            preferred = generate_map_coordinates(grave.creator_device_hash, grid_size, time_bucket)
            source = "device"
        else:
            preferred = timestamp_coordinates(grave.created_at, grid_size)
            source = "timestamp"

        optimal = find_optimal_coordinates(
            preferred.x,
            preferred.y,
            grid_size,
            occupancy,
            radius=radius,
            crowding_weight=crowding_weight,
        )
        grave.map_x = optimal.x
        grave.map_y = optimal.y
        occupancy.increment(optimal.x, optimal.y)

        logger.info(
            "Assigned grave coordinates",
            grave_id=str(grave.id),
            source=source,
            preferred=preferred.key,
            optimal=optimal.key,
        )

    session.flush()

    summary = summarize_distribution(occupancy, grid_size)
    logger.info("Final district distribution", **summary.as_dict())
    return len(graves)


def main(argv=None):
    """Assign coordinates from the command line."""
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument(
        "--grid-size", type=int, default=settings.default_grid_size, help="Side of the map grid"
    )
    args = parser.parse_args(argv)

    try:
        print("Assigning missing grave coordinates...")
        db.initialize()
        with db.get_session() as session:
            updated = assign_missing_coordinates(
                session,
                grid_size=args.grid_size,
                radius=settings.search_radius,
                crowding_weight=settings.crowding_weight,
            )
        print(f"✓ Assigned coordinates to {updated} graves")

    except Exception as e:
        print(f"✗ Coordinate assignment failed: {e}")
        import traceback
        traceback.print_exc()
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
