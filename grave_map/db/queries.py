"""
Grave and district query utilities.

This module provides the read side of the map: per-district grave counts
used for placement balancing, district listings and district contents.
"""

from __future__ import annotations

from typing import List, Optional, Tuple

import structlog
from sqlalchemy import and_, func, or_
from sqlalchemy.orm import Session

from ..core.coordinates import validate_grid_size
from ..core.occupancy import DistrictOccupancy
from .models import Grave, GraveStatus

logger = structlog.get_logger()


class GraveQueries:
    """
    Queries over placed graves.

    Provides:
    - Occupancy snapshots for placement balancing
    - District listings for the map view
    - Backfill candidates (graves without coordinates)
    """

    def __init__(self, session: Session):
        """Initialize with database session."""
        self.session = session

    def _district_counts(self, grid_size: int) -> List[Tuple[int, int, int]]:
        grid_size = validate_grid_size(grid_size)
        rows = (
            self.session.query(Grave.map_x, Grave.map_y, func.count(Grave.id))
            .filter(
                and_(
                    Grave.status == GraveStatus.APPROVED,
                    Grave.map_x.isnot(None),
                    Grave.map_y.isnot(None),
                    Grave.map_x >= 0,
                    Grave.map_x < grid_size,
                    Grave.map_y >= 0,
                    Grave.map_y < grid_size,
                )
            )
            .group_by(Grave.map_x, Grave.map_y)
            .all()
        )
        return [(x, y, count) for x, y, count in rows]

    def get_district_grave_counts(self, grid_size: int = 16) -> DistrictOccupancy:
        """
        Snapshot of approved graves per district.

        Only graves that are APPROVED and lie inside [0, grid_size) on both
        axes are counted.

        Args:
            grid_size: Side of the grid to count within

        Returns:
            DistrictOccupancy keyed by "{x}_{y}"
        """
        occupancy = DistrictOccupancy.from_rows(self._district_counts(grid_size))
        logger.debug(
            "Loaded district counts",
            grid_size=grid_size,
            districts=len(occupancy),
            graves=occupancy.total,
        )
        return occupancy

    def get_district_graves(self, x: int, y: int, limit: Optional[int] = None) -> List[Grave]:
        """Approved graves in one district, newest first."""
        query = (
            self.session.query(Grave)
            .filter(
                Grave.status == GraveStatus.APPROVED,
                Grave.map_x == x,
                Grave.map_y == y,
            )
            .order_by(Grave.created_at.desc())
        )
        if limit is not None:
            query = query.limit(limit)
        return query.all()

    def graves_without_coordinates(self) -> List[Grave]:
        """Graves missing either coordinate, oldest first."""
        return (
            self.session.query(Grave)
            .filter(or_(Grave.map_x.is_(None), Grave.map_y.is_(None)))
            .order_by(Grave.created_at.asc())
            .all()
        )

    def get_grave_by_slug(self, slug: str) -> Optional[Grave]:
        return self.session.query(Grave).filter(Grave.slug == slug).first()
