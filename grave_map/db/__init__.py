"""
Database utilities and models.

This package provides:
- SQLAlchemy models for graves
- Database connection management
- District occupancy and listing queries
- Coordinate backfill for unplaced graves
"""

from .connection import Database, db
from .queries import GraveQueries
from .models import Base, Grave, GraveCategory, GraveStatus
from .assign_coordinates import assign_missing_coordinates

__all__ = [
    # Connection management
    'Database', 'db',

    # Query functionality
    'GraveQueries',

    # Backfill
    'assign_missing_coordinates',

    # Models
    'Base', 'Grave', 'GraveCategory', 'GraveStatus',
]
