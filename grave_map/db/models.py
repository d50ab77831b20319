"""Database models for grave storage."""

import enum
import uuid
from datetime import datetime

from sqlalchemy import Boolean, Column, DateTime, Enum, Index, Integer, String, Text, Uuid
from sqlalchemy.orm import declarative_base

Base = declarative_base()


class GraveStatus(str, enum.Enum):
    """Moderation state of a grave."""

    PENDING = "PENDING"
    APPROVED = "APPROVED"
    HIDDEN = "HIDDEN"


class GraveCategory(str, enum.Enum):
    """What kind of item was buried."""

    TECH_GADGETS = "TECH_GADGETS"
    KITCHEN_FOOD = "KITCHEN_FOOD"
    CLOTHING_LAUNDRY = "CLOTHING_LAUNDRY"
    TOYS_GAMES = "TOYS_GAMES"
    CAR_TOOLS = "CAR_TOOLS"
    PETS_CHEWABLES = "PETS_CHEWABLES"
    OUTDOORS_ACCIDENTS = "OUTDOORS_ACCIDENTS"
    MISC = "MISC"


class Grave(Base):
    """A buried item and its place on the map."""

    __tablename__ = "graves"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    slug = Column(String(64), nullable=False, unique=True)

    title = Column(String(80), nullable=False)
    category = Column(Enum(GraveCategory), nullable=False)
    backstory = Column(String(140))
    dates_text = Column(String(64))
    eulogy_text = Column(Text, nullable=False)
    photo_url = Column(Text)

    status = Column(Enum(GraveStatus), nullable=False, default=GraveStatus.PENDING)
    featured = Column(Boolean, nullable=False, default=False)

    # Reaction counters
    heart_count = Column(Integer, nullable=False, default=0)
    candle_count = Column(Integer, nullable=False, default=0)
    rose_count = Column(Integer, nullable=False, default=0)
    lol_count = Column(Integer, nullable=False, default=0)

    creator_device_hash = Column(Text, index=True)

    # District on the map grid, null until assigned
    map_x = Column(Integer)
    map_y = Column(Integer)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    __table_args__ = (
        Index("ix_graves_status_district", "status", "map_x", "map_y"),
    )

    def __repr__(self) -> str:
        return f"<Grave {self.slug} ({self.map_x}, {self.map_y})>"
