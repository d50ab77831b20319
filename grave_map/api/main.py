"""FastAPI main application."""

import logging
from datetime import datetime
from typing import List, Literal, Optional

import structlog
from fastapi import FastAPI, HTTPException, Query, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field, HttpUrl
from sqlalchemy.exc import IntegrityError

from ..config import settings
from ..core.coordinates import GridConfigurationError, clamp_grid_size, parse_district_key
from ..core.distribution import summarize_distribution
from ..core.placement import allocate_coordinates, rank_candidates
from ..db.connection import db
from ..db.models import Grave, GraveCategory, GraveStatus
from ..db.queries import GraveQueries
from ..utils.slug import generate_slug
from .device import resolve_device_hash

# Configure logging
logging.basicConfig(format="%(message)s", level=settings.log_level.upper())

structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.JSONRenderer()
        if settings.log_format == "json"
        else structlog.dev.ConsoleRenderer(),
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)

logger = structlog.get_logger()

# Initialize FastAPI app
app = FastAPI(
    title="Grave Map API",
    description="Virtual graveyard with balanced district placement",
    version="0.1.0"
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Configure appropriately for production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Request/Response models
class CreateGraveRequest(BaseModel):
    """Request to bury a new item."""

    model_config = ConfigDict(str_strip_whitespace=True)

    title: str = Field(..., min_length=3, max_length=80)
    category: GraveCategory
    backstory: Optional[str] = Field(None, max_length=140)
    dates_text: Optional[str] = Field(None, max_length=64, description="Free-form years, e.g. 2019-2024")
    eulogy_text: str = Field(..., min_length=80, max_length=1000)
    photo_url: Optional[HttpUrl] = None
    agree_to_guidelines: Literal[True]


class CreateGraveResponse(BaseModel):
    """A newly created grave and where it was placed."""

    id: str
    slug: str
    status: GraveStatus
    share_url: str
    map_x: int
    map_y: int


class GraveSummary(BaseModel):
    """Public view of a single grave."""

    id: str
    slug: str
    title: str
    category: GraveCategory
    status: GraveStatus
    map_x: Optional[int]
    map_y: Optional[int]
    created_at: datetime


class DistrictSummary(BaseModel):
    x: int
    y: int
    grave_count: int


class DistributionStats(BaseModel):
    grid_size: int
    total: int
    occupied_districts: int
    max_count: int
    mean: float
    std: float


class DistrictListResponse(BaseModel):
    """Occupied districts for one grid size."""

    grid_size: int
    districts: List[DistrictSummary]
    distribution: DistributionStats


class ReactionCounts(BaseModel):
    heart: int
    candle: int
    rose: int
    lol: int


class DistrictGrave(BaseModel):
    id: str
    slug: str
    title: str
    photo_url: Optional[str]
    category: GraveCategory
    reactions: ReactionCounts
    created_at: datetime
    featured: bool


class DistrictDetail(BaseModel):
    """All approved graves in one district."""

    x: int
    y: int
    grave_count: int
    graves: List[DistrictGrave]


class PlacementPreviewRequest(BaseModel):
    """Where would a grave from this identifier land right now?"""

    identifier: str = Field("", description="Opaque device identifier")
    grid_size: Optional[int] = Field(None, description="Grid size, clamped to the allowed range")
    time_bucket: Optional[int] = Field(None, description="Hour number, defaults to the current hour")
    top: int = Field(5, ge=1, le=50, description="How many ranked candidates to return")


class CandidateInfo(BaseModel):
    x: int
    y: int
    count: int
    distance: int
    score: int


class PlacementPreviewResponse(BaseModel):
    grid_size: int
    time_bucket: int
    preferred: DistrictSummary
    optimal: DistrictSummary
    candidates: List[CandidateInfo]


@app.exception_handler(GridConfigurationError)
async def grid_configuration_error_handler(request: Request, exc: GridConfigurationError):
    logger.warning("Invalid grid configuration", path=request.url.path, error=str(exc))
    return JSONResponse(status_code=400, content={"detail": str(exc)})


# Event handlers
@app.on_event("startup")
async def startup_event():
    """Initialize database on startup."""
    logger.info("Starting Grave Map API")
    db.initialize()
    logger.info("API startup complete")


@app.on_event("shutdown")
async def shutdown_event():
    """Cleanup on shutdown."""
    logger.info("Shutting down Grave Map API")


# API endpoints
@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "message": "Grave Map API",
        "version": "0.1.0",
        "status": "running"
    }


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    try:
        db.ping()
        return {"status": "healthy", "database": "connected"}
    except Exception as e:
        logger.error("Health check failed", error=str(e))
        raise HTTPException(status_code=503, detail="Service unhealthy")


@app.post("/graves", response_model=CreateGraveResponse, status_code=201)
async def create_grave(payload: CreateGraveRequest, request: Request, response: Response):
    """
    Bury an item.

    The grave is placed in the least crowded district near the one its
    device hashes to this hour.
    """
    device_hash = resolve_device_hash(request, response)
    grid_size = settings.default_grid_size
    status = GraveStatus.APPROVED if settings.auto_approve else GraveStatus.PENDING

    with db.get_session() as session:
        queries = GraveQueries(session)
        occupancy = queries.get_district_grave_counts(grid_size)
        placement = allocate_coordinates(
            device_hash,
            occupancy,
            grid_size,
            radius=settings.search_radius,
            crowding_weight=settings.crowding_weight,
        )

        grave = None
        for attempt in range(settings.slug_attempts):
            slug = generate_slug(payload.title)
            if queries.get_grave_by_slug(slug) is not None:
                logger.warning("Slug collision, retrying", slug=slug, attempt=attempt + 1)
                continue

            candidate = Grave(
                slug=slug,
                title=payload.title,
                category=payload.category,
                backstory=payload.backstory,
                dates_text=payload.dates_text,
                eulogy_text=payload.eulogy_text,
                photo_url=str(payload.photo_url) if payload.photo_url else None,
                status=status,
                creator_device_hash=device_hash,
                map_x=placement.optimal.x,
                map_y=placement.optimal.y,
            )
            try:
                with session.begin_nested():
                    session.add(candidate)
            except IntegrityError:
                # Lost a race on the unique slug
                logger.warning("Slug collision on insert, retrying", slug=slug, attempt=attempt + 1)
                continue
            grave = candidate
            break

        if grave is None:
            logger.error("Failed to generate unique slug for grave", title=payload.title)
            raise HTTPException(status_code=500, detail="Failed to generate unique slug")

        logger.info(
            "Grave created",
            grave_id=str(grave.id),
            slug=grave.slug,
            status=status.value,
            preferred=placement.preferred.key,
            district=placement.optimal.key,
        )

        return CreateGraveResponse(
            id=str(grave.id),
            slug=grave.slug,
            status=grave.status,
            share_url=f"{settings.site_url.rstrip('/')}/grave/{grave.slug}",
            map_x=grave.map_x,
            map_y=grave.map_y,
        )


@app.get("/graves/{slug}", response_model=GraveSummary)
async def get_grave(slug: str):
    """Get a grave by slug."""
    with db.get_session() as session:
        grave = GraveQueries(session).get_grave_by_slug(slug)

        if not grave or grave.status == GraveStatus.HIDDEN:
            raise HTTPException(status_code=404, detail="Grave not found")

        return GraveSummary(
            id=str(grave.id),
            slug=grave.slug,
            title=grave.title,
            category=grave.category,
            status=grave.status,
            map_x=grave.map_x,
            map_y=grave.map_y,
            created_at=grave.created_at,
        )


@app.get("/map/districts", response_model=DistrictListResponse)
async def list_districts(grid_size: Optional[int] = Query(None, description="Grid size, clamped to the allowed range")):
    """List occupied districts with grave counts."""
    grid_size = clamp_grid_size(
        grid_size or settings.default_grid_size, settings.min_grid_size, settings.max_grid_size
    )

    with db.get_session() as session:
        occupancy = GraveQueries(session).get_district_grave_counts(grid_size)

    districts = []
    for key, count in occupancy.items():
        x, y = parse_district_key(key)
        districts.append(DistrictSummary(x=x, y=y, grave_count=count))
    districts.sort(key=lambda d: (d.y, d.x))

    summary = summarize_distribution(occupancy, grid_size)
    return DistrictListResponse(
        grid_size=grid_size,
        districts=districts,
        distribution=DistributionStats(**summary.as_dict()),
    )


@app.get("/map/districts/{x}/{y}", response_model=DistrictDetail)
async def get_district(x: int, y: int):
    """Get approved graves for a specific district."""
    max_index = settings.max_grid_size - 1
    if x < 0 or y < 0 or x > max_index or y > max_index:
        raise HTTPException(
            status_code=400,
            detail=f"Invalid coordinates. X and Y must be between 0 and {max_index}.",
        )

    with db.get_session() as session:
        graves = GraveQueries(session).get_district_graves(x, y)

        return DistrictDetail(
            x=x,
            y=y,
            grave_count=len(graves),
            graves=[
                DistrictGrave(
                    id=str(grave.id),
                    slug=grave.slug,
                    title=grave.title,
                    photo_url=grave.photo_url,
                    category=grave.category,
                    reactions=ReactionCounts(
                        heart=grave.heart_count,
                        candle=grave.candle_count,
                        rose=grave.rose_count,
                        lol=grave.lol_count,
                    ),
                    created_at=grave.created_at,
                    featured=grave.featured,
                )
                for grave in graves
            ],
        )


@app.post("/map/placement/preview", response_model=PlacementPreviewResponse)
async def preview_placement(request: PlacementPreviewRequest):
    """Show the preferred and chosen district for an identifier without saving anything."""
    grid_size = clamp_grid_size(
        request.grid_size or settings.default_grid_size, settings.min_grid_size, settings.max_grid_size
    )

    with db.get_session() as session:
        occupancy = GraveQueries(session).get_district_grave_counts(grid_size)

    placement = allocate_coordinates(
        request.identifier,
        occupancy,
        grid_size,
        request.time_bucket,
        radius=settings.search_radius,
        crowding_weight=settings.crowding_weight,
    )
    ranked = rank_candidates(
        placement.preferred.x,
        placement.preferred.y,
        grid_size,
        occupancy,
        radius=settings.search_radius,
        crowding_weight=settings.crowding_weight,
    )

    return PlacementPreviewResponse(
        grid_size=grid_size,
        time_bucket=placement.time_bucket,
        preferred=DistrictSummary(
            x=placement.preferred.x,
            y=placement.preferred.y,
            grave_count=occupancy.count_at(placement.preferred.x, placement.preferred.y),
        ),
        optimal=DistrictSummary(
            x=placement.optimal.x,
            y=placement.optimal.y,
            grave_count=occupancy.count_at(placement.optimal.x, placement.optimal.y),
        ),
        candidates=[
            CandidateInfo(x=c.x, y=c.y, count=c.count, distance=c.distance, score=c.score)
            for c in ranked[: request.top]
        ],
    )


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host=settings.api_host, port=settings.api_port)
