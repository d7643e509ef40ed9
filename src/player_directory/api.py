"""
FastAPI application with player directory autocomplete endpoints.
"""

from fastapi import Depends, FastAPI, HTTPException, Query
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.orm import Session
from typing import Dict, Any, Optional
import time
import logging

from . import crud
from .cache import DEFAULT_RESULTS, MAX_RESULTS, DirectoryCache, LoadStatus
from .database import SessionLocal
from .service import default_version, get_directory_cache
from .sources import record_from_row

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="Player Directory API",
    description="Typeahead lookup over the reference football player directory",
    version="1.0.0"
)

# Add CORS middleware for web UI
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Configure this properly for production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def get_cache() -> DirectoryCache:
    return get_directory_cache()


def get_session():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def status_payload(status: LoadStatus) -> Dict[str, Any]:
    """Load status plus the hint the suggestion panel shows while polling."""
    if status.unavailable:
        message = "Player database unavailable"
    elif status.loading:
        message = f"Loading player database… ({status.loaded_count:,} loaded)"
    else:
        message = None
    return {
        "version": status.version,
        "loaded": status.loaded,
        "loading": status.loading,
        "loaded_count": status.loaded_count,
        "last_error": status.last_error,
        "unavailable": status.unavailable,
        "message": message,
    }


@app.on_event("startup")
async def startup_event():
    """Start loading the default directory version without blocking startup."""
    version = default_version()
    logger.info(f"Warming player directory {version}...")
    get_directory_cache().warm(version)


@app.on_event("shutdown")
async def shutdown_event():
    await get_directory_cache().drain()


@app.get("/")
async def root():
    """Root endpoint with basic info."""
    return {
        "message": "Player Directory API",
        "version": "1.0.0",
        "endpoints": {
            "autocomplete": "/api/autocomplete",
            "warm": "/api/warm",
            "status": "/api/status",
            "directory": "/api/directory/{version}/players",
            "stats": "/api/stats",
            "health": "/api/health"
        }
    }


@app.get("/api/autocomplete")
async def autocomplete(
    q: str = Query(..., description="Search query (name, surname or 'J.' initial)"),
    limit: int = Query(DEFAULT_RESULTS, ge=1, le=MAX_RESULTS, description="Maximum number of results"),
    version: Optional[str] = Query(None, description="Dataset version, e.g. FC26"),
    cache: DirectoryCache = Depends(get_cache),
) -> Dict[str, Any]:
    """
    Ranked player suggestions for a partial name.

    Triggers a warm-up of the version if needed and answers from whatever
    has been indexed so far.
    """
    version = version or default_version()
    start_time = time.time()

    try:
        # Never restart a failed load per keystroke; POST /api/warm retries
        cache.warm(version, retry=False)
        results = cache.search(q, limit, version)
        response_time = (time.time() - start_time) * 1000

        return {
            "query": q,
            "results": [
                {"rank": r.rank, **r.player.model_dump(by_alias=True)} for r in results
            ],
            "count": len(results),
            "limit": limit,
            "status": status_payload(cache.status(version)),
            "response_time_ms": round(response_time, 2),
            "success": True
        }

    except Exception as e:
        logger.error(f"Autocomplete error: {e}")
        raise HTTPException(status_code=500, detail=str(e))


@app.post("/api/warm")
async def warm(
    version: Optional[str] = Query(None, description="Dataset version, e.g. FC26"),
    cache: DirectoryCache = Depends(get_cache),
) -> Dict[str, Any]:
    """Idempotent warm-up; returns immediately with the current status."""
    version = version or default_version()
    cache.warm(version)
    return status_payload(cache.status(version))


@app.get("/api/status")
async def status(
    version: Optional[str] = Query(None, description="Dataset version, e.g. FC26"),
    cache: DirectoryCache = Depends(get_cache),
) -> Dict[str, Any]:
    """Load status for UI polling; never starts a load."""
    return status_payload(cache.status(version or default_version()))


@app.get("/api/directory/{version}/players")
def directory_page(
    version: str,
    limit: int = Query(1000, ge=1, le=1000, description="Page size"),
    next_token: Optional[str] = Query(None, description="Continuation token from the previous page"),
    db: Session = Depends(get_session),
) -> Dict[str, Any]:
    """One page of the directory for a version, used by remote cache instances."""
    try:
        rows, token = crud.get_player_page(db, version, limit, next_token)
    except Exception as e:
        logger.error(f"Directory page error: {e}")
        raise HTTPException(status_code=500, detail=str(e))
    return {
        "records": [record_from_row(row).model_dump(by_alias=True) for row in rows],
        "nextToken": token,
    }


@app.get("/api/directory/{version}/exists")
def directory_exists(version: str, db: Session = Depends(get_session)) -> Dict[str, Any]:
    """Whether the directory holds any player for the version."""
    version = version.strip()
    if not version:
        return {"version": version, "exists": False}
    return {"version": version, "exists": crud.version_exists(db, version)}


@app.get("/api/stats")
async def get_stats(cache: DirectoryCache = Depends(get_cache)) -> Dict[str, Any]:
    """
    Get statistics about the directory cache.

    Returns:
        JSON response with per-version statistics
    """
    try:
        return {
            "service": "player_directory",
            "stats": cache.get_stats(),
            "success": True
        }
    except Exception as e:
        logger.error(f"Stats error: {e}")
        raise HTTPException(status_code=500, detail=str(e))


@app.get("/api/health")
async def health_check(cache: DirectoryCache = Depends(get_cache)) -> Dict[str, Any]:
    """
    Health check endpoint. The service is healthy unless the default
    version failed to load and has nothing indexed.
    """
    status = cache.status(default_version())
    return {
        "status": "unhealthy" if status.unavailable else "healthy",
        "loaded": status.loaded,
        "loading": status.loading,
        "total_players": status.loaded_count,
        "success": True
    }
