"""
Myth Parallels - FastAPI service for parallel-narrative suggestions

Exposes the suggestion engine over HTTP:
- POST /v1/parallels/suggest: ranked candidate parallels for a myth
- POST /v1/parallels: accept a parallel (invalidates the suggestion cache)
- GET /v1/parallels: accepted parallels of a myth
- POST /admin/rebuild-suggest-cache: drop and rebuild the corpus snapshot

Architecture:
- PostgreSQL (asyncpg) holds myths, themes and accepted parallels
- The corpus snapshot is cached in-process with a TTL
- All scoring happens in-process per request (TF-IDF + lexical signals)
"""

import logging
import os
from contextlib import asynccontextmanager
from datetime import datetime
from pathlib import Path
from typing import List, Optional, Union

# Load environment variables from .env.local (local dev) or .env (production)
from dotenv import load_dotenv

env_local = Path(__file__).parent.parent / ".env.local"
env_file = Path(__file__).parent.parent / ".env"

if env_local.exists():
    load_dotenv(env_local, override=True)
elif env_file.exists():
    load_dotenv(env_file, override=True)

from fastapi import Depends, FastAPI, HTTPException, Request, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field

from .cache import SnapshotCache
from .config import RankingConfig, Settings
from .errors import ParallelsError
from .logging_config import setup_logging
from .models import AcceptedParallel
from .scoring.ranking import RankingPolicy
from .store import PostgresMythStore
from .suggester import ParallelSuggester

logger = logging.getLogger(__name__)

APP_VERSION = "0.1.0"
APP_START_TIME = datetime.utcnow().isoformat() + "Z"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Wire store, cache and suggester unless one was injected"""
    if getattr(app.state, "suggester", None) is not None:
        yield
        return
    
    log_level = os.getenv("LOG_LEVEL", "INFO").upper()
    setup_logging(
        log_file="logs/myth-parallels.log",
        console_level=getattr(logging, log_level, logging.INFO),
        file_level=logging.DEBUG  # Always DEBUG in file for troubleshooting
    )
    
    settings = Settings.from_env()
    store = PostgresMythStore(settings.database_url, ssl=settings.db_ssl)
    
    logger.info("Connecting to database...")
    await store.connect()
    if settings.init_schema:
        await store.init_schema()
    
    cache = SnapshotCache(store, ttl_seconds=settings.cache_ttl_seconds)
    app.state.suggester = ParallelSuggester(
        store,
        cache=cache,
        policy=RankingPolicy(RankingConfig.from_env()),
        timeout_seconds=settings.suggest_timeout_seconds,
    )
    logger.info(f"Suggestion engine ready (cache TTL={settings.cache_ttl_seconds}s)")
    
    yield
    
    logger.info("Shutting down...")
    app.state.suggester = None
    await store.disconnect()


# Request/Response models
class HealthResponse(BaseModel):
    status: str
    version: str
    started_at: str
    uptime_seconds: float
    cached_docs: Optional[int] = None


class SuggestRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)
    
    myth_id: Union[int, str] = Field(..., alias="mythId", description="Source myth id")


class MythSummary(BaseModel):
    id: int
    title: str
    tradition: Optional[str] = None
    summary: Optional[str] = None
    tags: List[str] = Field(default_factory=list)
    imageUrl: Optional[str] = None
    themes: List[str] = Field(default_factory=list)


class ScoreRationale(BaseModel):
    baseScore: float
    sharedThemeCount: int
    bigramJacc: float
    unigramJacc: float
    sharedKeywordCount: int
    sharedTitleCount: int
    title: str
    id: int


class SuggestionItem(BaseModel):
    score: float
    rationale: Optional[ScoreRationale] = None
    myth: MythSummary


class RebuildResponse(BaseModel):
    rebuilt: bool
    docs: int


class ParallelCreate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)
    
    myth_a: Union[int, str] = Field(..., alias="mythA")
    myth_b: Union[int, str] = Field(..., alias="mythB")
    score: Optional[float] = None
    rationale: Optional[str] = None
    detected_by: str = Field(default="human", alias="detectedBy")


class ParallelItem(BaseModel):
    id: int
    myth_a: int
    myth_b: int
    score: Optional[float] = None
    rationale: Optional[str] = None
    detected_by: str
    created_at: Optional[datetime] = None
    
    @classmethod
    def from_parallel(cls, parallel: AcceptedParallel) -> "ParallelItem":
        return cls(
            id=parallel.id,
            myth_a=parallel.myth_a,
            myth_b=parallel.myth_b,
            score=parallel.score,
            rationale=parallel.rationale,
            detected_by=parallel.detected_by,
            created_at=parallel.created_at,
        )


def get_suggester(request: Request) -> ParallelSuggester:
    suggester = getattr(request.app.state, "suggester", None)
    if suggester is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Suggestion engine not initialized",
        )
    return suggester


def _http_error(exc: ParallelsError) -> HTTPException:
    return HTTPException(status_code=exc.status_code, detail=str(exc))


def create_app(suggester: Optional[ParallelSuggester] = None) -> FastAPI:
    """
    Build the FastAPI application.
    
    Args:
        suggester: Pre-wired suggester (tests); when omitted the lifespan
            connects to PostgreSQL using environment settings
    """
    app = FastAPI(
        title="Myth Parallels API",
        description="Candidate parallel narratives for a myth catalog",
        version=APP_VERSION,
        lifespan=lifespan,
    )
    app.state.suggester = suggester
    
    @app.get("/", response_model=dict)
    async def root():
        """Root endpoint"""
        return {
            "service": "Myth Parallels API",
            "version": APP_VERSION,
            "status": "running",
            "docs": "/docs",
        }
    
    @app.get("/health", response_model=HealthResponse)
    async def health(request: Request):
        """Health check with cache state"""
        start_time = datetime.fromisoformat(APP_START_TIME.rstrip('Z'))
        uptime = (datetime.utcnow() - start_time).total_seconds()
        
        suggester = getattr(request.app.state, "suggester", None)
        snapshot = suggester.cache.peek() if suggester is not None else None
        
        return HealthResponse(
            status="healthy" if suggester is not None else "starting",
            version=APP_VERSION,
            started_at=APP_START_TIME,
            uptime_seconds=round(uptime, 2),
            cached_docs=len(snapshot) if snapshot is not None else None,
        )
    
    @app.post("/v1/parallels/suggest", response_model=List[SuggestionItem])
    async def suggest_parallels(
        body: SuggestRequest,
        suggester: ParallelSuggester = Depends(get_suggester),
    ):
        """
        Suggest candidate parallels for a myth.
        
        Example:
            POST /v1/parallels/suggest
            {
                "mythId": 12
            }
        """
        try:
            results = await suggester.suggest(body.myth_id)
        except ParallelsError as e:
            if e.status_code >= 500:
                logger.error(f"Suggestion failed for myth {body.myth_id!r}: {e}")
            raise _http_error(e) from e
        
        return [SuggestionItem.model_validate(r.to_dict()) for r in results]
    
    @app.post("/admin/rebuild-suggest-cache", response_model=RebuildResponse)
    async def rebuild_suggest_cache(suggester: ParallelSuggester = Depends(get_suggester)):
        """Drop the corpus snapshot and rebuild it immediately"""
        try:
            snapshot = await suggester.rebuild_cache()
        except ParallelsError as e:
            logger.error(f"Suggestion cache rebuild failed: {e}")
            raise _http_error(e) from e
        
        return RebuildResponse(rebuilt=True, docs=len(snapshot))
    
    @app.get("/v1/parallels", response_model=List[ParallelItem])
    async def list_parallels(
        myth_id: str,
        suggester: ParallelSuggester = Depends(get_suggester),
    ):
        """Accepted parallels of a myth, newest first"""
        try:
            parallels = await suggester.list_parallels(myth_id)
        except ParallelsError as e:
            raise _http_error(e) from e
        
        return [ParallelItem.from_parallel(p) for p in parallels]
    
    @app.post("/v1/parallels", response_model=ParallelItem, status_code=status.HTTP_201_CREATED)
    async def create_parallel(
        body: ParallelCreate,
        suggester: ParallelSuggester = Depends(get_suggester),
    ):
        """
        Accept a parallel between two myths.
        
        Invalidates the suggestion cache so the new link is excluded from the
        next suggestion for myth_a.
        """
        try:
            parallel = await suggester.accept_parallel(
                body.myth_a,
                body.myth_b,
                score=body.score,
                rationale=body.rationale,
                detected_by=body.detected_by,
            )
        except ParallelsError as e:
            raise _http_error(e) from e
        
        return ParallelItem.from_parallel(parallel)
    
    @app.exception_handler(Exception)
    async def global_exception_handler(request, exc):
        """Global exception handler"""
        logger.exception(f"Unhandled error on {request.url.path}")
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "error": "Internal server error",
                "detail": str(exc),
            },
        )
    
    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    
    uvicorn.run(
        "myth_parallels.main:app",
        host="0.0.0.0",
        port=Settings.from_env().port,
        reload=True,  # Development only
    )
