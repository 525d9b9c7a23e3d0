"""
Checklist Board - Backend API
FastAPI over SQLAlchemy (SQLite or Postgres) with local or Supabase object storage.

Run server:
uvicorn main:app --host 0.0.0.0 --port 8000
"""

import contextvars
import logging
import os
import time
import uuid
from collections import defaultdict, deque
from contextlib import asynccontextmanager

from fastapi import FastAPI, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from core.db import dispose_engine, init_db, ping
from core.storage import storage_metrics
from routers import (
    attachments,
    auth,
    boards,
    cards,
    checklist,
    files,
    note_folders,
    note_images,
    user_notes,
)
from settings import get_settings

# ========== Request Context for Tracing ==========
request_id_var = contextvars.ContextVar('request_id', default=None)
request_start_time_var = contextvars.ContextVar('request_start_time', default=None)

# ========== Metrics Storage ==========
request_metrics = {
    "total_requests": defaultdict(int),  # by endpoint
    "total_latency": defaultdict(float),  # by endpoint
    "status_codes": defaultdict(int),  # by status code
}

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

settings = get_settings()
DATABASE_URL = settings.resolved_db_url()
STORAGE_BACKEND = settings.object_storage_backend.lower()
VERSION = "1.0"

startup_time = time.time()


@asynccontextmanager
async def lifespan(app: FastAPI):
    global startup_time
    startup_time = time.time()
    init_db()
    logger.info("Checklist Board API starting up...")
    logger.info(f"Database: {DATABASE_URL.split('://')[0]}")
    logger.info(f"Object storage: {STORAGE_BACKEND.upper()} (bucket {settings.storage_bucket})")
    logger.info(f"Allowed origins: {ALLOWED_ORIGINS}")

    yield
    logger.info("Checklist Board API shutting down...")
    dispose_engine()


# ============================================================================
# FASTAPI APP
# ============================================================================

app = FastAPI(
    title="Checklist Board API",
    description="Boards of project cards with checklists and attachments, plus a personal notes workspace",
    version=VERSION,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)


@app.middleware("http")
async def request_tracing_middleware(request, call_next):
    """Add request_id and timing to all requests."""
    request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())[:8]
    request_id_var.set(request_id)
    request_start_time_var.set(time.time())

    response = await call_next(request)

    latency = time.time() - request_start_time_var.get()
    logger.info(
        f"{request.method} {request.url.path} -> {response.status_code}",
        extra={
            "request_id": request_id,
            "method": request.method,
            "path": request.url.path,
            "status": response.status_code,
            "latency_ms": round(latency * 1000, 2),
        }
    )

    # Route template keeps ids out of the metric keys
    route = request.scope.get("route")
    path = getattr(route, "path", request.url.path)
    endpoint = f"{request.method} {path}"
    request_metrics["total_requests"][endpoint] += 1
    request_metrics["total_latency"][endpoint] += latency
    request_metrics["status_codes"][response.status_code] += 1

    response.headers["X-Request-ID"] = request_id
    return response


# ========== Rate Limiting ==========

RATE_LIMIT_EXEMPT = {"/", "/health", "/healthz", "/readyz", "/metrics", "/docs", "/redoc", "/openapi.json"}


class RateLimiter:
    """One-minute sliding window per (client, method, path)."""

    window_seconds = 60.0

    def __init__(self):
        self._hits = defaultdict(deque)

    def clear(self):
        self._hits.clear()

    def hit(self, key: tuple, limit: int) -> int:
        """Record a request; returns 0 when allowed, else seconds to wait."""
        now = time.monotonic()
        hits = self._hits[key]
        while hits and hits[0] <= now - self.window_seconds:
            hits.popleft()
        if len(hits) >= limit:
            return int(hits[0] + self.window_seconds - now) + 1
        hits.append(now)
        return 0


rate_limiter = RateLimiter()


def rate_limit_for(method: str) -> int:
    return settings.rate_limit_read if method in ("GET", "HEAD") else settings.rate_limit_write


@app.middleware("http")
async def rate_limiting_middleware(request, call_next):
    if not settings.rate_limit_enabled or request.url.path in RATE_LIMIT_EXEMPT:
        return await call_next(request)

    client_ip = request.client.host if request.client else "unknown"
    limit = rate_limit_for(request.method)
    retry_after = rate_limiter.hit((client_ip, request.method, request.url.path), limit)
    if retry_after:
        logger.warning(f"Rate limit exceeded for {client_ip} on {request.method} {request.url.path}")
        return JSONResponse(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            content={"detail": "Rate limit exceeded", "retry_after_seconds": retry_after},
            headers={"Retry-After": str(retry_after), "X-RateLimit-Limit": str(limit)},
        )

    return await call_next(request)


ALLOWED_ORIGINS = settings.get_origins_list()

app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(Exception)
async def global_exception_handler(request, exc):
    logger.error(f"Unhandled exception: {str(exc)}", exc_info=True)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Internal server error"}
    )

# ============================================================================
# ENDPOINTS
# ============================================================================


@app.get("/health")
async def health_check():
    try:
        ping()
        return {
            "status": "healthy",
            "database": DATABASE_URL.split("://")[0],
            "object_storage": STORAGE_BACKEND,
            "version": VERSION,
        }
    except Exception as e:
        logger.error(f"Health check failed: {str(e)}")
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"status": "unhealthy", "error": str(e)}
        )


@app.get("/healthz")
async def healthz():
    """Liveness probe: the process is up and answering."""
    return {
        "status": "ok",
        "timestamp": time.time(),
        "version": VERSION
    }


@app.get("/readyz")
async def readyz():
    """
    Readiness probe.
    Returns 200 when the database answers, 503 otherwise.
    """
    try:
        ping()
        return {
            "status": "ready",
            "object_storage": STORAGE_BACKEND,
            "timestamp": time.time()
        }
    except Exception as e:
        logger.error(f"Readiness check failed: {str(e)}")
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={
                "status": "not_ready",
                "error": str(e),
                "timestamp": time.time()
            }
        )


@app.get("/metrics")
async def get_metrics():
    """Request counts, latencies and object-storage counters."""
    avg_latencies = {}
    for endpoint, total_latency in request_metrics["total_latency"].items():
        count = request_metrics["total_requests"][endpoint]
        avg_latencies[endpoint] = round((total_latency / count) * 1000, 2) if count > 0 else 0

    total_requests = sum(request_metrics["total_requests"].values())
    total_latency = sum(request_metrics["total_latency"].values())

    hits = storage_metrics["signed_cache_hits"]
    misses = storage_metrics["signed_cache_misses"]
    hit_rate = round(hits / (hits + misses) * 100, 2) if (hits + misses) > 0 else 0

    return {
        "timestamp": time.time(),
        "uptime_seconds": round(time.time() - startup_time, 2),
        "requests": {
            "by_endpoint": dict(request_metrics["total_requests"]),
            "by_status": dict(request_metrics["status_codes"]),
            "total": total_requests,
        },
        "latency": {
            "by_endpoint_ms": avg_latencies,
            "average_ms": round(total_latency / total_requests * 1000, 2) if total_requests > 0 else 0,
        },
        "storage": {
            "backend": STORAGE_BACKEND,
            "uploads": storage_metrics["uploads"],
            "removes": storage_metrics["removes"],
            "signed_url_cache": {
                "hits": hits,
                "misses": misses,
                "hit_rate_percent": hit_rate,
            },
        },
    }


@app.get("/")
async def root():
    return {
        "message": "Checklist Board API",
        "version": VERSION,
        "status": "running",
        "docs": "/docs"
    }


# ============================================================================
# ROUTERS
# ============================================================================

app.include_router(auth.router)
app.include_router(boards.router)
app.include_router(cards.router)
app.include_router(checklist.router)
app.include_router(attachments.router)
app.include_router(files.router)
# images and folders before notes so /api/notes/{note_id} does not shadow them
app.include_router(note_images.router)
app.include_router(note_folders.router)
app.include_router(user_notes.router)


if __name__ == "__main__":
    import uvicorn
    port = int(os.getenv("PORT", 8000))
    uvicorn.run(app, host="0.0.0.0", port=port, log_level="info")
