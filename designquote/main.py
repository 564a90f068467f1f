from fastapi import FastAPI, Request
from contextlib import asynccontextmanager
from starlette.responses import Response, JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
from designquote.api import auth, users, project_types, features, pages, quotes, reports, settings as settings_api
from designquote.core.config import settings
from designquote.core.redis import init_redis, close_redis, redis_healthy
from designquote.core.metrics import request_count, request_duration, db_connected, redis_connected, get_metrics_text
from designquote.db.session import engine
from sqlalchemy import text
import time
import logging

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)


class MetricsMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        start_time = time.time()
        status = 500
        
        try:
            response = await call_next(request)
            status = response.status_code
            return response
        finally:
            # route template keeps label cardinality bounded for /quotes/{quote_id}
            route = request.scope.get("route")
            endpoint = getattr(route, "path", request.url.path)
            request_count.labels(
                method=request.method,
                endpoint=endpoint,
                status=status
            ).inc()
            request_duration.labels(
                method=request.method,
                endpoint=endpoint
            ).observe(time.time() - start_time)


async def _check_database() -> bool:
    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
        return True
    except Exception as e:
        logger.error(f"Database connection failed: {e}")
        return False


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Application starting...")
    
    logger.info("Initializing Redis connection...")
    try:
        await init_redis()
        redis_connected.set(1)
        logger.info("Redis connected")
    except Exception as e:
        logger.warning(f"Redis unavailable, rate limiting and idempotency disabled: {e}")
        redis_connected.set(0)
    
    db_ok = await _check_database()
    db_connected.set(1 if db_ok else 0)
    if db_ok:
        logger.info("Database connected")
    
    yield
    
    logger.info("Application shutting down...")
    await close_redis()
    redis_connected.set(0)
    await engine.dispose()
    logger.info("Shutdown complete")


app = FastAPI(
    title=settings.API_TITLE,
    description=settings.API_DESCRIPTION,
    version=settings.API_VERSION,
    lifespan=lifespan
)

app.add_middleware(MetricsMiddleware)

app.include_router(auth.router)
app.include_router(users.router)
app.include_router(project_types.router)
app.include_router(features.router)
app.include_router(pages.router)
app.include_router(quotes.router)
app.include_router(reports.router)
app.include_router(settings_api.router)


@app.get("/metrics", tags=["monitoring"])
async def metrics():
    return Response(
        content=get_metrics_text(),
        media_type="text/plain; version=0.0.4; charset=utf-8"
    )


@app.get("/health", tags=["monitoring"])
async def health_check():
    redis_ok = await redis_healthy()
    redis_connected.set(1 if redis_ok else 0)
    
    return {
        "status": "healthy",
        "service": settings.API_TITLE,
        "version": settings.API_VERSION,
        "dependencies": {
            "redis": "connected" if redis_ok else "disconnected",
            "database": "connected" if await _check_database() else "disconnected"
        }
    }


@app.get("/readiness", tags=["monitoring"])
async def readiness_check():
    if not await _check_database():
        return JSONResponse(status_code=503, content={"ready": False, "reason": "Database not available"})
    
    return {
        "ready": True,
        "service": settings.API_TITLE
    }


@app.get("/", tags=["root"])
async def root():
    return {
        "message": settings.API_TITLE,
        "version": settings.API_VERSION,
        "docs": "/docs",
        "health": "/health",
        "metrics": "/metrics"
    }
