"""
FastAPI application entry point.

Exposes the progress analytics engine (goal statistics, insights, decline
alerts, report drafts, trend labels) to the front end. The API is
stateless: every request carries the records it needs.
"""
from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from routers import analytics, dashboard, parent, reports
from core.config import settings, validate_production_config
from core.logging import log_fields, setup_logging
import logging
import time

# Setup logging first
setup_logging()
logger = logging.getLogger(__name__)

validate_production_config(
    environment=settings.ENVIRONMENT,
    debug=settings.DEBUG,
    cors_origins=settings.CORS_ORIGINS,
    rate_threshold=settings.RATE_TREND_THRESHOLD,
    mastery_rate=settings.MASTERY_RATE,
)

# Create FastAPI app
app = FastAPI(
    title="Case Progress Analytics API",
    description="Trend, insight and report computation for developmental therapy case management",
    version="1.0.0",
    docs_url="/docs" if settings.DEBUG else None,
    redoc_url="/redoc" if settings.DEBUG else None,
)


# CORS middleware
# Production: set CORS_ORIGINS env var (comma-separated)
# Development: DEBUG=True allows all origins
if settings.DEBUG:
    allowed_origins = ["*"]
elif settings.CORS_ORIGINS:
    allowed_origins = [origin.strip() for origin in settings.CORS_ORIGINS.split(",")]
else:
    allowed_origins = [
        "http://localhost:3000",
        "http://127.0.0.1:3000",
        "http://localhost:5173",
        "http://127.0.0.1:5173",
    ]
app.add_middleware(
    CORSMiddleware,
    allow_origins=allowed_origins,
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Request logging middleware
@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Log each analytics call with its status and duration."""
    start = time.perf_counter()
    path = request.url.path

    try:
        response = await call_next(request)
    except Exception as e:
        logger.error(
            "%s %s failed", request.method, path,
            exc_info=True,
            extra=log_fields(method=request.method, path=path, error=str(e)),
        )
        raise

    elapsed_ms = round((time.perf_counter() - start) * 1000, 2)
    logger.info(
        "%s %s -> %d", request.method, path, response.status_code,
        extra=log_fields(
            method=request.method,
            path=path,
            status_code=response.status_code,
            process_time_ms=elapsed_ms,
        ),
    )
    response.headers["X-Process-Time-Ms"] = str(elapsed_ms)
    return response


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Unhandled errors become a generic 500; details stay in the log."""
    logger.error(
        "Unhandled exception: %s", exc,
        exc_info=True,
        extra=log_fields(method=request.method, path=request.url.path),
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Internal server error"},
    )


@app.get("/health")
async def health():
    """Simple health check for load balancers and uptime monitors."""
    return {
        "status": "healthy",
        "timestamp": time.time(),
    }


app.include_router(analytics.router)
app.include_router(dashboard.router)
app.include_router(reports.router)
app.include_router(parent.router)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("main:app", host=settings.API_HOST, port=settings.API_PORT)
