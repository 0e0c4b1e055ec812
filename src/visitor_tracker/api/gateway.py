"""API Gateway - FastAPI application serving the tracking endpoint."""

import asyncio
import logging
import threading
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import AsyncGenerator, Optional

from fastapi import Depends, FastAPI, Request, Response
from fastapi.responses import HTMLResponse, JSONResponse

from visitor_tracker import __version__
from visitor_tracker.api.dashboard import render_dashboard
from visitor_tracker.api.extraction import format_timestamp, generate_request_id
from visitor_tracker.api.schemas import AnalyticsSummary, ErrorResponse, LogResponse
from visitor_tracker.api.service import VisitorTrackingService
from visitor_tracker.common.config import get_config
from visitor_tracker.common.logging import configure_logging

config = get_config()
configure_logging(config.log_level.value)
logger = logging.getLogger("visitor_tracker_api")

SECURITY_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, POST, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type, Authorization, X-Requested-With",
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "X-XSS-Protection": "1; mode=block",
    "Referrer-Policy": "strict-origin-when-cross-origin",
    "Content-Security-Policy": "default-src 'self'",
    "X-Robots-Tag": "noindex, nofollow",
}


def apply_security_headers(response: Response) -> Response:
    for name, value in SECURITY_HEADERS.items():
        response.headers[name] = value
    return response


class ServiceManager:
    """Thread-safe service singleton manager."""
    
    _instance: Optional[VisitorTrackingService] = None
    _lock = threading.Lock()
    
    @classmethod
    def get_service(cls) -> VisitorTrackingService:
        """Get or create the tracking service instance (thread-safe)."""
        if cls._instance is None:
            with cls._lock:
                if cls._instance is None:
                    metrics = None
                    if config.metrics_enabled:
                        from visitor_tracker.monitoring import MetricsCollector
                        metrics = MetricsCollector(region=config.aws_region)
                    cls._instance = VisitorTrackingService(config=config, metrics=metrics)
                    logger.info(
                        f"VisitorTrackingService initialized "
                        f"(store={config.visit_store.value}, window={config.dedup_window_seconds}s)"
                    )
        return cls._instance
    
    @classmethod
    def shutdown(cls) -> None:
        """Shutdown the service and release resources."""
        with cls._lock:
            if cls._instance is not None:
                cls._instance.shutdown()
                cls._instance = None
                logger.info("VisitorTrackingService shutdown complete")


def get_service() -> VisitorTrackingService:
    """Get the tracking service instance."""
    return ServiceManager.get_service()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager."""
    logger.info("Visitor Tracker starting up...")
    get_service()
    logger.info("Visitor Tracker ready")
    
    yield
    
    logger.info("Visitor Tracker shutting down...")
    await asyncio.to_thread(ServiceManager.shutdown)


app = FastAPI(
    title="Visitor Tracker",
    description="Visitor tracking with deduplication, enrichment and notification fan-out.",
    version=__version__,
    lifespan=lifespan,
    docs_url="/docs" if config.docs_enabled else None,
    redoc_url="/redoc" if config.docs_enabled else None,
)


# =============================================================================
# EXCEPTION HANDLERS
# =============================================================================

@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle unexpected errors.
    
    Logs the full exception but returns a generic envelope to the client.
    """
    request_id = getattr(request.state, "request_id", None) or generate_request_id()
    logger.exception(
        "Handler error",
        extra={"request_id": request_id, "error_type": type(exc).__name__}
    )
    response = JSONResponse(
        status_code=500,
        content=ErrorResponse(
            message="An unexpected error occurred",
            timestamp=format_timestamp(datetime.now(timezone.utc)),
            request_id=request_id,
        ).model_dump(by_alias=True),
    )
    return apply_security_headers(response)


# =============================================================================
# MIDDLEWARE
# =============================================================================

@app.middleware("http")
async def add_security_headers(request: Request, call_next):
    """Assign a request ID and attach security headers to every response."""
    request.state.request_id = generate_request_id()
    
    response = await call_next(request)
    return apply_security_headers(response)


# =============================================================================
# ENDPOINTS
# =============================================================================

@app.options("/api/log", status_code=204)
async def log_preflight() -> Response:
    """CORS preflight."""
    return Response(status_code=204)


@app.api_route(
    "/api/log",
    methods=["GET", "POST"],
    response_model=LogResponse,
    responses={
        200: {"description": "Visit tracked", "model": LogResponse},
        500: {"description": "Internal server error", "model": ErrorResponse},
    },
    summary="Track a visit",
)
async def log_visit(
    request: Request,
    service: VisitorTrackingService = Depends(get_service),
) -> LogResponse:
    """Classify, enrich and fan out one visit.
    
    Enrichment and notification failures never change the status code;
    the response reports whatever could be determined.
    """
    headers = {name.lower(): value for name, value in request.headers.items()}
    peer = request.client.host if request.client else None
    
    result = await service.track(
        headers,
        request.method,
        peer=peer,
        request_id=request.state.request_id,
    )
    return service.build_response(result.visit)


@app.get("/api/analytics", response_model=AnalyticsSummary)
async def analytics(
    service: VisitorTrackingService = Depends(get_service),
) -> AnalyticsSummary:
    """Visitor counts and top countries, browsers and operating systems."""
    return await asyncio.to_thread(service.analytics_summary)


@app.get("/api/dashboard", response_class=HTMLResponse)
async def dashboard(
    service: VisitorTrackingService = Depends(get_service),
) -> HTMLResponse:
    summary = await asyncio.to_thread(service.analytics_summary)
    return HTMLResponse(render_dashboard(summary))


@app.get("/health")
async def health_check() -> dict:
    """Health check endpoint."""
    return {"status": "healthy", "service": "visitor-tracker", "version": __version__}


# =============================================================================
# DEVELOPMENT SERVER
# =============================================================================

if __name__ == "__main__":
    import uvicorn
    
    uvicorn.run(
        "visitor_tracker.api.gateway:app",
        host=config.api_host,
        port=config.api_port,
        reload=config.is_development,
        log_level=config.log_level.value.lower(),
    )
