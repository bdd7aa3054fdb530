"""
Main FastAPI application entry point
"""
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import HTTPException as FastAPIHTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from decisionlog import __version__
from decisionlog.api.routes import decisions, health, messages
from decisionlog.core.config import get_settings
from decisionlog.core.database import init_db
from decisionlog.core.exceptions import DecisionLogError
from decisionlog.core.logging_config import LoggingConfig
from decisionlog.core.metrics import decision_rule_violations_total
from decisionlog.core.middleware import LoggingContextMiddleware
from decisionlog.core.middleware_metrics import (MetricsMiddleware,
                                                 normalize_endpoint)

# Configure logging first
LoggingConfig.configure()

logger = LoggingConfig.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan events for FastAPI app"""
    settings = get_settings()
    logger.info(f"Starting {settings.app_name} in {settings.app_env} mode...")
    init_db()

    yield

    logger.info(f"Shutting down {settings.app_name}...")


_settings = get_settings()
app = FastAPI(
    title=_settings.app_name,
    description="Decision lifecycle tracking for team chat",
    version=__version__,
    lifespan=lifespan,
)

# Add logging context middleware (before CORS to capture all requests)
app.add_middleware(LoggingContextMiddleware)
app.add_middleware(MetricsMiddleware)

app.add_middleware(
    CORSMiddleware,
    allow_origins=_settings.allowed_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(DecisionLogError)
async def decision_error_handler(request: Request, exc: DecisionLogError):
    """Map rule violations to their HTTP status"""
    logger.warning(
        exc.message,
        extra={
            "error_type": exc.error_type,
            "path": request.url.path,
            "method": request.method,
        }
    )
    decision_rule_violations_total.labels(
        error_type=exc.error_type,
        operation=f"{request.method} {normalize_endpoint(request.url.path)}"
    ).inc()
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Global exception handler to log all unhandled errors"""
    # Don't handle HTTPException - let FastAPI handle it
    if isinstance(exc, FastAPIHTTPException):
        raise exc

    logger.error(
        "Unhandled exception",
        exc_info=True,
        extra={
            "error": str(exc),
            "error_type": type(exc).__name__,
            "path": request.url.path,
            "method": request.method,
        }
    )

    return JSONResponse(
        status_code=500,
        content={
            "detail": "Internal server error",
            "type": type(exc).__name__
        }
    )

# Include routers
app.include_router(health.router)
app.include_router(decisions.router)
app.include_router(messages.router)


@app.get("/api")
async def root():
    """Root API endpoint"""
    settings = get_settings()
    return {
        "name": settings.app_name,
        "version": __version__,
        "status": "running",
        "environment": settings.app_env,
    }


if __name__ == "__main__":
    import uvicorn
    settings = get_settings()
    uvicorn.run(
        "decisionlog.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.app_env == "development",
    )
