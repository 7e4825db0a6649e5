"""
Training Academy

FastAPI application entry point.
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from academy.api.middleware.request_id import RequestIdMiddleware
from academy.api.v1 import router as api_v1_router
from academy.config import get_settings
from academy.database import close_db, init_db
from academy.engines.training.exceptions import TierLocked, TrainingError, UnknownCourse
from academy.logging_config import configure_logging, get_logger
from academy.schemas.common import HealthResponse

settings = get_settings()
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator:
    """
    Application lifespan handler.

    Runs startup and shutdown tasks.
    """
    configure_logging(
        log_level=settings.log_level,
        environment=settings.environment,
        debug=settings.debug,
    )

    logger.info("Starting %s v%s", settings.project_name, settings.version)
    await init_db()
    logger.info("Database initialized")

    yield

    logger.info("Shutting down...")
    await close_db()
    logger.info("Database connections closed")


app = FastAPI(
    title=settings.project_name,
    description="""
    Training Academy

    Staff training progression for the restaurant console.

    ## Features

    - **Course Catalog**: Foundation, L1, L2 and L3 food hygiene courses
    - **Quizzes**: Deterministic scoring against per-tier pass marks
    - **Tier Gating**: Each tier unlocks when the previous one is complete
    - **Reflections**: Capstone courses finish with a learning reflection
    - **Certificates**: One per tier, valid for 12 months
    - **Journey**: Onboarding milestones shared with other console modules
    """,
    version=settings.version,
    lifespan=lifespan,
    docs_url="/docs" if settings.debug else None,
    redoc_url="/redoc" if settings.debug else None,
)


# add_middleware stacks innermost-first; CORS added last is outermost
_cors_origins = [
    "http://localhost:3000",
    "http://localhost:5173",  # Vite default
    "http://127.0.0.1:3000",
]

app.add_middleware(RequestIdMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=_cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _request_id(request: Request):
    return getattr(request.state, "request_id", None)


def _headers(request: Request) -> dict:
    req_id = _request_id(request)
    return {"X-Request-ID": req_id} if req_id else {}


@app.exception_handler(TrainingError)
async def training_exception_handler(request: Request, exc: TrainingError):
    """Map rejected training operations to their error kind."""
    if isinstance(exc, (UnknownCourse, TierLocked)):
        logger.warning(
            "Training request rejected: %s",
            exc.code,
            extra={"path": request.url.path, "details": exc.details},
        )
    content = exc.to_dict()
    content["request_id"] = _request_id(request)
    return JSONResponse(status_code=exc.status_code, content=content, headers=_headers(request))


@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException):
    headers = _headers(request)
    if exc.headers:
        headers.update(exc.headers)
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail}, headers=headers)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(
    request: Request,
    exc: RequestValidationError,
):
    """Handle request validation errors."""
    errors = []
    for error in exc.errors():
        field = ".".join(str(loc) for loc in error["loc"])
        errors.append({
            "field": field,
            "message": error["msg"],
            "type": error["type"],
        })
    content = {
        "error": "VALIDATION_ERROR",
        "message": "Validation error",
        "details": {"errors": errors},
        "request_id": _request_id(request),
    }
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content=content,
        headers=_headers(request),
    )


@app.exception_handler(Exception)
async def general_exception_handler(
    request: Request,
    exc: Exception,
):
    """Handle unexpected exceptions."""
    logger.exception("Unhandled exception: %s", exc)
    content = {
        "error": "INTERNAL_ERROR",
        "message": str(exc) if settings.debug else "Internal server error",
        "details": {"type": type(exc).__name__} if settings.debug else {},
        "request_id": _request_id(request),
    }
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=content,
        headers=_headers(request),
    )


@app.get("/health", response_model=HealthResponse, tags=["Health"])
async def health_check():
    """Check application health."""
    return HealthResponse(status="ok", version=settings.version, database="connected")


@app.get("/", tags=["Root"])
async def root():
    """Root endpoint with API information."""
    return {
        "name": settings.project_name,
        "version": settings.version,
        "docs": "/docs" if settings.debug else "disabled",
        "api": {
            "v1": settings.api_v1_prefix,
        },
    }


app.include_router(
    api_v1_router,
    prefix=settings.api_v1_prefix,
)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "academy.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.debug,
    )
