import logging
import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from starlette.exceptions import HTTPException as StarletteHTTPException

from markboard.api.router import api_router
from markboard.api.routes import websocket
from markboard.core.async_utils import drain_background_tasks
from markboard.core.config import settings
from markboard.core.exceptions import MarkboardError
from markboard.core.limiter import limiter
from markboard.core.logging import setup_logging
from markboard.db import engine, init_db
from markboard.services.expiry_sweeper import ExpirySweeper
from markboard.services.mark_store import MarkStore
from markboard.services.marks import MarkLifecycle
from markboard.services.subscription_store import SubscriptionStore
from markboard.services.web_push import PushDispatcher
from markboard.services.websocket_manager import manager

logger = logging.getLogger(__name__)

SHUTDOWN_DRAIN_SECONDS = 5.0


def format_validation_errors(errors) -> str:
    """Flatten pydantic errors into one readable line."""
    parts = []
    for error in errors:
        location = ".".join(str(p) for p in error.get("loc", ()) if p != "body")
        message = error.get("msg", "Invalid value")
        parts.append(f"{location}: {message}" if location else message)
    return "; ".join(parts) or "Invalid request"


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    if not app.state.dispatcher.enabled:
        logger.warning("WebPush disabled: missing VAPID keys")
    app.state.sweeper.start()
    try:
        yield
    finally:
        await app.state.sweeper.stop()
        await drain_background_tasks(SHUTDOWN_DRAIN_SECONDS)


def create_application() -> FastAPI:
    setup_logging(settings.LOG_LEVEL)

    app = FastAPI(title=settings.PROJECT_NAME, version="0.1.0", lifespan=lifespan)

    mark_store = MarkStore(engine)
    subscription_store = SubscriptionStore(engine)
    dispatcher = PushDispatcher(subscription_store, settings)
    app.state.mark_store = mark_store
    app.state.subscription_store = subscription_store
    app.state.broadcaster = manager
    app.state.dispatcher = dispatcher
    app.state.lifecycle = MarkLifecycle(mark_store, manager, dispatcher)
    app.state.sweeper = ExpirySweeper(
        mark_store,
        manager,
        interval=settings.SWEEP_INTERVAL_SECONDS,
        timeout=settings.SWEEP_TIMEOUT_SECONDS,
    )
    app.state.limiter = limiter

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.BACKEND_CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["GET", "POST", "DELETE", "OPTIONS"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        started = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - started) * 1000
        logger.info(
            f"{request.method} {request.url.path} -> {response.status_code} ({elapsed_ms:.1f} ms)"
        )
        return response

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": str(exc.detail)},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"error": format_validation_errors(exc.errors())},
        )

    @app.exception_handler(RateLimitExceeded)
    async def rate_limit_handler(request: Request, exc: RateLimitExceeded):
        logger.warning(f"Rate limit exceeded for {request.client.host if request.client else '?'}")
        return JSONResponse(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            content={"error": f"Too many requests: {exc.detail}"},
        )

    @app.exception_handler(MarkboardError)
    async def markboard_exception_handler(request: Request, exc: MarkboardError):
        if exc.status_code >= 500:
            logger.error(f"{type(exc).__name__} on {request.method} {request.url.path}: {exc.message}")
            message = "Internal Server Error" if exc.status_code == 500 else exc.message
        else:
            message = exc.message
        return JSONResponse(status_code=exc.status_code, content={"error": message})

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        logger.exception(f"Unhandled exception on {request.method} {request.url.path}: {exc}")
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": "Internal Server Error"},
        )

    app.include_router(api_router, prefix=settings.API_PREFIX)
    app.include_router(websocket.router)

    return app


app = create_application()
