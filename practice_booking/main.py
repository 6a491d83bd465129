import logging
import time
import uuid
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .config import Settings, get_settings
from .domain.bookings import router as bookings_router
from .domain.bookings.repository import BookingRepository
from .domain.bookings.service import BookingService
from .domain.practices import router as practices_router
from .domain.practices.repository import PracticeRepository
from .domain.practices.service import PracticeService
from .domain.providers import router as providers_router
from .domain.providers.repository import ProviderRepository
from .domain.providers.service import ProviderService
from .domain.slots import router as slots_router
from .domain.slots.repository import SessionRepository
from .domain.slots.service import SlotService
from .errors import BookingAPIError, InternalError, RateLimitExceeded, StoreError, ValidationFailed
from .events import EventPublisher, get_event_publisher
from .rate_limiter import get_redis_client
from .security_headers import SecurityHeadersMiddleware
from .storage import DynamoTable, get_dynamodb_resource

logger = logging.getLogger(__name__)


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    # Reduce verbosity of third-party libraries
    for noisy in ("botocore", "boto3", "urllib3", "httpx"):
        logging.getLogger(noisy).setLevel(logging.WARNING)


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings: Settings = app.state.settings
    logger.info(
        f"Application starting up (environment={settings.environment}, "
        f"bookings={settings.bookings_table}, sessions={settings.sessions_table}, "
        f"reserve_slots={settings.reserve_slots})"
    )
    yield
    logger.info("Application shutting down...")


def validation_details(errors) -> list[dict]:
    """Field-level validation errors in a JSON-safe shape"""
    return [
        {"loc": list(error.get("loc", ())), "msg": error.get("msg"), "type": error.get("type")}
        for error in errors
    ]


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(BookingAPIError)
    async def booking_error_handler(request: Request, exc: BookingAPIError):
        headers = None
        if isinstance(exc, RateLimitExceeded):
            headers = {"Retry-After": str(exc.retry_after)}
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict(), headers=headers)

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        details = validation_details(exc.errors())
        logger.warning(f"Validation error for {request.url.path}: {details}")
        error = ValidationFailed(details=details)
        return JSONResponse(status_code=error.status_code, content=error.to_dict())

    @app.exception_handler(StoreError)
    async def store_error_handler(request: Request, exc: StoreError):
        logger.error(f"❌ {request.method} {request.url.path} - Store error: {exc}")
        error = InternalError()
        return JSONResponse(status_code=error.status_code, content=error.to_dict())

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        logger.exception(f"❌ {request.method} {request.url.path} - Unhandled error: {exc}")
        error = InternalError()
        return JSONResponse(status_code=error.status_code, content=error.to_dict())


def create_app(
    settings: Optional[Settings] = None,
    booking_repo: Optional[BookingRepository] = None,
    session_repo: Optional[SessionRepository] = None,
    practice_repo: Optional[PracticeRepository] = None,
    provider_repo: Optional[ProviderRepository] = None,
    publisher: Optional[EventPublisher] = None,
    redis_client=None,
) -> FastAPI:
    """Build the API; collaborators not supplied are created from settings"""
    settings = settings or get_settings()
    configure_logging(settings.log_level)

    if None in (booking_repo, session_repo, practice_repo, provider_repo):
        resource = get_dynamodb_resource(settings)
        booking_repo = booking_repo or BookingRepository(
            DynamoTable.from_settings(settings, settings.bookings_table, resource),
            settings.bookings_practice_index,
        )
        session_repo = session_repo or SessionRepository(
            DynamoTable.from_settings(settings, settings.sessions_table, resource)
        )
        practice_repo = practice_repo or PracticeRepository(
            DynamoTable.from_settings(settings, settings.practices_table, resource)
        )
        provider_repo = provider_repo or ProviderRepository(
            DynamoTable.from_settings(settings, settings.providers_table, resource)
        )

    app = FastAPI(title="Practice Booking API", version="1.0.0", lifespan=lifespan)

    app.state.settings = settings
    app.state.redis = redis_client if redis_client is not None else get_redis_client(settings)
    app.state.booking_service = BookingService(
        settings, booking_repo, session_repo, publisher or get_event_publisher(settings)
    )
    app.state.slot_service = SlotService(settings, session_repo)
    app.state.practice_service = PracticeService(practice_repo)
    app.state.provider_service = ProviderService(provider_repo, practice_repo)

    register_exception_handlers(app)

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        request_id = request.headers.get("x-request-id") or uuid.uuid4().hex
        request.state.request_id = request_id
        started = time.perf_counter()
        try:
            response = await call_next(request)
        except Exception as e:
            logger.error(f"[{request_id}] {request.method} {request.url.path} - Error: {str(e)}")
            raise
        elapsed_ms = (time.perf_counter() - started) * 1000
        response.headers["x-request-id"] = request_id
        logger.info(
            f"[{request_id}] {request.method} {request.url.path} "
            f"-> {response.status_code} ({elapsed_ms:.1f}ms)"
        )
        return response

    if settings.security_headers_enabled:
        app.add_middleware(
            SecurityHeadersMiddleware,
            is_production=settings.is_production,
            exclude_paths=["/health", "/docs", "/openapi.json"],
        )
    else:
        logger.warning("Security headers DISABLED - only use in development!")

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=False,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["*"],
    )

    app.include_router(bookings_router)
    app.include_router(slots_router)
    app.include_router(practices_router)
    app.include_router(providers_router)

    @app.get("/health")
    def health():
        return {"status": "healthy"}

    return app


app = create_app()
