import asyncio
import logging
import os
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from dental_booking.api.routes import booking, payments, users
from dental_booking.core.config import settings, _ENV_FILE
from dental_booking.core.db import async_session_maker
from dental_booking.core.exceptions import ServiceError
from dental_booking.services.avatar_storage import UPLOADS_URL_PREFIX
from dental_booking.services.booking_service import expire_pending_bookings

if os.getenv("ENV") != "production":
    logging.basicConfig(level=logging.DEBUG)
else:
    logging.basicConfig(
        level=logging.INFO,
        format='{"time": "%(asctime)s", "level": "%(levelname)s", "message": "%(message)s"}',
    )
logger = logging.getLogger(__name__)


async def run_expiry_sweep() -> int:
    """Delete unpaid bookings older than pending_booking_ttl_minutes, in its own transaction."""
    try:
        async with async_session_maker() as session:
            try:
                n = await expire_pending_bookings(session, settings.pending_booking_ttl_minutes)
                await session.commit()
                if n:
                    logger.info(
                        "Expiry sweep: deleted %d unpaid booking(s) older than %d minutes",
                        n,
                        settings.pending_booking_ttl_minutes,
                    )
                return n
            except Exception:
                await session.rollback()
                raise
    except Exception as e:
        logger.exception("Expiry sweep failed: %s", e)
        return 0


async def _sweep_loop() -> None:
    while True:
        await asyncio.sleep(settings.expiry_sweep_interval_seconds)
        await run_expiry_sweep()


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Loading .env from: %s (exists: %s)", _ENV_FILE, _ENV_FILE.exists())
    logger.info(
        "Unpaid bookings expire after %d minutes (sweep every %ds)",
        settings.pending_booking_ttl_minutes,
        settings.expiry_sweep_interval_seconds,
    )
    if not settings.stripe_enabled:
        logger.warning("Stripe: NOT configured. Set STRIPE_SECRET_KEY in %s", _ENV_FILE)
    if not settings.email_enabled:
        logger.warning("SMTP: NOT configured, notification emails will be skipped")
    Path(settings.upload_dir).mkdir(parents=True, exist_ok=True)
    task = asyncio.create_task(_sweep_loop())
    yield
    task.cancel()
    try:
        await task
    except asyncio.CancelledError:
        pass


app = FastAPI(
    title="Dental Booking API",
    description="Backend for dental appointment booking: availability, bookings, payments, users",
    version="0.1.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
    allow_headers=["Authorization", "Content-Type"],
)

app.include_router(booking.router, prefix="/api/v1")
app.include_router(payments.router, prefix="/api/v1")
app.include_router(users.router, prefix="/api/v1")
app.mount(UPLOADS_URL_PREFIX, StaticFiles(directory=settings.upload_dir, check_dir=False), name="uploads")


def _cors_headers(origin: str | None) -> dict[str, str]:
    """Add CORS headers to error responses so the browser doesn't block them."""
    headers = {
        "Access-Control-Allow-Credentials": "true",
        "Access-Control-Allow-Methods": "GET, POST, PUT, PATCH, DELETE, OPTIONS",
        "Access-Control-Allow-Headers": "Authorization, Content-Type",
    }
    if origin and origin in settings.cors_origins_list:
        headers["Access-Control-Allow-Origin"] = origin
    elif settings.cors_origins_list:
        headers["Access-Control-Allow-Origin"] = settings.cors_origins_list[0]
    return headers


@app.exception_handler(ServiceError)
async def service_error_handler(request: Request, exc: ServiceError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("%s: %s", type(exc).__name__, exc.message)
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.message, "code": type(exc).__name__},
        headers=_cors_headers(request.headers.get("origin")),
    )


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Missing or malformed fields are a plain 400."""
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": jsonable_encoder(exc.errors()), "code": "ValidationFailed"},
        headers=_cors_headers(request.headers.get("origin")),
    )


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Return actual error in JSON; include CORS so 500 responses are not blocked by browser."""
    origin = request.headers.get("origin")
    headers = _cors_headers(origin)
    if isinstance(exc, HTTPException):
        return JSONResponse(
            status_code=exc.status_code,
            content={"detail": exc.detail},
            headers=headers,
        )
    logger.exception("Unhandled exception: %s", exc)
    detail = f"{type(exc).__name__}: {str(exc)}"
    return JSONResponse(
        status_code=500,
        content={"detail": detail},
        headers=headers,
    )


@app.get("/health")
async def health() -> dict:
    return {"status": "ok"}
