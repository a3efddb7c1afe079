"""FastAPI application entry point."""
import logging
import time

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError

from rsvp_app.config import settings
from rsvp_app.database import Base, engine
from rsvp_app.logging_config import configure_logging
from rsvp_app.models.audit_log import AuditLogImmutableError
from rsvp_app.routers import (
    auth, event_guests, events, guest_groups, guests, logistics, logs, notifications, reporting, rsvps, users,
    venues,
)
from rsvp_app.routers import settings as settings_routes
from rsvp_app.services.audit_service import request_context

# Import all models so Base.metadata knows about them
import rsvp_app.models  # noqa: F401

configure_logging()
logger = logging.getLogger(__name__)

app = FastAPI(
    title="RSVP Event Manager",
    description="Events, guest lists, RSVPs, check-in, notifications and reporting",
    version="0.1.0",
)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=[origin.strip() for origin in settings.CORS_ORIGINS.split(",") if origin.strip()],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Log every request and expose client details to the audit trail."""
    request_context.set({
        "ip_address": request.client.host if request.client else None,
        "user_agent": request.headers.get("user-agent"),
    })
    started = time.perf_counter()
    response = await call_next(request)
    elapsed_ms = (time.perf_counter() - started) * 1000
    logger.info("%s %s -> %d (%.1f ms)", request.method, request.url.path, response.status_code, elapsed_ms)
    return response


@app.exception_handler(IntegrityError)
async def integrity_error_handler(request: Request, exc: IntegrityError):
    logger.warning("Integrity error on %s %s: %s", request.method, request.url.path, exc.orig)
    return JSONResponse(
        status_code=status.HTTP_409_CONFLICT,
        content={"detail": "The request conflicts with existing data"},
    )


@app.exception_handler(AuditLogImmutableError)
async def audit_log_immutable_handler(request: Request, exc: AuditLogImmutableError):
    logger.warning("Refused audit log change on %s %s: %s", request.method, request.url.path, exc)
    return JSONResponse(status_code=status.HTTP_409_CONFLICT, content={"detail": str(exc)})


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content={"detail": "Internal server error"})


# Register routers
app.include_router(auth.router, prefix="/api/auth", tags=["Auth"])
app.include_router(users.router, prefix="/api/users", tags=["Users"])
app.include_router(events.router, prefix="/api/events", tags=["Events"])
app.include_router(event_guests.router, prefix="/api/events", tags=["Event Guests"])
app.include_router(rsvps.event_router, prefix="/api/events", tags=["RSVPs"])
app.include_router(venues.router, prefix="/api/venues", tags=["Venues"])
app.include_router(rsvps.router, prefix="/api/rsvps", tags=["RSVPs"])
app.include_router(guests.router, prefix="/api/guests", tags=["Guests"])
app.include_router(guest_groups.router, prefix="/api/guest-groups", tags=["Guest Groups"])
app.include_router(logistics.router, prefix="/api/logistics", tags=["Logistics"])
app.include_router(notifications.router, prefix="/api/notifications", tags=["Notifications"])
app.include_router(reporting.router, prefix="/api/reporting", tags=["Reporting"])
app.include_router(reporting.dashboard_router, prefix="/api/dashboard", tags=["Dashboard"])
app.include_router(logs.router, prefix="/api/logs", tags=["Logs"])
app.include_router(settings_routes.router, prefix="/api/settings", tags=["Settings"])


@app.on_event("startup")
def on_startup():
    """Create database tables on startup (for SQLite dev mode)."""
    if settings.database_url.startswith("sqlite"):
        Base.metadata.create_all(bind=engine)
    logger.info("RSVP Event Manager started (env=%s)", settings.APP_ENV)


@app.get("/api/health")
def health_check():
    return {"status": "ok"}
