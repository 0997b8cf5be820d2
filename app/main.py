from datetime import datetime, timezone
import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from app.config import get_settings
from app.db import init_db
from app.exceptions import DomainException
from routers import availability, reservations, rooms

settings = get_settings()

# Configure logging
logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)

logger = logging.getLogger(__name__)

app = FastAPI(title="Room Booking API", version="0.1.0")

app.include_router(reservations.router, prefix="/reservations", tags=["reservations"])
app.include_router(availability.router, prefix="/availability", tags=["availability"])
app.include_router(rooms.router, prefix="/rooms", tags=["rooms"])


@app.exception_handler(DomainException)
async def handle_domain_exception(request: Request, exc: DomainException):
    http_exc = exc.to_http_exception()
    if http_exc.status_code >= 500:
        logger.warning("%s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse(
        status_code=http_exc.status_code,
        content={
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "status": http_exc.status_code,
            **http_exc.detail,
        },
    )


@app.on_event("startup")
def on_startup():
    if settings.skip_db_init:
        return
    init_db()


@app.get("/")
def root():
    return {"ok": True, "service": "room-booking-api"}
