import asyncio
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from redis.exceptions import RedisError

from .config import settings
from .database import init_db
from .errors import (
    AlreadyCancelled,
    Conflict,
    InvalidTransition,
    NotFound,
    SchedulingError,
    StorageError,
    ValidationError,
)
from .redis_client import redis_client
from .routers import admin_appointments, appointments, availability, blocked_times
from .services.reminder_checker import reminder_checker_loop

logger = logging.getLogger(__name__)

ERROR_STATUS = {
    ValidationError: 400,
    NotFound: 404,
    InvalidTransition: 409,
    Conflict: 409,
    AlreadyCancelled: 200,
    StorageError: 503,
}


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()

    reminder_task = None
    if settings.reminders_enabled:
        reminder_task = asyncio.create_task(reminder_checker_loop())

    yield

    if reminder_task:
        reminder_task.cancel()
        try:
            await reminder_task
        except asyncio.CancelledError:
            pass


app = FastAPI(title="Appointment Scheduling API", lifespan=lifespan)

app.include_router(appointments.router)
app.include_router(admin_appointments.router)
app.include_router(availability.router)
app.include_router(blocked_times.router)


@app.exception_handler(SchedulingError)
async def scheduling_error_handler(request: Request, exc: SchedulingError):
    status_code = next(
        (code for kind, code in ERROR_STATUS.items() if isinstance(exc, kind)),
        500,
    )
    if status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    return JSONResponse(status_code=status_code, content=exc.to_dict())


@app.get("/health")
def health():
    try:
        redis_ok = bool(redis_client.ping())
    except RedisError:
        redis_ok = False
    return {"status": "ok", "redis": redis_ok}
