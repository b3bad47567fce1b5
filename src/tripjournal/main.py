import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic_settings import BaseSettings, SettingsConfigDict
from starlette.exceptions import HTTPException as StarletteHTTPException

from tripjournal.api.auth import router as auth_router
from tripjournal.api.comments import router as comments_router
from tripjournal.api.trips import router as trips_router
from tripjournal.api.users import router as users_router
from tripjournal.dependencies import get_geocode_client_instance, set_geocode_client_instance
from tripjournal.errors import TripJournalError
from tripjournal.geocoding import GeocodeClient
from tripjournal.metrics import setup_metrics

from .logging_config import configure_logging


class AppSettings(BaseSettings):
    log_level: str = "INFO"
    log_colors: bool = True
    cors_origins: list[str] = [
        "http://localhost:3000",
        "http://localhost:5173",
        "http://localhost:8081",
        "http://127.0.0.1:3000",
    ]

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")


settings = AppSettings()

# Configure logging for the whole process (uvicorn imports this module when
# starting the app, so configure_logging runs early and affects uvicorn loggers)
configure_logging(level=settings.log_level, use_colors=settings.log_colors)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Manage application lifecycle: startup and shutdown.

    Creates the shared geocode client on startup and closes its connection
    pool on shutdown.
    """
    logger.info("Starting up application...")
    set_geocode_client_instance(GeocodeClient())
    logger.info("Geocode client initialized successfully")

    yield

    logger.info("Shutting down application...")
    try:
        get_geocode_client_instance().close()
        set_geocode_client_instance(None)
        logger.info("Geocode client closed successfully")
    except RuntimeError as e:
        logger.error(f"Error during geocode client shutdown: {e}")


app = FastAPI(title="Trip Journal API", redoc_url=None, redirect_slashes=False, lifespan=lifespan)

setup_metrics(app)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(TripJournalError)
async def trip_journal_error_handler(request: Request, exc: TripJournalError):
    if exc.status_code >= 500:
        logger.error("%s on %s %s: %s", type(exc).__name__, request.method, request.url.path, exc.__cause__ or exc.message)
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(status_code=exc.status_code, content={"error": str(exc.detail)}, headers=getattr(exc, "headers", None))


@app.exception_handler(RequestValidationError)
async def request_validation_error_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    first = errors[0] if errors else {}
    location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    message = f"Invalid value for {location}" if location else "Invalid request"
    logger.info("Rejected %s %s: %s", request.method, request.url.path, errors)
    return JSONResponse(status_code=400, content={"error": message})


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception("Unhandled exception on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"error": "Internal server error"})


app.include_router(auth_router)
app.include_router(trips_router)
app.include_router(comments_router)
app.include_router(users_router)


@app.get("/")
def read_root():
    return {"message": "Hello from tripjournal!"}
