"""FastAPI application entrypoint."""
from contextlib import asynccontextmanager
import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from momentum.errors import MomentumError
from momentum.middleware import RequestLoggingMiddleware, setup_logging
from momentum.routers import goals, health, reviews, roadmap_steps, schedule, tasks
from momentum.settings import settings
from momentum.startup import run_startup_validation

# Configure logging before anything else
setup_logging()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Validate settings and the database before accepting traffic."""
    logger.info(f"Starting application in {settings.ENV} environment")

    run_startup_validation()

    yield

    logger.info("Shutting down application")


app = FastAPI(
    title="Momentum",
    description="Goal roadmaps and daily task planning",
    version="0.1.0",
    lifespan=lifespan
)

app.add_middleware(RequestLoggingMiddleware)


@app.exception_handler(MomentumError)
async def momentum_error_handler(request: Request, exc: MomentumError) -> JSONResponse:
    """Map domain errors to their HTTP status with a {"detail": ...} body."""
    if exc.status_code >= 500:
        logger.error(f"{type(exc).__name__} on {request.method} {request.url.path}: {exc.message}")
    else:
        logger.info(f"{type(exc).__name__} on {request.method} {request.url.path}: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


app.include_router(health.router)
app.include_router(goals.router)
app.include_router(roadmap_steps.router)
app.include_router(schedule.router)
app.include_router(tasks.router)
app.include_router(reviews.router)
