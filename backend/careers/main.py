import logging
import uuid
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from careers.config import settings
from careers.errors import StorageUnavailableError
from careers.routers import applications, files, health, jobs
from careers.services.rate_limit import SubmissionRateLimiter
from careers.services.resume_service import ResumeStore
from careers.storage import IStorage, create_storage
from careers.utils.filesystem import ensure_uploads_dir

logger = logging.getLogger("careers")


def setup_logging() -> None:
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    ensure_uploads_dir(settings.uploads_dir)
    logger.info(
        "Careers portal starting (environment: %s, storage: %s)",
        settings.environment, app.state.storage.implementation,
    )
    yield


async def storage_unavailable_handler(request: Request, exc: StorageUnavailableError):
    correlation_id = uuid.uuid4().hex[:12]
    logger.error(
        "Storage failure on %s %s [%s] (%s): %s",
        request.method, request.url.path, correlation_id, exc.category, exc,
    )
    return JSONResponse(
        status_code=500,
        content={
            "error": "The service is temporarily unavailable. Please try again later.",
            "correlation_id": correlation_id,
            "diagnosis": exc.category,
        },
    )


def create_app(storage: IStorage | None = None) -> FastAPI:
    app = FastAPI(
        title="Careers Portal",
        description="Job listings and applications backed by Google Sheets",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.storage = storage if storage is not None else create_storage(settings)
    app.state.submission_limiter = SubmissionRateLimiter(
        settings.rate_limit_max_submissions, settings.rate_limit_window_seconds
    )
    app.state.resume_store = ResumeStore(settings.uploads_dir, url_prefix=f"{settings.api_prefix}/files")

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_exception_handler(StorageUnavailableError, storage_unavailable_handler)

    app.include_router(health.router, prefix=settings.api_prefix)
    app.include_router(jobs.router, prefix=settings.api_prefix)
    app.include_router(applications.router, prefix=settings.api_prefix)
    app.include_router(files.router, prefix=settings.api_prefix)
    return app


setup_logging()
app = create_app()


def run() -> None:
    uvicorn.run("careers.main:app", host=settings.host, port=settings.port)
