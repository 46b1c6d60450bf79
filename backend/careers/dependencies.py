from fastapi import Depends, HTTPException, Request

from careers.config import settings
from careers.services.application_service import ApplicationIngestion
from careers.storage import IStorage


def get_storage(request: Request) -> IStorage:
    return request.app.state.storage


def get_ingestion(request: Request, storage: IStorage = Depends(get_storage)) -> ApplicationIngestion:
    return ApplicationIngestion(
        storage,
        request.app.state.resume_store,
        max_upload_bytes=settings.max_upload_bytes,
        projection_attempts=settings.answers_projection_attempts,
        projection_backoff_seconds=settings.answers_projection_backoff_seconds,
    )


async def limit_application_submissions(request: Request):
    if not settings.rate_limit_enabled:
        return
    client_address = request.client.host if request.client else "unknown"
    retry_after = request.app.state.submission_limiter.hit(client_address)
    if retry_after:
        raise HTTPException(
            status_code=429,
            detail={
                "error": "Too many applications submitted. Please try again later.",
                "retry_after_seconds": int(retry_after) + 1,
            },
        )
