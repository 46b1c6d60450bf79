"""Application submission: validate the resume, store the application, then
copy its job-specific answers into the wide answers sheet.

The answers copy is a projection of data already saved in the application
row. It runs after the response (as a background task), retries with
exponential backoff, and on final failure is logged without undoing the
submission.
"""

import asyncio
import json
import logging

from careers.errors import PartialWriteError, StorageUnavailableError
from careers.schemas.application import Application, ApplicationCreate
from careers.services.resume_service import ResumeStore, ResumeUpload, validate_resume
from careers.storage.base import IStorage

logger = logging.getLogger(__name__)

UNKNOWN_JOB_TITLE = "Unknown Job"


def parse_answers(raw: str) -> list[str]:
    """Answers from a ``{"question": "answer", ...}`` JSON object, in question order."""
    data = json.loads(raw)
    if not isinstance(data, dict):
        raise ValueError("job-specific answers must be a JSON object")
    return [
        "" if value is None else value if isinstance(value, str) else json.dumps(value)
        for value in data.values()
    ]


class ApplicationIngestion:
    def __init__(
        self,
        storage: IStorage,
        resume_store: ResumeStore,
        max_upload_bytes: int,
        projection_attempts: int = 3,
        projection_backoff_seconds: float = 0.5,
    ):
        self.storage = storage
        self.resume_store = resume_store
        self.max_upload_bytes = max_upload_bytes
        self.projection_attempts = max(1, projection_attempts)
        self.projection_backoff_seconds = projection_backoff_seconds

    async def submit(self, data: ApplicationCreate, resume: ResumeUpload | None = None) -> Application:
        """Validate and persist an application.

        Raises ``UploadValidationError`` before anything is written when the
        resume is rejected. Storage errors propagate unchanged.
        """
        if resume is not None:
            validate_resume(resume.filename, resume.content_type, len(resume.content), self.max_upload_bytes)
            resume_url = self.resume_store.store(resume, data.first_name, data.last_name)
            data = data.model_copy(update={"resume_url": resume_url})

        application = await self.storage.create_application(data)
        logger.info(
            "Application %s received for job %s (resume: %s, answers: %s)",
            application.id, application.job_id,
            bool(application.resume_url), bool(application.job_specific_answers),
        )
        return application

    async def project_answers(self, application: Application) -> bool:
        """Copy the application's answers into the answers sheet.

        Returns True when a row was written. Never raises: failures are
        logged as ``PartialWriteError`` since the application itself is
        already stored.
        """
        if not application.job_specific_answers:
            return False

        try:
            answers = parse_answers(application.job_specific_answers)
        except ValueError as exc:
            logger.error("%s", PartialWriteError(application.id, exc))
            return False
        if not answers:
            return False

        last_error: Exception | None = None
        for attempt in range(1, self.projection_attempts + 1):
            try:
                job = await self.storage.get_job(application.job_id)
                job_title = job.title if job else UNKNOWN_JOB_TITLE
                await self.storage.record_job_specific_answers(application, job_title, answers)
                return True
            except StorageUnavailableError as exc:
                last_error = exc
                logger.warning(
                    "Recording answers for %s failed (attempt %d/%d): %s",
                    application.id, attempt, self.projection_attempts, exc,
                )
                if attempt < self.projection_attempts:
                    await asyncio.sleep(self.projection_backoff_seconds * 2 ** (attempt - 1))
            except Exception as exc:
                # Background task: no caller is left to report this.
                logger.exception("%s", PartialWriteError(application.id, exc))
                return False

        logger.error("%s", PartialWriteError(application.id, last_error))
        return False
