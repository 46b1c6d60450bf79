import asyncio
import logging
from typing import Any

from careers.schemas.application import (
    Application,
    ApplicationCreate,
    JobSpecificAnswerTable,
)
from careers.schemas.job import Job, JobCreate, JobUpdate
from careers.storage.base import (
    Clock,
    IStorage,
    build_application,
    build_job,
    merge_job,
    next_application_id,
)
from careers.storage.codec import (
    answers_row,
    application_to_row,
    decode_rows,
    job_to_row,
    row_id,
    row_to_answers,
    row_to_application,
    row_to_job,
    utc_now,
)
from careers.storage.schema import ANSWERS, APPLICATIONS, JOBS, Region, SchemaBootstrapper
from careers.storage.seed import sample_job_rows
from careers.storage.sheet_client import SheetClient

logger = logging.getLogger(__name__)


class SheetsStorage(IStorage):
    """Jobs, applications and answers kept in three sheets of one spreadsheet.

    Writes target explicit row ranges found by counting column A rather than
    using the append endpoint, which can attach data to the wrong table when a
    header is being written at the same time. Read-then-write sequences are
    serialized by one lock per instance; this does not protect against other
    processes writing to the same spreadsheet.
    """

    implementation = "google-sheets"

    def __init__(
        self,
        spreadsheet_id: str,
        service_account_email: str | None = None,
        private_key: str | None = None,
        service: Any = None,
        clock: Clock = utc_now,
        seed_sample_jobs: bool = False,
        initial_question_columns: int = 8,
    ):
        super().__init__(clock)
        self.client = SheetClient(spreadsheet_id, service_account_email, private_key, service=service)
        self.schema = SchemaBootstrapper(
            self.client,
            seed_jobs=sample_job_rows(clock()) if seed_sample_jobs else None,
            initial_question_columns=initial_question_columns,
        )
        self._write_lock = asyncio.Lock()

    def state(self) -> str:
        return self.client.state.value

    async def _next_free_row(self, region: Region) -> int:
        existing = await self.client.read_range(region.id_column_range)
        return max(len(existing) + 1, 2)

    # Jobs

    async def _scan_jobs(self) -> list[tuple[int, Job]]:
        await self.schema.ensure(JOBS)
        rows = await self.client.read_range(JOBS.data_range)
        return decode_rows(rows, lambda row: row_to_job(row, self.clock), JOBS.name)

    async def get_all_jobs(self) -> list[Job]:
        return [job for _, job in await self._scan_jobs()]

    async def create_job(self, data: JobCreate) -> Job:
        job = build_job(data, self.clock())
        async with self._write_lock:
            await self.schema.ensure(JOBS)
            row_number = await self._next_free_row(JOBS)
            await self.client.update_range(JOBS.row_range(row_number), [job_to_row(job)])
        logger.info("Created job %s in row %d", job.id, row_number)
        return job

    async def update_job(self, job_id: str, changes: JobUpdate) -> Job | None:
        async with self._write_lock:
            for row_number, job in await self._scan_jobs():
                if job.id == job_id:
                    updated = merge_job(job, changes, self.clock())
                    await self.client.update_range(JOBS.row_range(row_number), [job_to_row(updated)])
                    return updated
        return None

    # Applications

    async def _scan_applications(self) -> list[tuple[int, Application]]:
        await self.schema.ensure(APPLICATIONS)
        rows = await self.client.read_range(APPLICATIONS.data_range)
        return decode_rows(rows, lambda row: row_to_application(row, self.clock), APPLICATIONS.name)

    async def get_all_applications(self) -> list[Application]:
        return [app for _, app in await self._scan_applications()]

    async def create_application(self, data: ApplicationCreate) -> Application:
        async with self._write_lock:
            now = self.clock()
            existing_ids = [app.id for _, app in await self._scan_applications()]
            application = build_application(next_application_id(existing_ids, now), data, now)
            row_number = await self._next_free_row(APPLICATIONS)
            await self.client.update_range(
                APPLICATIONS.row_range(row_number), [application_to_row(application)]
            )
        logger.info("Stored application %s in row %d", application.id, row_number)
        return application

    async def update_application_status(
        self, application_id: str, status: str, notes: str | None = None
    ) -> Application | None:
        async with self._write_lock:
            for row_number, app in await self._scan_applications():
                if app.id == application_id:
                    updated = app.model_copy(update={
                        "status": status,
                        "notes": notes if notes is not None else app.notes,
                        "updated_at": self.clock(),
                    })
                    await self.client.update_range(
                        APPLICATIONS.row_range(row_number), [application_to_row(updated)]
                    )
                    return updated
        return None

    # Job-specific answers

    async def record_job_specific_answers(
        self, application: Application, job_title: str, answers: list[str]
    ) -> None:
        async with self._write_lock:
            headers = await self.schema.ensure_question_columns(len(answers))
            row_number = await self._next_free_row(ANSWERS)
            await self.client.update_range(
                ANSWERS.row_range(row_number, len(headers)),
                [answers_row(headers, application, job_title, answers)],
            )
        logger.info(
            "Stored %d job-specific answers for application %s in row %d",
            len(answers), application.id, row_number,
        )

    async def get_job_specific_answers(self) -> JobSpecificAnswerTable:
        await self.schema.ensure(ANSWERS)
        rows = await self.client.read_range(ANSWERS.name)
        if not rows:
            return JobSpecificAnswerTable(headers=[], rows=[])
        headers = [str(h) for h in rows[0]]
        return JobSpecificAnswerTable(
            headers=headers,
            rows=[row_to_answers(headers, row) for row in rows[1:] if row and row_id(row)],
        )
