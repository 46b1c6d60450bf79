from careers.schemas.application import (
    Application,
    ApplicationCreate,
    JobSpecificAnswerTable,
    is_question_header,
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
from careers.storage.codec import ANSWER_BASE_HEADERS, answers_row, row_to_answers, utc_now
from careers.storage.schema import question_headers


class MemoryStorage(IStorage):
    """Process-local storage used when Google Sheets credentials are absent.

    Behaves like the spreadsheet backend, including soft deletes and the
    growth-only answers header, but everything is lost on restart.
    """

    implementation = "memory"

    def __init__(self, clock: Clock = utc_now, initial_question_columns: int = 8, jobs: list[Job] | None = None):
        super().__init__(clock)
        self._jobs: list[Job] = list(jobs or [])
        self._applications: list[Application] = []
        self._answer_headers: list[str] = ANSWER_BASE_HEADERS + question_headers(1, initial_question_columns)
        self._answer_rows: list[list[str]] = []

    async def get_all_jobs(self) -> list[Job]:
        return [job.model_copy(deep=True) for job in self._jobs]

    async def create_job(self, data: JobCreate) -> Job:
        job = build_job(data, self.clock())
        self._jobs.append(job)
        return job.model_copy(deep=True)

    async def update_job(self, job_id: str, changes: JobUpdate) -> Job | None:
        for index, job in enumerate(self._jobs):
            if job.id == job_id:
                self._jobs[index] = merge_job(job, changes, self.clock())
                return self._jobs[index].model_copy(deep=True)
        return None

    async def get_all_applications(self) -> list[Application]:
        return [app.model_copy() for app in self._applications]

    async def create_application(self, data: ApplicationCreate) -> Application:
        now = self.clock()
        app_id = next_application_id([app.id for app in self._applications], now)
        application = build_application(app_id, data, now)
        self._applications.append(application)
        return application.model_copy()

    async def update_application_status(
        self, application_id: str, status: str, notes: str | None = None
    ) -> Application | None:
        for index, app in enumerate(self._applications):
            if app.id == application_id:
                self._applications[index] = app.model_copy(update={
                    "status": status,
                    "notes": notes if notes is not None else app.notes,
                    "updated_at": self.clock(),
                })
                return self._applications[index].model_copy()
        return None

    async def record_job_specific_answers(
        self, application: Application, job_title: str, answers: list[str]
    ) -> None:
        existing = sum(1 for h in self._answer_headers if is_question_header(h))
        if len(answers) > existing:
            self._answer_headers += question_headers(existing + 1, len(answers))
        self._answer_rows.append(answers_row(self._answer_headers, application, job_title, answers))

    async def get_job_specific_answers(self) -> JobSpecificAnswerTable:
        headers = list(self._answer_headers)
        return JobSpecificAnswerTable(
            headers=headers,
            rows=[row_to_answers(headers, row) for row in self._answer_rows],
        )
