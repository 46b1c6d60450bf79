import uuid
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Callable

from careers.errors import StorageUnavailableError
from careers.schemas.application import Application, ApplicationCreate, JobSpecificAnswerTable
from careers.schemas.health import StorageDiagnostics
from careers.schemas.job import Job, JobCreate, JobUpdate
from careers.storage.codec import utc_now

Clock = Callable[[], datetime]


def generate_job_id() -> str:
    return str(uuid.uuid4())


def next_application_id(existing_ids: list[str], today: datetime) -> str:
    """Build ``YYYYMMDD-NNN`` from the ids already issued today.

    NNN is one past the highest sequence number seen for today's prefix, so a
    missing number in the middle is never handed out again.
    """
    prefix = today.strftime("%Y%m%d")
    highest = 0
    for app_id in existing_ids:
        if not app_id.startswith(prefix + "-"):
            continue
        try:
            highest = max(highest, int(app_id[len(prefix) + 1:]))
        except ValueError:
            continue
    return f"{prefix}-{highest + 1:03d}"


def build_application(app_id: str, data: ApplicationCreate, now: datetime) -> Application:
    return Application(
        id=app_id,
        job_id=data.job_id,
        first_name=data.first_name,
        last_name=data.last_name,
        email=data.email,
        phone=data.phone or None,
        resume_url=data.resume_url or None,
        can_travel_to_navi_mumbai=data.can_travel_to_navi_mumbai or None,
        current_salary=data.current_salary or None,
        expected_salary=data.expected_salary or None,
        why_motor_octane=data.why_motor_octane or None,
        job_specific_answers=data.job_specific_answers or None,
        status="pending",
        notes=data.notes or None,
        applied_at=now,
        updated_at=now,
    )


def build_job(data: JobCreate, now: datetime) -> Job:
    return Job(
        id=generate_job_id(),
        **data.model_dump(exclude={"level"}),
        level=data.level or None,
        is_active=True,
        created_at=now,
        updated_at=now,
    )


def merge_job(job: Job, changes: JobUpdate, now: datetime) -> Job:
    update_data = changes.model_dump(exclude_unset=True, exclude_none=True)
    if update_data.get("level") == "":
        update_data["level"] = None
    return job.model_copy(update={**update_data, "updated_at": now})


class IStorage(ABC):
    """Storage contract shared by the spreadsheet and in-memory backends.

    Every listing is a full scan of the backing table; nothing is cached.
    """

    implementation = "unknown"

    def __init__(self, clock: Clock = utc_now):
        self.clock = clock

    # Jobs

    @abstractmethod
    async def get_all_jobs(self) -> list[Job]: ...

    async def get_active_jobs(self) -> list[Job]:
        return [job for job in await self.get_all_jobs() if job.is_active]

    async def get_job(self, job_id: str) -> Job | None:
        return next((job for job in await self.get_all_jobs() if job.id == job_id), None)

    @abstractmethod
    async def create_job(self, data: JobCreate) -> Job: ...

    @abstractmethod
    async def update_job(self, job_id: str, changes: JobUpdate) -> Job | None: ...

    async def delete_job(self, job_id: str) -> bool:
        updated = await self.update_job(job_id, JobUpdate(is_active=False))
        return updated is not None

    async def search_jobs(self, keyword: str) -> list[Job]:
        return [job for job in await self.get_active_jobs() if job.matches(keyword)]

    # Applications

    @abstractmethod
    async def get_all_applications(self) -> list[Application]: ...

    async def get_applications_for_job(self, job_id: str) -> list[Application]:
        return [app for app in await self.get_all_applications() if app.job_id == job_id]

    async def get_application(self, application_id: str) -> Application | None:
        return next((app for app in await self.get_all_applications() if app.id == application_id), None)

    @abstractmethod
    async def create_application(self, data: ApplicationCreate) -> Application: ...

    @abstractmethod
    async def update_application_status(
        self, application_id: str, status: str, notes: str | None = None
    ) -> Application | None: ...

    # Job-specific answers projection

    @abstractmethod
    async def record_job_specific_answers(
        self, application: Application, job_title: str, answers: list[str]
    ) -> None: ...

    @abstractmethod
    async def get_job_specific_answers(self) -> JobSpecificAnswerTable: ...

    # Diagnostics

    def state(self) -> str:
        return "ready"

    async def diagnostics(self) -> StorageDiagnostics:
        report = StorageDiagnostics(implementation=self.implementation, state=self.state())
        try:
            jobs = await self.get_all_jobs()
            applications = await self.get_all_applications()
        except StorageUnavailableError as exc:
            report.state = self.state()
            report.error = exc.to_dict()
            return report
        report.state = self.state()
        report.jobs_total = len(jobs)
        report.jobs_active = sum(1 for job in jobs if job.is_active)
        report.applications_total = len(applications)
        return report
