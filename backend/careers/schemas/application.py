import re
from datetime import datetime

from pydantic import BaseModel

QUESTION_HEADER = re.compile(r"^Question\d+$")


def is_question_header(header: str) -> bool:
    return QUESTION_HEADER.match(header) is not None


class ApplicationCreate(BaseModel):
    job_id: str
    first_name: str
    last_name: str
    email: str
    phone: str | None = None
    resume_url: str | None = None
    can_travel_to_navi_mumbai: str | None = None
    current_salary: str | None = None
    expected_salary: str | None = None
    why_motor_octane: str | None = None
    job_specific_answers: str | None = None  # JSON object of question -> answer
    notes: str | None = None


class ApplicationStatusUpdate(BaseModel):
    status: str | None = None
    notes: str | None = None


class Application(BaseModel):
    id: str
    job_id: str
    first_name: str
    last_name: str
    email: str
    phone: str | None = None
    resume_url: str | None = None
    can_travel_to_navi_mumbai: str | None = None
    current_salary: str | None = None
    expected_salary: str | None = None
    why_motor_octane: str | None = None
    job_specific_answers: str | None = None
    status: str = "pending"
    notes: str | None = None
    applied_at: datetime
    updated_at: datetime

    @property
    def applicant_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()


class ApplicationSubmitResponse(Application):
    success: bool = True


class JobSpecificAnswerRow(BaseModel):
    application_id: str
    job_title: str
    applicant_name: str
    job_id: str
    answers: list[str] = []


class JobSpecificAnswerTable(BaseModel):
    headers: list[str]
    rows: list[JobSpecificAnswerRow]

    @property
    def question_columns(self) -> int:
        return sum(1 for h in self.headers if is_question_header(h))
