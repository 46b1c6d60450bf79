"""Fixed-order mapping between domain records and flat sheet rows.

Each record kind has one header list; its order is used both for writing and
for reading. Reads never fail on a short or garbled row: missing trailing
cells fall back to empty values, list cells that are not JSON become ``[]``
and unreadable timestamps become "now".
"""

import json
import logging
from datetime import datetime, timezone
from typing import Any, Callable

from careers.schemas.application import Application, JobSpecificAnswerRow, is_question_header
from careers.schemas.job import Job

logger = logging.getLogger(__name__)

JOB_HEADERS = [
    "ID", "Title", "Department", "Type", "Level", "Location", "Description",
    "Requirements", "ApplicationURL", "IsActive", "CreatedAt", "UpdatedAt",
]

APPLICATION_HEADERS = [
    "ApplicationID", "JobID", "FirstName", "LastName", "Email", "Phone",
    "ResumeURL", "CanTravelToNaviMumbai", "CurrentSalary", "ExpectedSalary",
    "WhyMotorOctane", "JobSpecificAnswers", "Status", "Notes", "AppliedAt", "UpdatedAt",
]

ANSWER_BASE_HEADERS = ["ApplicationID", "JobTitle", "ApplicantName", "JobID"]

TRUE = "TRUE"
FALSE = "FALSE"


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def encode_bool(value: bool) -> str:
    return TRUE if value else FALSE


def decode_bool(value: Any) -> bool:
    # Only the exact upper-case literal counts; "true" or "Yes" read as False.
    return value is True or value == TRUE


def encode_list(values: list[str]) -> str:
    return json.dumps(list(values))


def decode_list(value: Any) -> list[str]:
    if isinstance(value, list):
        return [str(v) for v in value]
    if not value:
        return []
    try:
        parsed = json.loads(value)
    except (TypeError, ValueError):
        return []
    if not isinstance(parsed, list):
        return []
    return [str(v) for v in parsed]


def encode_timestamp(value: datetime) -> str:
    return value.isoformat()


def decode_timestamp(value: Any, clock: Callable[[], datetime] = utc_now) -> datetime:
    if isinstance(value, datetime):
        parsed = value
    else:
        text = str(value or "").strip()
        if not text:
            return clock()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            return clock()
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _cell(row: list, index: int) -> str:
    if index >= len(row) or row[index] is None:
        return ""
    return str(row[index])


def _optional(row: list, index: int) -> str | None:
    return _cell(row, index) or None


def row_id(row: list) -> str:
    return _cell(row, 0)


def job_to_row(job: Job) -> list[str]:
    return [
        job.id,
        job.title,
        job.department,
        job.type,
        job.level or "",
        job.location,
        job.description,
        encode_list(job.requirements),
        job.application_url,
        encode_bool(job.is_active),
        encode_timestamp(job.created_at),
        encode_timestamp(job.updated_at),
    ]


def row_to_job(row: list, clock: Callable[[], datetime] = utc_now) -> Job:
    return Job(
        id=_cell(row, 0),
        title=_cell(row, 1),
        department=_cell(row, 2),
        type=_cell(row, 3),
        level=_optional(row, 4),
        location=_cell(row, 5),
        description=_cell(row, 6),
        requirements=decode_list(row[7] if len(row) > 7 else None),
        application_url=_cell(row, 8),
        is_active=decode_bool(row[9] if len(row) > 9 else None),
        created_at=decode_timestamp(_cell(row, 10), clock),
        updated_at=decode_timestamp(_cell(row, 11), clock),
    )


def application_to_row(application: Application) -> list[str]:
    return [
        application.id,
        application.job_id,
        application.first_name,
        application.last_name,
        application.email,
        application.phone or "",
        application.resume_url or "",
        application.can_travel_to_navi_mumbai or "",
        application.current_salary or "",
        application.expected_salary or "",
        application.why_motor_octane or "",
        application.job_specific_answers or "",
        application.status,
        application.notes or "",
        encode_timestamp(application.applied_at),
        encode_timestamp(application.updated_at),
    ]


def row_to_application(row: list, clock: Callable[[], datetime] = utc_now) -> Application:
    return Application(
        id=_cell(row, 0),
        job_id=_cell(row, 1),
        first_name=_cell(row, 2),
        last_name=_cell(row, 3),
        email=_cell(row, 4),
        phone=_optional(row, 5),
        resume_url=_optional(row, 6),
        can_travel_to_navi_mumbai=_optional(row, 7),
        current_salary=_optional(row, 8),
        expected_salary=_optional(row, 9),
        why_motor_octane=_optional(row, 10),
        job_specific_answers=_optional(row, 11),
        status=_cell(row, 12) or "pending",
        notes=_optional(row, 13),
        applied_at=decode_timestamp(_cell(row, 14), clock),
        updated_at=decode_timestamp(_cell(row, 15), clock),
    )


def decode_rows(rows: list[list], decoder: Callable[[list], Any], region: str) -> list[tuple[int, Any]]:
    """Decode data rows, returning ``(sheet_row_number, record)`` pairs.

    ``rows`` starts at sheet row 2. Blank rows and rows that fail to decode
    are skipped so one bad row cannot hide the rest of the table.
    """
    records = []
    for offset, row in enumerate(rows):
        if not row or not row_id(row):
            continue
        try:
            records.append((offset + 2, decoder(row)))
        except ValueError as exc:
            logger.warning("Skipping unreadable %s row %d: %s", region, offset + 2, exc)
    return records


def answers_row(headers: list[str], application: Application, job_title: str, answers: list[str]) -> list[str]:
    row = [""] * len(headers)
    values = {
        "ApplicationID": application.id,
        "JobTitle": job_title,
        "ApplicantName": application.applicant_name,
        "JobID": application.job_id,
    }
    for slot, answer in enumerate(answers, start=1):
        values[f"Question{slot}"] = answer
    for index, header in enumerate(headers):
        if header in values:
            row[index] = values[header]
    return row


def row_to_answers(headers: list[str], row: list) -> JobSpecificAnswerRow:
    cells = {header: _cell(row, index) for index, header in enumerate(headers)}
    answers = [cells[h] for h in headers if is_question_header(h)]
    while answers and not answers[-1]:
        answers.pop()
    return JobSpecificAnswerRow(
        application_id=cells.get("ApplicationID", ""),
        job_title=cells.get("JobTitle", ""),
        applicant_name=cells.get("ApplicantName", ""),
        job_id=cells.get("JobID", ""),
        answers=answers,
    )
