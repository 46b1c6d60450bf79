import logging

from fastapi import APIRouter, BackgroundTasks, Depends, File, Form, HTTPException, UploadFile

from careers.config import settings
from careers.dependencies import get_ingestion, get_storage, limit_application_submissions
from careers.errors import UploadValidationError
from careers.schemas.application import (
    Application,
    ApplicationCreate,
    ApplicationStatusUpdate,
    ApplicationSubmitResponse,
    JobSpecificAnswerTable,
)
from careers.services.application_service import ApplicationIngestion
from careers.services.resume_service import ResumeUpload
from careers.storage import IStorage

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/applications", tags=["applications"])


async def _read_upload(file: UploadFile) -> ResumeUpload:
    # Stop reading once past the cap; validation reports the oversize.
    max_bytes = settings.max_upload_bytes
    size = 0
    chunks: list[bytes] = []
    while True:
        chunk = await file.read(1024 * 1024)
        if not chunk:
            break
        size += len(chunk)
        chunks.append(chunk)
        if size > max_bytes:
            break
    return ResumeUpload(filename=file.filename or "", content_type=file.content_type, content=b"".join(chunks))


@router.post(
    "",
    response_model=ApplicationSubmitResponse,
    status_code=201,
    dependencies=[Depends(limit_application_submissions)],
)
async def submit_application(
    background_tasks: BackgroundTasks,
    job_id: str = Form(..., alias="jobId"),
    first_name: str = Form(..., alias="firstName"),
    last_name: str = Form(..., alias="lastName"),
    email: str = Form(...),
    phone: str | None = Form(None),
    can_travel_to_navi_mumbai: str | None = Form(None, alias="canTravelToNaviMumbai"),
    current_salary: str | None = Form(None, alias="currentSalary"),
    expected_salary: str | None = Form(None, alias="expectedSalary"),
    why_motor_octane: str | None = Form(None, alias="whyMotorOctane"),
    job_specific_answers: str | None = Form(None, alias="jobSpecificAnswers"),
    cv: UploadFile | None = File(None),
    ingestion: ApplicationIngestion = Depends(get_ingestion),
):
    data = ApplicationCreate(
        job_id=job_id,
        first_name=first_name,
        last_name=last_name,
        email=email,
        phone=phone,
        can_travel_to_navi_mumbai=can_travel_to_navi_mumbai,
        current_salary=current_salary,
        expected_salary=expected_salary,
        why_motor_octane=why_motor_octane,
        job_specific_answers=job_specific_answers,
    )
    resume = await _read_upload(cv) if cv is not None and cv.filename else None

    try:
        application = await ingestion.submit(data, resume)
    except UploadValidationError as exc:
        raise HTTPException(
            status_code=400,
            detail={"error": "File Security Error", "details": exc.message, "code": exc.code},
        ) from exc

    if application.job_specific_answers:
        background_tasks.add_task(ingestion.project_answers, application)
    return ApplicationSubmitResponse(**application.model_dump())


@router.get("", response_model=list[Application])
async def list_applications(storage: IStorage = Depends(get_storage)):
    return await storage.get_all_applications()


@router.get("/job/{job_id}", response_model=list[Application])
async def list_applications_for_job(job_id: str, storage: IStorage = Depends(get_storage)):
    return await storage.get_applications_for_job(job_id)


@router.get("/answers", response_model=JobSpecificAnswerTable)
async def list_job_specific_answers(storage: IStorage = Depends(get_storage)):
    return await storage.get_job_specific_answers()


@router.get("/{application_id}", response_model=Application)
async def get_application(application_id: str, storage: IStorage = Depends(get_storage)):
    application = await storage.get_application(application_id)
    if not application:
        raise HTTPException(status_code=404, detail="Application not found")
    return application


@router.put("/{application_id}/status", response_model=Application)
async def update_application_status(
    application_id: str, req: ApplicationStatusUpdate, storage: IStorage = Depends(get_storage)
):
    if not req.status:
        raise HTTPException(status_code=400, detail="Status is required")
    application = await storage.update_application_status(application_id, req.status, req.notes)
    if not application:
        raise HTTPException(status_code=404, detail="Application not found")
    logger.info("Application %s moved to %s", application_id, req.status)
    return application
