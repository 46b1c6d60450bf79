from fastapi import APIRouter, Depends, HTTPException, Response

from careers.dependencies import get_storage
from careers.schemas.job import Job, JobCreate, JobUpdate
from careers.storage import IStorage

router = APIRouter(prefix="/jobs", tags=["jobs"])


@router.get("", response_model=list[Job])
async def list_jobs(storage: IStorage = Depends(get_storage)):
    return await storage.get_active_jobs()


@router.get("/search", response_model=list[Job])
async def search_jobs(keyword: str | None = None, storage: IStorage = Depends(get_storage)):
    if not keyword or not keyword.strip():
        raise HTTPException(status_code=400, detail="Search keyword is required")
    return await storage.search_jobs(keyword.strip())


@router.get("/{job_id}", response_model=Job)
async def get_job(job_id: str, storage: IStorage = Depends(get_storage)):
    job = await storage.get_job(job_id)
    if not job:
        raise HTTPException(status_code=404, detail="Job not found")
    return job


@router.post("", response_model=Job, status_code=201)
async def create_job(req: JobCreate, storage: IStorage = Depends(get_storage)):
    return await storage.create_job(req)


@router.put("/{job_id}", response_model=Job)
async def update_job(job_id: str, req: JobUpdate, storage: IStorage = Depends(get_storage)):
    job = await storage.update_job(job_id, req)
    if not job:
        raise HTTPException(status_code=404, detail="Job not found")
    return job


@router.delete("/{job_id}", status_code=204)
async def delete_job(job_id: str, storage: IStorage = Depends(get_storage)):
    # Soft delete: the row stays in the sheet with IsActive = FALSE.
    if not await storage.delete_job(job_id):
        raise HTTPException(status_code=404, detail="Job not found")
    return Response(status_code=204)
