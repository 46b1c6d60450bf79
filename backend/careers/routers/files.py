import mimetypes

from fastapi import APIRouter, HTTPException, Request
from fastapi.responses import FileResponse

from careers.services.resume_service import STORED_FILENAME

router = APIRouter(prefix="/files", tags=["files"])


@router.get("/{filename}")
async def download_resume(filename: str, request: Request):
    if not STORED_FILENAME.match(filename):
        raise HTTPException(status_code=400, detail="Invalid filename format")

    path = request.app.state.resume_store.resolve(filename)
    if path is None:
        raise HTTPException(status_code=404, detail="File not found")

    media_type, _ = mimetypes.guess_type(filename)
    return FileResponse(
        path=str(path),
        filename=filename,
        media_type=media_type or "application/octet-stream",
    )
