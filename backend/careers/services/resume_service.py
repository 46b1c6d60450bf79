import logging
import re
from dataclasses import dataclass
from pathlib import Path

from careers.errors import UploadValidationError
from careers.utils.filesystem import ensure_uploads_dir, resume_filename

logger = logging.getLogger(__name__)

ALLOWED_MIME_TYPES = {
    "application/pdf",
    "application/msword",
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
}
ALLOWED_EXTENSIONS = {".pdf", ".doc", ".docx"}
SAFE_FILENAME = re.compile(r"^[a-zA-Z0-9._\-\s]+$")
SUSPICIOUS_FILENAME = re.compile(r"\.(exe|bat|cmd|com|scr|pif|vbs|js|jar|zip|rar)$", re.IGNORECASE)
STORED_FILENAME = re.compile(r"^CV_[a-zA-Z0-9_]+\.(pdf|doc|docx)$", re.IGNORECASE)

REASON_MESSAGES = {
    "FILE_TOO_LARGE": "CV file must be under {limit_mb} MB.",
    "EMPTY_FILE": "The uploaded CV file is empty.",
    "SECURITY_SUSPICIOUS": "File blocked for security reasons. Please upload a standard CV document.",
    "SECURITY_FILE_TYPE": "Invalid file type. Please upload only PDF or Word documents (.pdf, .doc, .docx).",
    "SECURITY_FILE_EXT": "Invalid file extension. Please ensure your file ends with .pdf, .doc, or .docx.",
    "SECURITY_FILENAME": "Invalid filename. Please rename your file using only letters, numbers, and basic punctuation.",
}


@dataclass
class ResumeUpload:
    filename: str
    content_type: str | None
    content: bytes


def _reject(code: str, upload_name: str, **fmt) -> UploadValidationError:
    logger.warning("Rejected resume upload %r: %s", upload_name, code)
    return UploadValidationError(code, REASON_MESSAGES[code].format(**fmt))


def validate_resume(filename: str, content_type: str | None, size: int, max_bytes: int) -> None:
    """Raise ``UploadValidationError`` with a distinct code for each kind of bad upload."""
    if size > max_bytes:
        raise _reject("FILE_TOO_LARGE", filename, limit_mb=max_bytes // (1024 * 1024))
    if size == 0:
        raise _reject("EMPTY_FILE", filename)
    if SUSPICIOUS_FILENAME.search(filename or ""):
        raise _reject("SECURITY_SUSPICIOUS", filename)
    if (content_type or "").lower() not in ALLOWED_MIME_TYPES:
        raise _reject("SECURITY_FILE_TYPE", filename)
    if Path(filename or "").suffix.lower() not in ALLOWED_EXTENSIONS:
        raise _reject("SECURITY_FILE_EXT", filename)
    if not SAFE_FILENAME.match(filename or ""):
        raise _reject("SECURITY_FILENAME", filename)


class ResumeStore:
    def __init__(self, uploads_dir: Path, url_prefix: str = "/api/files"):
        self.uploads_dir = uploads_dir
        self.url_prefix = url_prefix

    def store(self, upload: ResumeUpload, first_name: str, last_name: str) -> str:
        """Write a validated resume to disk. Returns the URL it is served from."""
        extension = Path(upload.filename).suffix.lower()
        stored_name = resume_filename(first_name, last_name, upload.content, extension)
        ensure_uploads_dir(self.uploads_dir)
        (self.uploads_dir / stored_name).write_bytes(upload.content)
        logger.info("Stored resume %s (%d bytes)", stored_name, len(upload.content))
        return f"{self.url_prefix}/{stored_name}"

    def resolve(self, stored_name: str) -> Path | None:
        if not STORED_FILENAME.match(stored_name):
            return None
        path = self.uploads_dir / stored_name
        return path if path.is_file() else None
