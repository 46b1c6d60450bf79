import hashlib
import re
from pathlib import Path

from careers.config import settings


def ensure_uploads_dir(uploads_dir: Path | None = None) -> Path:
    path = uploads_dir or settings.uploads_dir
    path.mkdir(parents=True, exist_ok=True)
    return path


def sanitize_name_part(name: str, fallback: str) -> str:
    cleaned = re.sub(r"[^A-Za-z0-9]", "_", name or "").strip("_")
    return cleaned or fallback


def resume_filename(first_name: str, last_name: str, content: bytes, extension: str) -> str:
    """``CV_<First>_<Last>_<hash8><ext>``; the same file from the same person maps to the same name."""
    digest = hashlib.sha256(content).hexdigest()[:8]
    return (
        f"CV_{sanitize_name_part(first_name, 'First')}_{sanitize_name_part(last_name, 'Last')}"
        f"_{digest}{extension}"
    )
