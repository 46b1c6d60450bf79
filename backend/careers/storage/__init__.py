import logging

from careers.config import Settings
from careers.errors import CredentialMissingError
from careers.storage.base import IStorage
from careers.storage.memory import MemoryStorage
from careers.storage.sheets import SheetsStorage

logger = logging.getLogger(__name__)

REQUIRED_CREDENTIALS = {
    "GOOGLE_SHEET_ID": "google_sheet_id",
    "GOOGLE_SERVICE_ACCOUNT_EMAIL": "google_service_account_email",
    "GOOGLE_PRIVATE_KEY": "google_private_key",
}


def credential_presence(settings: Settings) -> dict[str, bool]:
    return {
        field: bool((getattr(settings, field) or "").strip())
        for field in REQUIRED_CREDENTIALS.values()
    }


def require_credentials(settings: Settings) -> None:
    presence = credential_presence(settings)
    missing = [env for env, field in REQUIRED_CREDENTIALS.items() if not presence[field]]
    if missing:
        raise CredentialMissingError(missing)


def create_storage(settings: Settings) -> IStorage:
    """Pick the storage backend once, at startup.

    Google Sheets is used only when all three credentials are set; otherwise
    the portal runs on memory storage and loses its data on restart.
    """
    try:
        require_credentials(settings)
    except CredentialMissingError as exc:
        logger.warning("Using memory storage; missing credentials: %s", ", ".join(exc.missing))
        return MemoryStorage(initial_question_columns=settings.answers_initial_question_columns)

    logger.info("Using Google Sheets storage")
    return SheetsStorage(
        spreadsheet_id=settings.google_sheet_id.strip(),
        service_account_email=settings.google_service_account_email.strip(),
        private_key=settings.google_private_key,
        seed_sample_jobs=settings.seed_sample_jobs,
        initial_question_columns=settings.answers_initial_question_columns,
    )


__all__ = [
    "IStorage",
    "MemoryStorage",
    "SheetsStorage",
    "create_storage",
    "credential_presence",
    "require_credentials",
]
