from datetime import datetime, timezone

from fastapi import APIRouter, Depends, HTTPException

from careers.config import settings
from careers.dependencies import get_storage
from careers.schemas.health import CredentialPresence, DebugResponse, HealthResponse
from careers.storage import IStorage, credential_presence
from careers.utils.credentials import BEGIN_MARKER, END_MARKER

router = APIRouter(tags=["health"])


async def _health(storage: IStorage) -> HealthResponse:
    diagnostics = await storage.diagnostics()
    return HealthResponse(
        status="degraded" if diagnostics.error else "ok",
        timestamp=datetime.now(timezone.utc).isoformat(),
        environment=settings.environment,
        storage=diagnostics,
        credentials=CredentialPresence(**credential_presence(settings)),
    )


def _recommendations(report: HealthResponse) -> list[str]:
    tips = []
    presence = report.credentials
    if not presence.google_sheet_id:
        tips.append("GOOGLE_SHEET_ID is missing; set it in the deployment environment.")
    if not presence.google_service_account_email:
        tips.append("GOOGLE_SERVICE_ACCOUNT_EMAIL is missing; set it in the deployment environment.")
    if not presence.google_private_key:
        tips.append("GOOGLE_PRIVATE_KEY is missing; set it in the deployment environment.")
    elif BEGIN_MARKER not in settings.google_private_key or END_MARKER not in settings.google_private_key:
        tips.append("GOOGLE_PRIVATE_KEY does not look like a PEM key; it must include the BEGIN and END markers.")
    if report.storage.implementation == "memory":
        tips.append("Memory storage is in use; data is lost on restart.")
    if report.storage.error:
        tips.append(report.storage.error.get("hint") or f"Storage check failed: {report.storage.error['message']}")
    return tips


@router.get("/health", response_model=HealthResponse)
async def health(storage: IStorage = Depends(get_storage)):
    return await _health(storage)


@router.get("/debug/storage", response_model=DebugResponse)
async def debug_storage(storage: IStorage = Depends(get_storage)):
    if settings.is_production:
        raise HTTPException(status_code=404, detail="Not found")

    report = await _health(storage)
    sheet_id = (settings.google_sheet_id or "").strip()
    return DebugResponse(
        **report.model_dump(),
        spreadsheet_id_preview=f"{sheet_id[:8]}..." if sheet_id else None,
        recommendations=_recommendations(report),
    )
