from pydantic import BaseModel


class StorageDiagnostics(BaseModel):
    implementation: str
    state: str
    jobs_total: int | None = None
    jobs_active: int | None = None
    applications_total: int | None = None
    error: dict | None = None


class CredentialPresence(BaseModel):
    google_sheet_id: bool
    google_service_account_email: bool
    google_private_key: bool


class HealthResponse(BaseModel):
    status: str
    timestamp: str
    environment: str
    storage: StorageDiagnostics
    credentials: CredentialPresence


class DebugResponse(HealthResponse):
    spreadsheet_id_preview: str | None = None
    recommendations: list[str] = []
