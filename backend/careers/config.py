from pathlib import Path

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # The Google secrets keep their conventional names so existing deployments work unchanged.
    google_sheet_id: str | None = Field(
        default=None,
        validation_alias=AliasChoices("GOOGLE_SHEET_ID", "CAREERS_GOOGLE_SHEET_ID"),
    )
    google_service_account_email: str | None = Field(
        default=None,
        validation_alias=AliasChoices("GOOGLE_SERVICE_ACCOUNT_EMAIL", "CAREERS_GOOGLE_SERVICE_ACCOUNT_EMAIL"),
    )
    google_private_key: str | None = Field(
        default=None,
        validation_alias=AliasChoices("GOOGLE_PRIVATE_KEY", "CAREERS_GOOGLE_PRIVATE_KEY"),
    )

    environment: str = "development"
    log_level: str = "INFO"
    api_prefix: str = "/api"
    host: str = "127.0.0.1"
    port: int = 8000
    cors_origins: list[str] = ["http://127.0.0.1:5173", "http://localhost:5173"]

    uploads_dir: Path = Path(__file__).resolve().parent.parent / "uploads"
    max_upload_bytes: int = 5 * 1024 * 1024  # 5 MiB

    # Per client address, applied to the submission endpoint only.
    rate_limit_max_submissions: int = 5
    rate_limit_window_seconds: int = 15 * 60

    seed_sample_jobs: bool = True
    answers_initial_question_columns: int = 8
    answers_projection_attempts: int = 3
    answers_projection_backoff_seconds: float = 0.5

    @property
    def is_production(self) -> bool:
        return self.environment.lower() == "production"

    @property
    def rate_limit_enabled(self) -> bool:
        return self.environment.lower() != "development"

    model_config = {"env_prefix": "CAREERS_", "populate_by_name": True}


settings = Settings()
