import os
from typing import Literal

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from app.core.paths import resolve_repo_path


def _env_files() -> list[str]:
    env = os.getenv("INTAKE_ENVIRONMENT", "").strip().lower()
    files = [str(resolve_repo_path(".env"))]
    if env and env != "development":
        files.append(str(resolve_repo_path(f".env.{env}")))
    else:
        files.append(str(resolve_repo_path(".env.local")))
    return files


class Settings(BaseSettings):
    app_name: str = "Recruit Intake"
    environment: str = "development"

    database_url: str = "sqlite+aiosqlite:///./data/intake.db"

    google_application_credentials: str = Field(
        default="",
        validation_alias=AliasChoices(
            "INTAKE_GOOGLE_APPLICATION_CREDENTIALS",
            "GOOGLE_SERVICE_ACCOUNT_FILE",
            "GOOGLE_APPLICATION_CREDENTIALS",
        ),
    )
    google_service_account_json: str = Field(
        default="",
        validation_alias=AliasChoices("INTAKE_GOOGLE_SERVICE_ACCOUNT_JSON", "GOOGLE_SERVICE_ACCOUNT_JSON"),
    )

    drive_folder_id: str = Field(
        default="",
        validation_alias=AliasChoices("INTAKE_DRIVE_FOLDER_ID", "DRIVE_FOLDER_ID", "GOOGLE_DRIVE_FOLDER_ID"),
    )
    sheet_id: str = Field(
        default="",
        validation_alias=AliasChoices("INTAKE_SHEET_ID", "SHEET_ID", "GOOGLE_SHEET_ID"),
    )

    upload_dir: str = "data/uploads"
    max_resume_bytes: int = 25 * 1024 * 1024

    inline_schema_mode: Literal["persist", "override", "ignore"] = "persist"

    public_app_origin: str = ""
    apply_rate_limit_per_min: int = 30

    sheet_retry_enabled: bool = True
    sheet_retry_interval_minutes: int = 5
    sheet_retry_max_attempts: int = 5

    model_config = SettingsConfigDict(
        env_prefix="INTAKE_",
        env_file=_env_files(),
        extra="ignore",
        populate_by_name=True,
    )


settings = Settings()
