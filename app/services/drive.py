from __future__ import annotations

import io
import logging

from googleapiclient.http import MediaIoBaseUpload

from app.core.config import settings
from app.core.errors import ObjectStoreConfigError, ObjectStoreUploadError
from app.services import google_clients

logger = logging.getLogger("intake.drive")

DRIVE_BASE_URL = "https://drive.google.com"


def _file_url(file_id: str) -> str:
    return f"{DRIVE_BASE_URL}/file/d/{file_id}/view"


def _grant_anyone_reader(service, file_id: str) -> None:
    try:
        service.permissions().create(
            fileId=file_id,
            body={"role": "reader", "type": "anyone"},
            supportsAllDrives=True,
        ).execute()
    except Exception as exc:  # noqa: BLE001
        logger.warning("drive_permission_failed", extra={"file_id": file_id, "error": str(exc)})


def _view_link(service, file_id: str) -> str:
    try:
        meta = service.files().get(fileId=file_id, fields="id,webViewLink", supportsAllDrives=True).execute()
    except Exception as exc:  # noqa: BLE001
        logger.warning("drive_metadata_failed", extra={"file_id": file_id, "error": str(exc)})
        return _file_url(file_id)
    return (meta or {}).get("webViewLink") or _file_url(file_id)


def upload_resume(data: bytes, filename: str, content_type: str | None = None) -> str:
    """
    Uploads a resume into the configured Drive folder and returns a view URL.
    Blocking; call through anyio.to_thread.run_sync.
    """
    folder_id = (settings.drive_folder_id or "").strip()
    if not folder_id:
        raise ObjectStoreConfigError("Missing DRIVE_FOLDER_ID")

    try:
        service = google_clients.get_drive_client()
        media = MediaIoBaseUpload(io.BytesIO(data), mimetype=content_type or "application/octet-stream", resumable=False)
        created = (
            service.files()
            .create(
                body={"name": filename, "parents": [folder_id]},
                media_body=media,
                fields="id",
                supportsAllDrives=True,
            )
            .execute()
        )
        file_id = created["id"]
    except Exception as exc:  # noqa: BLE001
        raise ObjectStoreUploadError(f"Drive upload failed: {exc}") from exc

    _grant_anyone_reader(service, file_id)
    return _view_link(service, file_id)
