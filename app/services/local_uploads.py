from __future__ import annotations

from pathlib import Path
from urllib.parse import quote

from app.core.config import settings
from app.core.paths import resolve_repo_path
from app.core.uploads import sanitize_filename

UPLOADS_MOUNT = "/uploads"


def upload_root() -> Path:
    return resolve_repo_path(settings.upload_dir)


def save_upload(data: bytes, filename: str, *, base_url: str) -> str:
    """
    Writes the buffer under the uploads directory and returns the URL the
    static /uploads route serves it from. Blocking.
    """
    directory = upload_root()
    directory.mkdir(parents=True, exist_ok=True)

    stored_name = sanitize_filename(filename, default="resume")
    target = directory / stored_name
    target.write_bytes(data)

    return f"{base_url.rstrip('/')}{UPLOADS_MOUNT}/{quote(stored_name)}"
