from __future__ import annotations

from dataclasses import dataclass
import re
from pathlib import Path

from starlette.datastructures import UploadFile
from starlette.requests import Request

from app.core.config import settings
from app.core.errors import PayloadTooLarge

RESUME_FIELD = "resume"
MAX_FILENAME_LENGTH = 150

_SAFE_NAME_RE = re.compile(r"[^A-Za-z0-9._-]+")

FormFields = dict[str, str | list[str]]


@dataclass(frozen=True)
class ResumeFile:
    filename: str
    content_type: str
    data: bytes


def sanitize_filename(raw: str | None, *, default: str = "file") -> str:
    name = (raw or "").strip() or default
    name = name.replace("/", "_").replace("\\", "_")
    name = _SAFE_NAME_RE.sub("_", name).strip("._") or default

    if len(name) > MAX_FILENAME_LENGTH:
        base, ext = _split_name_ext(name)
        keep = max(1, MAX_FILENAME_LENGTH - len(ext))
        name = f"{base[:keep]}{ext}"
    return name


def _split_name_ext(name: str) -> tuple[str, str]:
    ext = Path(name).suffix
    if ext:
        return name[: -len(ext)], ext
    return name, ""


async def _read_limited(upload: UploadFile, max_bytes: int) -> bytes:
    data = await upload.read(max_bytes + 1)
    if len(data) > max_bytes:
        raise PayloadTooLarge(f"Resume too large. Max allowed is {max_bytes // (1024 * 1024)}MB.")
    return data


async def read_intake_form(request: Request) -> tuple[FormFields, ResumeFile | None]:
    """
    Reads a multipart (or urlencoded) body into a flat field mapping plus the
    buffered `resume` file part. Repeated keys collect into a list in arrival
    order; file parts other than `resume` are dropped.
    """
    form = await request.form()
    fields: FormFields = {}
    resume: ResumeFile | None = None
    try:
        for key, value in form.multi_items():
            if isinstance(value, UploadFile):
                if key == RESUME_FIELD and resume is None and (value.filename or "").strip():
                    data = await _read_limited(value, settings.max_resume_bytes)
                    resume = ResumeFile(
                        filename=value.filename or "",
                        content_type=value.content_type or "application/octet-stream",
                        data=data,
                    )
                continue
            existing = fields.get(key)
            if existing is None:
                fields[key] = value
            elif isinstance(existing, list):
                existing.append(value)
            else:
                fields[key] = [existing, value]
    finally:
        await form.close()
    return fields, resume
