from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
import logging
from typing import Any

import anyio
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.datetime_utils import from_unix_ms, iso_utc, unix_ms
from app.core.errors import BadRequest, InlineSchemaParseError
from app.core.uploads import ResumeFile
from app.models.response import RecResponse
from app.schemas.form import Question, parse_inline_schema
from app.services import drive, local_uploads, response_store, schema_store, sheet_retry, sheets
from app.services.answer_mapping import (
    collect_answers,
    generic_row,
    metadata_prefix,
    mirror_core_fields,
    schema_row,
)

logger = logging.getLogger("intake.pipeline")

DEFAULT_SOURCE = "unknown"
INITIAL_STATUS = "Applied"


@dataclass(frozen=True)
class IntakeResult:
    response_id: str
    resume_link: str | None


def _text(value: Any) -> str:
    if isinstance(value, list):
        value = value[0] if value else ""
    return str(value or "").strip()


def _first_present(*values: Any) -> str:
    for value in values:
        text = _text(value)
        if text:
            return text
    return ""


def _inline_schema(fields: Mapping[str, Any]) -> list[Question] | None:
    raw = fields.get("_schema")
    if raw is None or settings.inline_schema_mode == "ignore":
        return None
    try:
        return parse_inline_schema(_text(raw))
    except InlineSchemaParseError as exc:
        logger.warning("inline_schema_ignored", extra={"error": str(exc)})
        return None


async def _store_resume(resume: ResumeFile, *, base_url: str) -> str | None:
    filename = f"{unix_ms()}_{resume.filename or 'resume'}"
    try:
        return await anyio.to_thread.run_sync(drive.upload_resume, resume.data, filename, resume.content_type)
    except Exception as exc:  # noqa: BLE001
        logger.warning("resume_upload_failed", extra={"upload_name": filename, "error": str(exc)})

    try:
        return await anyio.to_thread.run_sync(
            lambda: local_uploads.save_upload(resume.data, filename, base_url=base_url)
        )
    except Exception:  # noqa: BLE001
        logger.exception("resume_local_fallback_failed", extra={"upload_name": filename})
        return None


async def _enqueue_generic_retry(session: AsyncSession, spreadsheet_id: str, row: list[str], response_id: str) -> None:
    if not settings.sheet_retry_enabled:
        return
    try:
        await sheet_retry.enqueue_row(
            session,
            spreadsheet_id=spreadsheet_id,
            range_name=sheets.GENERIC_RANGE,
            values=row,
            response_id=response_id,
        )
    except SQLAlchemyError:
        await session.rollback()
        logger.exception("sheet_retry_enqueue_failed", extra={"response_id": response_id})


async def _mirror_to_spreadsheet(
    session: AsyncSession,
    *,
    response_id: str,
    tab_title: str,
    schema: list[Question] | None,
    prefix: list[str],
    answers: dict[str, Any],
) -> None:
    spreadsheet_id = (settings.sheet_id or "").strip()
    if not spreadsheet_id:
        return

    if schema:
        try:
            await anyio.to_thread.run_sync(sheets.ensure_tab_with_headers, spreadsheet_id, tab_title, schema)
            await anyio.to_thread.run_sync(
                sheets.append_row, spreadsheet_id, tab_title, schema_row(prefix, schema, answers)
            )
            return
        except Exception as exc:  # noqa: BLE001
            logger.warning(
                "sheet_schema_path_failed",
                extra={"response_id": response_id, "tab": tab_title, "error": str(exc)},
            )

    row = generic_row(prefix, answers)
    try:
        await anyio.to_thread.run_sync(sheets.append_generic, spreadsheet_id, row)
    except Exception as exc:  # noqa: BLE001
        logger.warning("sheet_generic_append_failed", extra={"response_id": response_id, "error": str(exc)})
        await _enqueue_generic_retry(session, spreadsheet_id, row, response_id)


async def run_intake(
    session: AsyncSession,
    *,
    fields: Mapping[str, Any],
    resume: ResumeFile | None,
    query: Mapping[str, Any],
    base_url: str,
) -> IntakeResult:
    """
    One pass of the application intake: resolve the opening, store the resume,
    persist the response, then mirror it to the spreadsheet.

    Everything before the local write is best-effort; the local write is the
    only failure surfaced to the caller. Spreadsheet failures after it are logged.
    """
    opening_id = _first_present(query.get("opening"), fields.get("opening"))
    if not opening_id:
        raise BadRequest("missing opening id")
    source = (
        _first_present(query.get("src"), query.get("source"), fields.get("src"))
        or DEFAULT_SOURCE
    )

    opening = await schema_store.get_opening(session, opening_id)
    opening_found = opening is not None
    opening_title = (opening.title or "") if opening is not None else ""

    inline_schema = _inline_schema(fields)
    persisted = False
    if inline_schema is not None and settings.inline_schema_mode == "persist":
        persisted = await schema_store.persist_inline_schema(session, opening_id, inline_schema)

    if inline_schema is not None and settings.inline_schema_mode == "override":
        schema = inline_schema
    else:
        schema = await schema_store.get_schema(session, opening_id) or inline_schema

    resume_link = await _store_resume(resume, base_url=base_url) if resume is not None else None

    answers = collect_answers(dict(fields))

    created_ms = unix_ms()
    created_at = from_unix_ms(created_ms)
    response_id = f"resp_{created_ms}"
    mirrored = mirror_core_fields(answers)
    await response_store.append(
        session,
        RecResponse(
            response_id=response_id,
            opening_id=opening_id,
            opening_title=opening_title,
            source=source,
            full_name=mirrored["full_name"],
            email=mirrored["email"],
            phone=mirrored["phone"],
            college=mirrored["college"],
            resume_link=resume_link,
            answers=answers,
            status=INITIAL_STATUS,
            created_at=created_at.replace(tzinfo=None),
            created_at_ms=created_ms,
        ),
    )
    logger.info(
        "response_persisted",
        extra={
            "response_id": response_id,
            "opening_id": opening_id,
            "source": source,
            "has_resume": resume_link is not None,
            "inline_schema_persisted": persisted,
        },
    )

    prefix = metadata_prefix(
        created_at=iso_utc(created_at),
        opening_id=opening_id,
        opening_title=opening_title,
        source=source,
        resume_link=resume_link,
    )
    await _mirror_to_spreadsheet(
        session,
        response_id=response_id,
        tab_title=opening_id if opening_found else f"opening_{opening_id}",
        schema=schema,
        prefix=prefix,
        answers=answers,
    )

    return IntakeResult(response_id=response_id, resume_link=resume_link)
