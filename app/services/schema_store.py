from __future__ import annotations

import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.datetime_utils import utcnow_naive
from app.core.errors import InlineSchemaParseError
from app.models.opening import RecOpening
from app.models.opening_form import RecOpeningForm
from app.schemas.form import CORE_FIELDS, PROTECTED_IDS, Form, FormMeta, Question, parse_schema
from app.services.public_links import build_share_links
from app.services.question_bank import register_questions

logger = logging.getLogger("intake.schema_store")


async def get_opening(session: AsyncSession, opening_id: str) -> RecOpening | None:
    if not opening_id:
        return None
    return await session.get(RecOpening, opening_id)


async def get_schema(session: AsyncSession, opening_id: str) -> list[Question] | None:
    form = await session.get(RecOpeningForm, opening_id)
    if form is None or not form.questions:
        return None
    try:
        return parse_schema(form.questions)
    except InlineSchemaParseError as exc:
        logger.warning("stored_schema_invalid", extra={"opening_id": opening_id, "error": str(exc)})
        return None


async def get_form(session: AsyncSession, opening_id: str) -> Form | None:
    form = await session.get(RecOpeningForm, opening_id)
    if form is None:
        return None
    try:
        questions = parse_schema(form.questions or [])
    except InlineSchemaParseError:
        questions = []
    meta = FormMeta(
        core_fields=form.core_fields or dict(CORE_FIELDS),
        form_id=form.form_id,
        is_published=bool(form.is_published),
        published_at=form.published_at,
        share_links=form.share_links or {},
        generic_link=form.generic_link,
    )
    return Form(opening_id=opening_id, questions=questions, meta=meta)


def _dropped_protected_ids(current: list, incoming: list[Question]) -> set[str]:
    current_ids = {str(item.get("id")) for item in current or [] if isinstance(item, dict)}
    incoming_ids = {q.id for q in incoming}
    return (current_ids & PROTECTED_IDS) - incoming_ids


async def persist_inline_schema(session: AsyncSession, opening_id: str, schema: list[Question]) -> bool:
    """
    Replaces the opening's form questions in one transaction.

    Returns False (and leaves the stored form untouched) when the opening is
    unknown or the schema would drop a protected core question.
    """
    opening = await get_opening(session, opening_id)
    if opening is None:
        logger.info("inline_schema_skipped_unknown_opening", extra={"opening_id": opening_id})
        return False

    try:
        questions = await register_questions(session, schema)
        form = await session.get(RecOpeningForm, opening_id)
        if form is not None:
            dropped = _dropped_protected_ids(form.questions, questions)
            if dropped:
                logger.warning(
                    "inline_schema_rejected",
                    extra={"opening_id": opening_id, "dropped_core_ids": sorted(dropped)},
                )
                await session.rollback()
                return False
            form.questions = [q.to_dict() for q in questions]
            form.updated_at = utcnow_naive()
        else:
            share_links, generic_link = build_share_links(opening)
            session.add(
                RecOpeningForm(
                    opening_id=opening_id,
                    form_id=f"form_{opening_id}",
                    questions=[q.to_dict() for q in questions],
                    core_fields=dict(CORE_FIELDS),
                    share_links=share_links,
                    generic_link=generic_link,
                )
            )
        await session.commit()
    except SQLAlchemyError:
        await session.rollback()
        logger.exception("inline_schema_persist_failed", extra={"opening_id": opening_id})
        return False
    return True
