from __future__ import annotations

import logging
import random

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.datetime_utils import unix_ms
from app.models.question import RecQuestion
from app.schemas.form import CORE_QUESTIONS, Question

logger = logging.getLogger("intake.question_bank")


def question_signature(question: Question) -> str:
    options = "|".join(question.options or [])
    return f"{question.type}||{question.label.strip()}||{options}||{1 if question.required else 0}"


def _new_question_id() -> str:
    return f"q_{unix_ms()}_{random.randint(0, 9999)}"


def _bank_entry(question_id: str, question: Question, signature: str) -> RecQuestion:
    return RecQuestion(
        question_id=question_id,
        signature=signature,
        type=question.type,
        label=question.label,
        required=question.required,
        options=list(question.options or []),
        validation=question.validation.model_dump(by_alias=True, exclude_none=True) if question.validation else None,
    )


async def register_questions(session: AsyncSession, questions: list[Question]) -> list[Question]:
    """
    Ensures every question exists in the bank and has a stable id.

    Questions without an id reuse the id of a bank entry with the same signature,
    or get a new one. Does not commit.
    """
    resolved: list[Question] = []
    used: set[str] = {q.id for q in questions if q.id}
    for question in questions:
        signature = question_signature(question)
        if question.id:
            existing = await session.get(RecQuestion, question.id)
            if existing is None:
                session.add(_bank_entry(question.id, question, signature))
                await session.flush()
            resolved.append(question)
            continue

        match = (
            await session.execute(select(RecQuestion).where(RecQuestion.signature == signature).limit(1))
        ).scalars().first()
        if match is not None and match.question_id not in used:
            question_id = match.question_id
        else:
            question_id = _new_question_id()
            session.add(_bank_entry(question_id, question, signature))
            await session.flush()
            logger.info("question_registered", extra={"question_id": question_id})
        used.add(question_id)
        resolved.append(question.model_copy(update={"id": question_id}))
    return resolved


async def seed_core_questions(session: AsyncSession) -> None:
    await register_questions(session, CORE_QUESTIONS)
    await session.commit()
