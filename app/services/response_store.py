from __future__ import annotations

import asyncio
import logging

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.datetime_utils import from_unix_ms
from app.core.errors import LocalStoreWriteError
from app.models.response import RecResponse
from app.schemas.response import ResponseRecord

logger = logging.getLogger("intake.response_store")

_write_lock = asyncio.Lock()


async def append(session: AsyncSession, response: RecResponse) -> None:
    async with _write_lock:
        session.add(response)
        try:
            await session.commit()
        except SQLAlchemyError as exc:
            await session.rollback()
            logger.exception("response_write_failed", extra={"response_id": response.response_id})
            raise LocalStoreWriteError(f"could not persist response {response.response_id}: {exc}") from exc


async def list_responses(session: AsyncSession, opening_id: str | None = None, *, limit: int = 200) -> list[RecResponse]:
    query = select(RecResponse)
    if opening_id:
        query = query.where(RecResponse.opening_id == opening_id)
    query = query.order_by(RecResponse.created_at_ms.asc()).limit(limit)
    return list((await session.execute(query)).scalars().all())


def to_record(row: RecResponse) -> ResponseRecord:
    return ResponseRecord(
        id=row.response_id,
        opening_id=row.opening_id,
        opening_title=row.opening_title or "",
        source=row.source,
        full_name=row.full_name,
        email=row.email,
        phone=row.phone,
        college=row.college,
        resume_link=row.resume_link,
        answers=dict(row.answers or {}),
        status=row.status,
        created_at=from_unix_ms(row.created_at_ms),
    )
