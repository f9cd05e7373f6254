from __future__ import annotations

from datetime import timedelta
import logging

import anyio
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.datetime_utils import utcnow_naive
from app.models.sheet_row_retry import RecSheetRowRetry
from app.services import sheets

logger = logging.getLogger("intake.sheet_retry")

STATUS_PENDING = "pending"
STATUS_FAILED = "failed"
STATUS_SUCCEEDED = "succeeded"
STATUS_DEAD = "dead"

BASE_RETRY_SECONDS = 60
MAX_RETRY_SECONDS = 60 * 60


def retry_delay_seconds(attempt_number: int) -> int:
    # attempt_number starts at 1 (first failed retry).
    attempt = max(int(attempt_number), 1)
    delay = BASE_RETRY_SECONDS * (2 ** (attempt - 1))
    return min(delay, MAX_RETRY_SECONDS)


async def enqueue_row(
    session: AsyncSession,
    *,
    spreadsheet_id: str,
    range_name: str,
    values: list[str],
    response_id: str | None = None,
) -> RecSheetRowRetry:
    now = utcnow_naive()
    row = RecSheetRowRetry(
        status=STATUS_PENDING,
        response_id=response_id,
        spreadsheet_id=spreadsheet_id,
        range_name=range_name,
        row_values=list(values),
        attempts=0,
        max_attempts=max(settings.sheet_retry_max_attempts, 1),
        next_retry_at=now,
        created_at=now,
        updated_at=now,
    )
    session.add(row)
    await session.commit()
    logger.info(
        "sheet_row_enqueued",
        extra={"sheet_row_retry_id": row.sheet_row_retry_id, "response_id": response_id, "range": range_name},
    )
    return row


async def process_due_rows(session: AsyncSession, *, limit: int = 50) -> dict[str, int]:
    now = utcnow_naive()
    rows = (
        await session.execute(
            select(RecSheetRowRetry)
            .where(
                RecSheetRowRetry.status.in_([STATUS_PENDING, STATUS_FAILED]),
                RecSheetRowRetry.next_retry_at <= now,
                RecSheetRowRetry.attempts < RecSheetRowRetry.max_attempts,
            )
            .order_by(RecSheetRowRetry.next_retry_at.asc(), RecSheetRowRetry.sheet_row_retry_id.asc())
            .limit(limit)
        )
    ).scalars().all()

    summary = {"picked": len(rows), "succeeded": 0, "failed": 0, "dead": 0}

    for row in rows:
        spreadsheet_id = row.spreadsheet_id
        range_name = row.range_name
        values = list(row.row_values or [])
        try:
            await anyio.to_thread.run_sync(sheets.append_values, spreadsheet_id, range_name, values)
            row.attempts += 1
            row.status = STATUS_SUCCEEDED
            row.last_error = None
            row.completed_at = utcnow_naive()
            row.updated_at = row.completed_at
            summary["succeeded"] += 1
        except Exception as exc:  # noqa: BLE001
            row.attempts += 1
            row.last_error = str(exc)[:2000]
            row.updated_at = utcnow_naive()
            if row.attempts >= row.max_attempts:
                row.status = STATUS_DEAD
                row.completed_at = row.updated_at
                summary["dead"] += 1
                logger.error(
                    "sheet_row_dead",
                    extra={"sheet_row_retry_id": row.sheet_row_retry_id, "error": row.last_error},
                )
            else:
                row.status = STATUS_FAILED
                row.next_retry_at = row.updated_at + timedelta(seconds=retry_delay_seconds(row.attempts))
                summary["failed"] += 1

        await session.commit()

    return summary
