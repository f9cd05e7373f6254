from __future__ import annotations

import logging

from app.db.session import SessionLocal
from app.services.sheet_retry import process_due_rows

logger = logging.getLogger("intake.jobs")


async def run_sheet_row_retries() -> None:
    async with SessionLocal() as session:
        summary = await process_due_rows(session, limit=50)
    if summary["picked"]:
        logger.info("sheet_row_retries_processed", extra=summary)
