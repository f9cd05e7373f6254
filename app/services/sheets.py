from __future__ import annotations

import logging
import re

from app.core.errors import SpreadsheetAppendError, SpreadsheetEnsureError
from app.schemas.form import Question
from app.services import google_clients

logger = logging.getLogger("intake.sheets")

GENERIC_RANGE = "Sheet1!A:Z"
MAX_TAB_TITLE_LENGTH = 90
DEFAULT_TAB_TITLE = "sheet"
METADATA_HEADERS = ["Timestamp", "OpeningId", "OpeningTitle", "Source", "ResumeLink"]

_ILLEGAL_TAB_CHARS_RE = re.compile(r"[\\/?*\[\]:]")


def sanitize_tab_title(title: str | None) -> str:
    cleaned = _ILLEGAL_TAB_CHARS_RE.sub("", title or "").strip()
    cleaned = cleaned[:MAX_TAB_TITLE_LENGTH].strip()
    return cleaned or DEFAULT_TAB_TITLE


def tab_range(tab_title: str, cell: str = "A1") -> str:
    escaped = tab_title.replace("'", "''")
    return f"'{escaped}'!{cell}"


def build_headers(schema: list[Question]) -> list[str]:
    return METADATA_HEADERS + [q.header_label for q in schema]


def _existing_tab_titles(service, spreadsheet_id: str) -> set[str]:
    meta = service.spreadsheets().get(spreadsheetId=spreadsheet_id, fields="sheets.properties.title").execute()
    return {
        (sheet.get("properties") or {}).get("title")
        for sheet in (meta or {}).get("sheets", []) or []
    }


def _add_tab(service, spreadsheet_id: str, title: str) -> None:
    try:
        service.spreadsheets().batchUpdate(
            spreadsheetId=spreadsheet_id,
            body={"requests": [{"addSheet": {"properties": {"title": title}}}]},
        ).execute()
    except Exception:
        # A concurrent intake may have created the same tab after our metadata read.
        if title not in _existing_tab_titles(service, spreadsheet_id):
            raise
        logger.info("sheet_tab_created_concurrently", extra={"spreadsheet_id": spreadsheet_id, "tab": title})
        return
    logger.info("sheet_tab_created", extra={"spreadsheet_id": spreadsheet_id, "tab": title})


def ensure_tab_with_headers(spreadsheet_id: str, tab_title: str, schema: list[Question]) -> list[str]:
    """
    Makes sure the tab exists and row 1 holds the schema-derived headers.
    The header write overwrites, so repeated calls converge on the same row.
    """
    title = sanitize_tab_title(tab_title)
    headers = build_headers(schema)
    try:
        service = google_clients.get_sheets_client()
        if title not in _existing_tab_titles(service, spreadsheet_id):
            _add_tab(service, spreadsheet_id, title)
        service.spreadsheets().values().update(
            spreadsheetId=spreadsheet_id,
            range=tab_range(title),
            valueInputOption="RAW",
            body={"values": [headers]},
        ).execute()
    except Exception as exc:  # noqa: BLE001
        raise SpreadsheetEnsureError(f"could not prepare tab {title!r}: {exc}") from exc
    return headers


def append_values(spreadsheet_id: str, range_name: str, values: list[str]) -> None:
    try:
        service = google_clients.get_sheets_client()
        service.spreadsheets().values().append(
            spreadsheetId=spreadsheet_id,
            range=range_name,
            valueInputOption="RAW",
            insertDataOption="INSERT_ROWS",
            body={"values": [values]},
        ).execute()
    except Exception as exc:  # noqa: BLE001
        raise SpreadsheetAppendError(f"could not append to {range_name!r}: {exc}") from exc


def append_row(spreadsheet_id: str, tab_title: str, values: list[str]) -> None:
    append_values(spreadsheet_id, tab_range(sanitize_tab_title(tab_title)), values)


def append_generic(spreadsheet_id: str, values: list[str]) -> None:
    append_values(spreadsheet_id, GENERIC_RANGE, values)
