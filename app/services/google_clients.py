from __future__ import annotations

import hashlib
import json
import logging
import threading
from typing import Any

import google.auth
from google.oauth2.service_account import Credentials
from googleapiclient.discovery import build

from app.core.config import settings
from app.core.paths import resolve_repo_path

logger = logging.getLogger("intake.google")

SCOPES = [
    "https://www.googleapis.com/auth/drive",
    "https://www.googleapis.com/auth/spreadsheets",
]

_clients: dict[tuple[str, str, str], Any] = {}
_lock = threading.Lock()


def _credentials_key() -> str:
    inline = (settings.google_service_account_json or "").strip()
    if inline:
        return "inline:" + hashlib.sha256(inline.encode("utf-8")).hexdigest()
    path = (settings.google_application_credentials or "").strip()
    if path:
        return f"file:{resolve_repo_path(path)}"
    return "default"


def _credentials():
    inline = (settings.google_service_account_json or "").strip()
    if inline:
        return Credentials.from_service_account_info(json.loads(inline), scopes=SCOPES)
    path = (settings.google_application_credentials or "").strip()
    if path:
        return Credentials.from_service_account_file(str(resolve_repo_path(path)), scopes=SCOPES)
    credentials, _ = google.auth.default(scopes=SCOPES)
    return credentials


def _client(api: str, version: str):
    key = (api, version, _credentials_key())
    client = _clients.get(key)
    if client is not None:
        return client
    with _lock:
        client = _clients.get(key)
        if client is None:
            client = build(api, version, credentials=_credentials(), cache_discovery=False)
            _clients[key] = client
            logger.info("google_client_built", extra={"api": api, "version": version})
    return client


def get_drive_client():
    return _client("drive", "v3")


def get_sheets_client():
    return _client("sheets", "v4")


def reset_clients() -> None:
    with _lock:
        _clients.clear()
