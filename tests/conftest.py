import os
import tempfile

os.environ.setdefault("INTAKE_DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("INTAKE_UPLOAD_DIR", tempfile.mkdtemp(prefix="intake-uploads-"))
os.environ["INTAKE_SHEET_ID"] = ""
os.environ["INTAKE_DRIVE_FOLDER_ID"] = ""
os.environ["INTAKE_APPLY_RATE_LIMIT_PER_MIN"] = "0"

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from app.api import deps
from app.core.config import settings
from app.main import app
from app.models import Base, RecOpening, RecOpeningForm
from app.services import google_clients


class _Call:
    def __init__(self, fn):
        self._fn = fn

    def execute(self):
        return self._fn()


def _tab_from_range(range_name: str) -> str:
    tab = range_name.rsplit("!", 1)[0]
    if tab.startswith("'") and tab.endswith("'"):
        tab = tab[1:-1].replace("''", "'")
    return tab


class FakeSheetsService:
    """In-memory stand-in for the Sheets v4 client: tab title -> rows."""

    def __init__(self):
        self.tabs: dict[str, list[list[str]]] = {"Sheet1": []}
        self.fail_on: set[str] = set()
        self.calls: list[tuple[str, str]] = []

    def _check(self, op: str):
        if op in self.fail_on:
            raise RuntimeError(f"sheets {op} unavailable")

    def spreadsheets(self):
        return _FakeSpreadsheets(self)


class _FakeSpreadsheets:
    def __init__(self, service: FakeSheetsService):
        self._service = service

    def get(self, spreadsheetId, fields=None):
        def run():
            self._service._check("get")
            return {"sheets": [{"properties": {"title": title}} for title in self._service.tabs]}

        return _Call(run)

    def batchUpdate(self, spreadsheetId, body):
        def run():
            self._service._check("addSheet")
            for request in body["requests"]:
                title = request["addSheet"]["properties"]["title"]
                if title in self._service.tabs:
                    raise RuntimeError(f"A sheet with the name \"{title}\" already exists.")
                self._service.tabs[title] = []
                self._service.calls.append(("addSheet", title))
            return {}

        return _Call(run)

    def values(self):
        return _FakeValues(self._service)


class _FakeValues:
    def __init__(self, service: FakeSheetsService):
        self._service = service

    def update(self, spreadsheetId, range, valueInputOption, body):
        def run():
            self._service._check("update")
            rows = self._service.tabs.setdefault(_tab_from_range(range), [])
            if rows:
                rows[0] = list(body["values"][0])
            else:
                rows.append(list(body["values"][0]))
            self._service.calls.append(("update", range))
            return {}

        return _Call(run)

    def append(self, spreadsheetId, range, valueInputOption, insertDataOption, body):
        def run():
            self._service._check("append")
            tab = _tab_from_range(range)
            if tab not in self._service.tabs:
                raise RuntimeError(f"Unable to parse range: {range}")
            self._service.tabs[tab].extend(list(row) for row in body["values"])
            self._service.calls.append(("append", range))
            return {}

        return _Call(run)


class FakeDriveService:
    """In-memory stand-in for the Drive v3 client."""

    def __init__(self):
        self.files_by_id: dict[str, dict] = {}
        self.granted: list[tuple[str, dict]] = []
        self.fail_on: set[str] = set()

    def _check(self, op: str):
        if op in self.fail_on:
            raise RuntimeError(f"drive {op} unavailable")

    def files(self):
        return _FakeFiles(self)

    def permissions(self):
        return _FakePermissions(self)


class _FakeFiles:
    def __init__(self, service: FakeDriveService):
        self._service = service

    def create(self, body, media_body, fields=None, supportsAllDrives=None):
        def run():
            self._service._check("create")
            file_id = f"file{len(self._service.files_by_id) + 1}"
            self._service.files_by_id[file_id] = {
                "name": body["name"],
                "parents": list(body.get("parents") or []),
                "mimeType": media_body.mimetype(),
                "data": media_body.getbytes(0, media_body.size()),
            }
            return {"id": file_id}

        return _Call(run)

    def get(self, fileId, fields=None, supportsAllDrives=None):
        def run():
            self._service._check("get")
            return {"id": fileId, "webViewLink": f"https://drive.google.com/file/d/{fileId}/view?usp=drivesdk"}

        return _Call(run)


class _FakePermissions:
    def __init__(self, service: FakeDriveService):
        self._service = service

    def create(self, fileId, body, supportsAllDrives=None):
        def run():
            self._service._check("permission")
            self._service.granted.append((fileId, body))
            return {"id": "perm1"}

        return _Call(run)


@pytest.fixture()
async def async_engine():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture()
def session_factory(async_engine):
    return async_sessionmaker(bind=async_engine, expire_on_commit=False, autoflush=False)


@pytest.fixture()
async def db_session(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture()
async def client(session_factory):
    async def _session_override():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[deps.get_db_session] = _session_override
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://testserver") as http_client:
        yield http_client
    app.dependency_overrides.clear()


@pytest.fixture()
def fake_sheets(monkeypatch):
    service = FakeSheetsService()
    monkeypatch.setattr(google_clients, "get_sheets_client", lambda: service)
    monkeypatch.setattr(settings, "sheet_id", "sheet-test")
    return service


@pytest.fixture()
def fake_drive(monkeypatch):
    service = FakeDriveService()
    monkeypatch.setattr(google_clients, "get_drive_client", lambda: service)
    monkeypatch.setattr(settings, "drive_folder_id", "folder-test")
    return service


@pytest.fixture()
def add_opening(session_factory):
    async def _add(opening_id: str, *, title: str = "", schema: list[dict] | None = None, sources=None):
        async with session_factory() as session:
            session.add(
                RecOpening(
                    opening_id=opening_id,
                    title=title,
                    location="Remote",
                    department="Engineering",
                    preferred_sources=list(sources or []),
                    duration_mins=30,
                )
            )
            if schema is not None:
                session.add(
                    RecOpeningForm(
                        opening_id=opening_id,
                        form_id=f"form_{opening_id}",
                        questions=schema,
                        core_fields={},
                        share_links={},
                    )
                )
            await session.commit()

    return _add
