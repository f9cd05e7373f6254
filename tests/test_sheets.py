import pytest

from app.core.errors import SpreadsheetAppendError, SpreadsheetEnsureError
from app.schemas.form import Question
from app.services import sheets


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("op_1", "op_1"),
        ("Q1/Q2: [draft]?", "Q1Q2 draft"),
        ("a\\b*c", "abc"),
        ("   ", "sheet"),
        ("[]:*?/\\", "sheet"),
        (None, "sheet"),
        ("x" * 120, "x" * 90),
    ],
)
def test_sanitize_tab_title(raw, expected):
    assert sheets.sanitize_tab_title(raw) == expected


def test_tab_range_quotes_title():
    assert sheets.tab_range("op_1") == "'op_1'!A1"
    assert sheets.tab_range("Bob's tab", "A:Z") == "'Bob''s tab'!A:Z"


def test_headers_fall_back_to_question_id():
    schema = [Question(id="q_a", label="Alpha"), Question(id="q_b"), Question(label="")]
    assert sheets.build_headers(schema) == sheets.METADATA_HEADERS + ["Alpha", "q_b", ""]


def test_ensure_creates_tab_and_writes_headers(fake_sheets):
    schema = [Question(id="q_fullname", label="Full name"), Question(id="q_years", label="Years")]

    headers = sheets.ensure_tab_with_headers("sheet-test", "op_1", schema)

    assert headers == sheets.METADATA_HEADERS + ["Full name", "Years"]
    assert fake_sheets.tabs["op_1"] == [headers]
    assert ("addSheet", "op_1") in fake_sheets.calls


def test_ensure_is_idempotent_and_rewrites_headers(fake_sheets):
    sheets.ensure_tab_with_headers("sheet-test", "op_1", [Question(id="q_a", label="A")])
    sheets.append_row("sheet-test", "op_1", ["row"])
    sheets.ensure_tab_with_headers("sheet-test", "op_1", [Question(id="q_a", label="A2")])

    assert [call for call in fake_sheets.calls if call[0] == "addSheet"] == [("addSheet", "op_1")]
    assert fake_sheets.tabs["op_1"][0][-1] == "A2"
    assert fake_sheets.tabs["op_1"][1] == ["row"]


def test_ensure_sanitizes_title(fake_sheets):
    sheets.ensure_tab_with_headers("sheet-test", "Eng/Backend", [Question(id="q_a", label="A")])
    sheets.append_row("sheet-test", "Eng/Backend", ["x"])

    assert fake_sheets.tabs["EngBackend"][1] == ["x"]


@pytest.mark.parametrize("op", ["get", "addSheet", "update"])
def test_ensure_wraps_failures(fake_sheets, op):
    fake_sheets.fail_on.add(op)

    with pytest.raises(SpreadsheetEnsureError):
        sheets.ensure_tab_with_headers("sheet-test", "op_1", [Question(id="q_a", label="A")])


def test_append_generic_targets_first_tab(fake_sheets):
    sheets.append_generic("sheet-test", ["t", "op", "", "unknown", "", "{}"])

    assert fake_sheets.tabs["Sheet1"] == [["t", "op", "", "unknown", "", "{}"]]
    assert fake_sheets.calls == [("append", sheets.GENERIC_RANGE)]


def test_append_wraps_failures(fake_sheets):
    fake_sheets.fail_on.add("append")

    with pytest.raises(SpreadsheetAppendError):
        sheets.append_generic("sheet-test", ["x"])


def test_append_to_missing_tab_fails(fake_sheets):
    with pytest.raises(SpreadsheetAppendError):
        sheets.append_row("sheet-test", "nope", ["x"])


def test_ensure_recovers_when_tab_created_concurrently(fake_sheets, monkeypatch):
    fake_sheets.tabs["op_1"] = [["old header"], ["earlier row"]]
    real_titles = sheets._existing_tab_titles
    reads = []

    def _stale_then_fresh(service, spreadsheet_id):
        reads.append(spreadsheet_id)
        if len(reads) == 1:
            return {"Sheet1"}
        return real_titles(service, spreadsheet_id)

    monkeypatch.setattr(sheets, "_existing_tab_titles", _stale_then_fresh)

    headers = sheets.ensure_tab_with_headers("sheet-test", "op_1", [Question(id="q_a", label="A")])

    assert len(reads) == 2
    assert fake_sheets.tabs["op_1"] == [headers, ["earlier row"]]
    assert not [call for call in fake_sheets.calls if call[0] == "addSheet"]


def test_ensure_still_fails_when_tab_cannot_be_added(fake_sheets):
    fake_sheets.fail_on.add("addSheet")

    with pytest.raises(SpreadsheetEnsureError):
        sheets.ensure_tab_with_headers("sheet-test", "op_1", [Question(id="q_a", label="A")])
    assert "op_1" not in fake_sheets.tabs
