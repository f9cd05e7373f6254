import json

import pytest

from app.core.errors import InlineSchemaParseError
from app.schemas.form import CORE_QUESTIONS, PROTECTED_IDS, Question, parse_inline_schema, parse_schema


def test_core_questions_are_protected_and_required():
    assert {q.id for q in CORE_QUESTIONS} == PROTECTED_IDS
    assert all(q.required and q.is_protected for q in CORE_QUESTIONS)


def test_protected_id_forces_required():
    question = Question.model_validate({"id": "q_email", "label": "Email", "required": False})
    assert question.required is True


def test_parse_keeps_order_and_unknown_keys():
    raw = [
        {"id": "q_b", "type": "checkboxes", "label": "Skills", "options": ["Go", 3], "hint": "pick any"},
        {"id": " q_a ", "label": "Name", "validation": {"minLength": 2}, "pageBreak": True},
    ]

    questions = parse_schema(raw)

    assert [q.id for q in questions] == ["q_b", "q_a"]
    assert questions[0].options == ["Go", "3"]
    assert questions[0].to_dict()["hint"] == "pick any"
    assert questions[1].validation.min_length == 2
    assert questions[1].to_dict()["pageBreak"] is True


def test_header_label_prefers_label():
    assert Question(id="q_a", label="A").header_label == "A"
    assert Question(id="q_a").header_label == "q_a"


@pytest.mark.parametrize(
    "raw",
    [
        {"id": "q_a"},
        [1, 2],
        [{"id": "q_a", "type": "signature"}],
        [{"id": "q_a", "options": "Go"}],
        [{"id": "q_a"}, {"id": "q_a"}],
    ],
)
def test_parse_rejects_malformed_schema(raw):
    with pytest.raises(InlineSchemaParseError):
        parse_schema(raw)


def test_inline_schema_must_be_json():
    with pytest.raises(InlineSchemaParseError):
        parse_inline_schema("{not json")
    assert parse_inline_schema(json.dumps([{"id": "q_x", "label": "X"}]))[0].label == "X"


def test_blank_validation_values_are_kept_verbatim():
    raw = [
        {"id": "q_fullname", "label": "Full name", "validation": {"minLength": "", "maxLength": "40"}},
        {"id": "q_years", "type": "number", "validation": {"min": "", "max": "", "step": "1"}},
    ]

    questions = parse_schema(raw)

    assert questions[0].to_dict()["validation"] == {"minLength": "", "maxLength": "40"}
    assert questions[1].to_dict()["validation"] == {"min": "", "max": "", "step": "1"}
