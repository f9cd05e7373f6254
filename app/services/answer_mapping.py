from __future__ import annotations

import json
from typing import Any

from app.schemas.form import Q_COLLEGE, Q_EMAIL, Q_FULLNAME, Q_PHONE, Question

RESERVED_FIELDS = frozenset({"_schema", "opening", "src"})

# Top-level response attribute -> answer keys tried in order.
MIRRORED_FIELDS: dict[str, tuple[str, ...]] = {
    "full_name": (Q_FULLNAME, "fullname", "name"),
    "email": (Q_EMAIL, "email"),
    "phone": (Q_PHONE, "phone"),
    "college": (Q_COLLEGE, "college"),
}


def collect_answers(fields: dict[str, Any]) -> dict[str, Any]:
    return {key: value for key, value in fields.items() if key not in RESERVED_FIELDS}


def cell_value(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, (list, tuple)):
        return ", ".join(cell_value(item) for item in value)
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def mirror_core_fields(answers: dict[str, Any]) -> dict[str, str | None]:
    mirrored: dict[str, str | None] = {}
    for attr, keys in MIRRORED_FIELDS.items():
        value = None
        for key in keys:
            candidate = answers.get(key)
            if candidate not in (None, "", []):
                value = cell_value(candidate)
                break
        mirrored[attr] = value
    return mirrored


def label_owners(schema: list[Question]) -> dict[str, Question]:
    """Maps each label to the first question in schema order that carries it."""
    owners: dict[str, Question] = {}
    for question in schema:
        if question.label:
            owners.setdefault(question.label, question)
    return owners


def lookup_answer(answers: dict[str, Any], question: Question, owners: dict[str, Question]) -> Any:
    if question.id and question.id in answers:
        return answers[question.id]
    label = question.label
    if label and label in answers and owners.get(label) is question:
        return answers[label]
    return None


def metadata_prefix(
    *,
    created_at: str,
    opening_id: str,
    opening_title: str,
    source: str,
    resume_link: str | None,
) -> list[str]:
    return [created_at, opening_id, opening_title, source, resume_link or ""]


def schema_row(prefix: list[str], schema: list[Question], answers: dict[str, Any]) -> list[str]:
    owners = label_owners(schema)
    suffix = [cell_value(lookup_answer(answers, question, owners)) for question in schema]
    return prefix + suffix


def answers_json(answers: dict[str, Any]) -> str:
    return json.dumps(answers, ensure_ascii=False, separators=(",", ":"))


def generic_row(prefix: list[str], answers: dict[str, Any]) -> list[str]:
    return prefix + [answers_json(answers)]
