from __future__ import annotations

import json
from datetime import datetime
from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from app.core.errors import InlineSchemaParseError

QuestionType = Literal[
    "short_text",
    "long_text",
    "email",
    "number",
    "url",
    "date",
    "dropdown",
    "radio",
    "checkboxes",
    "file",
]

Q_FULLNAME = "q_fullname"
Q_EMAIL = "q_email"
Q_PHONE = "q_phone"
Q_RESUME = "q_resume"
Q_COLLEGE = "q_college"

# Response attribute -> protected question id.
CORE_FIELDS: dict[str, str] = {
    "fullName": Q_FULLNAME,
    "email": Q_EMAIL,
    "phone": Q_PHONE,
    "resume": Q_RESUME,
    "college": Q_COLLEGE,
}
PROTECTED_IDS = frozenset(CORE_FIELDS.values())


class QuestionValidation(BaseModel):
    """Client-side validation rules; stored verbatim, never enforced by the intake."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    # Values come straight from builder inputs (often "" or numeric strings); kept as sent.
    min_length: Any = Field(default=None, alias="minLength")
    max_length: Any = Field(default=None, alias="maxLength")
    pattern: Any = None
    min: Any = None
    max: Any = None
    accept: Any = None
    max_file_size: Any = Field(default=None, alias="maxFileSize")


class Question(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    id: Optional[str] = None
    type: QuestionType = "short_text"
    label: str = ""
    required: bool = False
    options: Optional[list[str]] = None
    validation: Optional[QuestionValidation] = None
    page_break: Optional[bool] = Field(default=None, alias="pageBreak")

    @field_validator("id", mode="before")
    @classmethod
    def _strip_id(cls, v: Any) -> Optional[str]:
        if v is None:
            return None
        v = str(v).strip()
        return v or None

    @field_validator("label", mode="before")
    @classmethod
    def _label_text(cls, v: Any) -> str:
        return "" if v is None else str(v)

    @field_validator("options", mode="before")
    @classmethod
    def _options_as_text(cls, v: Any) -> Optional[list[str]]:
        if v is None:
            return None
        if not isinstance(v, list):
            raise ValueError("options must be a list")
        return [str(item) for item in v]

    @model_validator(mode="after")
    def _core_fields_required(self) -> "Question":
        if self.id in PROTECTED_IDS:
            self.required = True
        return self

    @property
    def is_protected(self) -> bool:
        return self.id in PROTECTED_IDS

    @property
    def header_label(self) -> str:
        return self.label or self.id or ""

    def to_dict(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


CORE_QUESTIONS: list[Question] = [
    Question(id=Q_FULLNAME, type="short_text", label="Full name", required=True),
    Question(id=Q_EMAIL, type="email", label="Email address", required=True),
    Question(id=Q_PHONE, type="short_text", label="Phone number", required=True),
    Question(id=Q_RESUME, type="file", label="Upload resume / CV", required=True),
    Question(id=Q_COLLEGE, type="short_text", label="College / Organization", required=True),
]


class FormMeta(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    core_fields: dict[str, str] = Field(default_factory=lambda: dict(CORE_FIELDS), alias="coreFields")
    form_id: str = Field(alias="formId")
    is_published: bool = Field(default=False, alias="isPublished")
    published_at: Optional[datetime] = Field(default=None, alias="publishedAt")
    share_links: dict[str, str] = Field(default_factory=dict, alias="shareLinks")
    generic_link: Optional[str] = Field(default=None, alias="genericLink")


class Form(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    opening_id: str = Field(alias="openingId")
    questions: list[Question]
    meta: FormMeta


def parse_schema(raw: Any) -> list[Question]:
    if not isinstance(raw, list):
        raise InlineSchemaParseError("schema must be a JSON array")
    questions: list[Question] = []
    seen: set[str] = set()
    for index, item in enumerate(raw):
        if not isinstance(item, dict):
            raise InlineSchemaParseError(f"schema item {index} is not an object")
        try:
            question = Question.model_validate(item)
        except ValidationError as exc:
            raise InlineSchemaParseError(f"schema item {index} is invalid: {exc.errors()[0].get('msg')}") from exc
        if question.id:
            if question.id in seen:
                raise InlineSchemaParseError(f"duplicate question id {question.id!r}")
            seen.add(question.id)
        questions.append(question)
    return questions


def parse_inline_schema(raw: str) -> list[Question]:
    try:
        decoded = json.loads(raw)
    except (TypeError, ValueError) as exc:
        raise InlineSchemaParseError(f"_schema is not valid JSON: {exc}") from exc
    return parse_schema(decoded)
