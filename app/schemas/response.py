from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


class ApplyOut(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    ok: bool = True
    resume_link: Optional[str] = Field(default=None, alias="resumeLink")


class ResponseRecord(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    opening_id: str = Field(alias="openingId")
    opening_title: str = Field(default="", alias="openingTitle")
    source: str = "unknown"
    full_name: Optional[str] = Field(default=None, alias="fullName")
    email: Optional[str] = None
    phone: Optional[str] = None
    college: Optional[str] = None
    resume_link: Optional[str] = Field(default=None, alias="resumeLink")
    answers: dict[str, Any] = Field(default_factory=dict)
    status: str = "Applied"
    created_at: datetime = Field(alias="createdAt")
