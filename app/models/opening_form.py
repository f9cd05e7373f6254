from datetime import datetime

from sqlalchemy import JSON, Boolean, DateTime, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from app.core.datetime_utils import utcnow_naive
from app.db.base import Base


class RecOpeningForm(Base):
    __tablename__ = "rec_opening_form"

    opening_id: Mapped[str] = mapped_column(String(100), primary_key=True)
    form_id: Mapped[str] = mapped_column(String(120), nullable=False)
    questions: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    core_fields: Mapped[dict] = mapped_column(JSON, nullable=False, default=dict)

    is_published: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    published_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    share_links: Mapped[dict] = mapped_column(JSON, nullable=False, default=dict)
    generic_link: Mapped[str | None] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow_naive)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow_naive, onupdate=utcnow_naive)
