from datetime import datetime

from sqlalchemy import JSON, BigInteger, DateTime, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from app.db.base import Base


class RecResponse(Base):
    __tablename__ = "rec_response"

    response_id: Mapped[str] = mapped_column(String(64), primary_key=True)
    opening_id: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    opening_title: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    source: Mapped[str] = mapped_column(String(100), nullable=False, default="unknown")

    full_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    email: Mapped[str | None] = mapped_column(String(255), nullable=True)
    phone: Mapped[str | None] = mapped_column(String(64), nullable=True)
    college: Mapped[str | None] = mapped_column(String(255), nullable=True)

    resume_link: Mapped[str | None] = mapped_column(Text, nullable=True)
    answers: Mapped[dict] = mapped_column(JSON, nullable=False, default=dict)
    status: Mapped[str] = mapped_column(String(32), nullable=False, default="Applied")

    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    created_at_ms: Mapped[int] = mapped_column(BigInteger, nullable=False, index=True)
