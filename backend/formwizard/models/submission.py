"""Wizard submissions — one row per user run through the form.

Created when step 1 is first saved, updated on every later step,
and flagged ``is_complete`` on final submit. Rows are never deleted.
"""

import uuid
from datetime import datetime

from sqlalchemy import Boolean, DateTime, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from formwizard.database import Base


class FormSubmission(Base):
    __tablename__ = "form_submissions"
    __table_args__ = (
        Index("ix_form_submissions_last_updated", "last_updated"),
    )

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    # Credentials
    username: Mapped[str] = mapped_column(String(255), nullable=False)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)

    # Configurable fields (panel 2 / panel 3)
    address: Mapped[str | None] = mapped_column(String(500))
    birthdate: Mapped[str | None] = mapped_column(String(10))  # YYYY-MM-DD
    about_you: Mapped[str | None] = mapped_column(Text)

    is_complete: Mapped[bool] = mapped_column(Boolean, default=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    last_updated: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, onupdate=datetime.utcnow
    )
