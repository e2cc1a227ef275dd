"""Admin-editable field layout for the wizard.

Single row keyed by ``key="fields"`` holding the whole layout as JSON:
  {"address": {"enabled": true, "panel": 2}, ...}
Replaced wholesale on each accepted admin update.
"""

import uuid
from datetime import datetime

from sqlalchemy import DateTime, JSON, String
from sqlalchemy.orm import Mapped, mapped_column

from formwizard.database import Base


class FormConfigRow(Base):
    __tablename__ = "form_config"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    key: Mapped[str] = mapped_column(String(100), unique=True, nullable=False)
    value: Mapped[dict] = mapped_column(JSON, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
