"""Local draft store — the wizard's resume state on this machine.

A small JSON key/value file holding:
  formId       remembered submission id
  username     remembered username (ownership check on resume)
  currentStep  last step the user was on
  formData     in-progress field values (never the password)
  savedAt      ISO timestamp of the last write

All keys are cleared together on final submit or restart.
"""

import json
import logging
import os
import tempfile
from datetime import datetime, timedelta
from pathlib import Path
from typing import Any

logger = logging.getLogger("formwizard.drafts")

FORM_ID_KEY = "formId"
USERNAME_KEY = "username"
STEP_KEY = "currentStep"
FORM_DATA_KEY = "formData"
SAVED_AT_KEY = "savedAt"


class LocalDraftStore:
    def __init__(self, path: str | Path):
        self.path = Path(path).expanduser()

    def _read(self) -> dict[str, Any]:
        try:
            with self.path.open(encoding="utf-8") as fh:
                data = json.load(fh)
        except FileNotFoundError:
            return {}
        except (OSError, ValueError):
            logger.warning("Ignoring unreadable draft file %s", self.path)
            return {}
        return data if isinstance(data, dict) else {}

    def _write(self, data: dict[str, Any]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        # Write-then-rename so a crash never leaves a half-written draft
        fd, tmp = tempfile.mkstemp(dir=self.path.parent, prefix=".draft-")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                json.dump(data, fh)
            os.replace(tmp, self.path)
        except BaseException:
            Path(tmp).unlink(missing_ok=True)
            raise

    def get(self, key: str, default: Any = None) -> Any:
        return self._read().get(key, default)

    def save(self, **values: Any) -> None:
        """Merge ``values`` into the draft and stamp ``savedAt``."""
        data = self._read()
        for key, value in values.items():
            if value is None:
                data.pop(key, None)
            else:
                data[key] = value
        data[SAVED_AT_KEY] = datetime.utcnow().isoformat()
        self._write(data)

    def clear(self) -> None:
        self.path.unlink(missing_ok=True)

    def is_expired(self, ttl_days: int, now: datetime | None = None) -> bool:
        """True when the last write is older than ``ttl_days`` (or unknown)."""
        saved_at = self.get(SAVED_AT_KEY)
        try:
            saved = datetime.fromisoformat(saved_at)
        except (TypeError, ValueError):
            return True
        return (now or datetime.utcnow()) - saved > timedelta(days=ttl_days)
