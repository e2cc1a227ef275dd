"""Admin configuration editor — toggles fields and assigns panels.

One row per known field: an enable toggle and a panel selector (2 or 3)
that is locked while the field is off. ``save()`` checks panel coverage
locally before calling the API, shows the server's rejection message
verbatim, and holds a success acknowledgement for a few seconds.
"""

import logging
import time
from dataclasses import dataclass
from typing import Callable

from formwizard.client.api import ApiError, FormWizardClient
from formwizard.schemas.form_config import (
    FIELD_KEYS,
    PANELS,
    FieldConfig,
    FieldSetting,
    default_field_config,
)

logger = logging.getLogger("formwizard.admin")

FIELD_NAMES = {
    "address": "Address",
    "birthdate": "Birthdate",
    "aboutYou": "About You",
}

SAVED_MESSAGE = "Configuration saved successfully!"
ACK_SECONDS = 3.0


@dataclass(frozen=True)
class FieldRow:
    key: str
    label: str
    enabled: bool
    panel: int

    @property
    def panel_selectable(self) -> bool:
        return self.enabled


class AdminConfigEditor:
    def __init__(
        self,
        client: FormWizardClient,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.client = client
        self._clock = clock
        self.config: FieldConfig = default_field_config()
        self.validation_error: str | None = None
        self.load_error: str | None = None
        self._status: str = ""
        self._status_expires: float | None = None

    async def load(self) -> None:
        try:
            self.config = await self.client.fetch_form_config()
            self.load_error = None
        except ApiError as exc:
            logger.error("Error fetching form configuration: %s", exc.message)
            self.load_error = exc.message

    @property
    def rows(self) -> list[FieldRow]:
        return [
            FieldRow(
                key=key,
                label=FIELD_NAMES[key],
                enabled=self.config.fields[key].enabled,
                panel=self.config.fields[key].panel,
            )
            for key in FIELD_KEYS
        ]

    @property
    def status(self) -> str:
        """Save status; the success acknowledgement expires on its own."""
        if self._status_expires is not None and self._clock() >= self._status_expires:
            self._status = ""
            self._status_expires = None
        return self._status

    def toggle(self, key: str) -> None:
        setting = self.config.fields[key]
        self.config.fields[key] = FieldSetting(enabled=not setting.enabled, panel=setting.panel)

    def set_panel(self, key: str, panel: int) -> None:
        setting = self.config.fields[key]
        if not setting.enabled:
            raise ValueError(f"{FIELD_NAMES[key]} is disabled; enable it before choosing a panel")
        if panel not in PANELS:
            raise ValueError(f"Panel must be one of {PANELS}")
        self.config.fields[key] = FieldSetting(enabled=True, panel=panel)

    def validate(self) -> str | None:
        """Panel coverage message, or None when the layout may be saved."""
        if not any(s.enabled for s in self.config.fields.values()):
            return None
        for panel in PANELS:
            if not self.config.panel_has_fields(panel):
                return f"Panel {panel} must have at least one field."
        return None

    async def save(self) -> bool:
        self.validation_error = self.validate()
        if self.validation_error:
            return False

        self._status, self._status_expires = "Saving...", None
        try:
            await self.client.update_form_config(self.config)
        except ApiError as exc:
            logger.error("Error updating form configuration: %s", exc.message)
            self._status = exc.message
            return False

        self._status = SAVED_MESSAGE
        self._status_expires = self._clock() + ACK_SECONDS
        return True
