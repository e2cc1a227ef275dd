"""Field configuration store — the admin-editable wizard layout.

The layout lives in one `form_config` row and is cached in process
memory so every wizard request reads it without touching the database.

Lifecycle:
  - load()   at startup: read the row, seeding the default if absent.
  - get()    never fails; returns the cached layout.
  - update() validates, persists, then swaps the cache. A rejected
             candidate leaves both the row and the cache untouched.

Concurrent admin updates are last-write-wins.
"""

import asyncio
import logging

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from formwizard.middleware.exceptions import ConfigurationInvalidError, StoreUnavailableError
from formwizard.models.form_config import FormConfigRow
from formwizard.schemas.form_config import (
    FIELD_KEYS,
    PANELS,
    FieldConfig,
    FieldSetting,
    default_field_config,
)

logger = logging.getLogger("formwizard.config_store")

CONFIG_KEY = "fields"


def validate_field_config(candidate) -> FieldConfig:
    """Validate a raw layout dict and return it as a FieldConfig.

    Raises ConfigurationInvalidError naming the first field or panel
    that fails. Unknown field keys are dropped.
    """
    fields = candidate.get("fields") if isinstance(candidate, dict) else None
    if not isinstance(fields, dict):
        raise ConfigurationInvalidError(
            "Invalid configuration format: Missing fields object."
        )

    settings_by_key: dict[str, FieldSetting] = {}
    for key in FIELD_KEYS:
        field = fields.get(key)
        enabled = field.get("enabled") if isinstance(field, dict) else None
        panel = field.get("panel") if isinstance(field, dict) else None
        if (
            not isinstance(enabled, bool)
            or isinstance(panel, bool)
            or not isinstance(panel, int)
            or panel not in PANELS
        ):
            raise ConfigurationInvalidError(
                f"Invalid configuration for field: {key}. "
                "Ensure 'enabled' (boolean) and 'panel' (2 or 3) are correct."
            )
        settings_by_key[key] = FieldSetting(enabled=enabled, panel=panel)

    config = FieldConfig(fields=settings_by_key)

    # Any enabled field means both panels must carry at least one
    if any(s.enabled for s in settings_by_key.values()):
        for panel in PANELS:
            if not config.panel_has_fields(panel):
                raise ConfigurationInvalidError(
                    f"Configuration invalid: Panel {panel} must have at least one enabled field."
                )

    return config


class FieldConfigStore:
    """Process-wide cache of the field layout, backed by one DB row."""

    def __init__(self) -> None:
        self._current = default_field_config()
        self._lock = asyncio.Lock()

    def get(self) -> FieldConfig:
        return self._current.model_copy(deep=True)

    def reset(self) -> None:
        """Drop back to the default layout (cache only)."""
        self._current = default_field_config()

    async def load(self, db: AsyncSession) -> FieldConfig:
        """Populate the cache from the database, seeding the default row."""
        result = await db.execute(
            select(FormConfigRow).where(FormConfigRow.key == CONFIG_KEY)
        )
        row = result.scalar_one_or_none()

        if row is None:
            config = default_field_config()
            db.add(FormConfigRow(key=CONFIG_KEY, value=config.model_dump()["fields"]))
            await db.commit()
            logger.info("Seeded default form configuration")
        else:
            try:
                config = validate_field_config({"fields": row.value})
            except ConfigurationInvalidError as exc:
                logger.warning(
                    "Stored form configuration is invalid (%s); using defaults",
                    exc.message,
                )
                config = default_field_config()

        self._current = config
        return self.get()

    async def update(self, db: AsyncSession, candidate) -> FieldConfig:
        """Validate and persist ``candidate``, then make it current."""
        config = validate_field_config(candidate)
        value = config.model_dump()["fields"]

        async with self._lock:
            try:
                result = await db.execute(
                    select(FormConfigRow).where(FormConfigRow.key == CONFIG_KEY)
                )
                row = result.scalar_one_or_none()
                if row:
                    row.value = value
                else:
                    db.add(FormConfigRow(key=CONFIG_KEY, value=value))
                await db.commit()
            except SQLAlchemyError as exc:
                await db.rollback()
                logger.exception("Failed to persist form configuration")
                raise StoreUnavailableError(
                    f"Error saving configuration: {exc.__class__.__name__}"
                ) from exc

            self._current = config

        logger.info(
            "Form configuration updated: panel 2=%s, panel 3=%s",
            config.enabled_on(2),
            config.enabled_on(3),
        )
        return self.get()


field_config_store = FieldConfigStore()
