"""Pydantic schemas for the admin-configurable field layout."""

from typing import Literal

from pydantic import BaseModel, StrictBool

FIELD_KEYS = ("address", "birthdate", "aboutYou")
PANELS = (2, 3)


class FieldSetting(BaseModel):
    enabled: StrictBool
    panel: Literal[2, 3]


class FieldConfig(BaseModel):
    """Which optional fields are shown, and on which panel (step)."""
    fields: dict[str, FieldSetting]

    def enabled_on(self, panel: int) -> list[str]:
        """Enabled field keys assigned to ``panel``, in display order."""
        return [
            key for key in FIELD_KEYS
            if key in self.fields
            and self.fields[key].enabled
            and self.fields[key].panel == panel
        ]

    def panel_has_fields(self, panel: int) -> bool:
        return bool(self.enabled_on(panel))


def default_field_config() -> FieldConfig:
    return FieldConfig(fields={
        "address": FieldSetting(enabled=True, panel=2),
        "birthdate": FieldSetting(enabled=True, panel=2),
        "aboutYou": FieldSetting(enabled=True, panel=3),
    })


class ConfigUpdateResponse(BaseModel):
    success: bool
    message: str
