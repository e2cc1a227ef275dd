"""Pure helpers shared by the wizard controller and the API.

- Birthdate validation (format, real calendar date, not in the future)
- Address pack/unpack between "street, city, state zip" and its parts
- Step resolution from saved data and the current field layout
"""

import re
from dataclasses import dataclass
from datetime import date

from formwizard.schemas.form_config import FieldConfig, PANELS

BIRTHDATE_REGEX = re.compile(r"^\d{4}-\d{2}-\d{2}$")  # YYYY-MM-DD

ADDRESS_PARTS = ("streetAddress", "city", "state", "zipCode")

FIELD_LABELS = {
    "username": "Username",
    "password": "Password",
    "address": "Address",
    "streetAddress": "Street Address",
    "city": "City",
    "state": "State",
    "zipCode": "Zip Code",
    "birthdate": "Birthdate",
    "aboutYou": "Tell us about yourself",
}

FIRST_STEP = 1
THANK_YOU_STEP = 4


@dataclass(frozen=True)
class BirthdateCheck:
    valid: bool
    reason: str = ""


@dataclass(frozen=True)
class AddressParts:
    street: str = ""
    city: str = ""
    state: str = ""
    zip: str = ""


# ── Birthdate ────────────────────────────────────────────────

def validate_birthdate(
    value: str | None,
    required: bool = True,
    today: date | None = None,
) -> BirthdateCheck:
    """Check a YYYY-MM-DD birthdate.

    Rejects blank input (only when ``required``), anything not shaped
    like YYYY-MM-DD, dates that do not exist (2023-02-30), and dates
    after ``today``.
    """
    value = (value or "").strip()
    if not value:
        if required:
            return BirthdateCheck(False, "Birthdate is required.")
        return BirthdateCheck(True)

    if not BIRTHDATE_REGEX.match(value):
        return BirthdateCheck(False, "Birthdate must be in YYYY-MM-DD format.")

    year, month, day = (int(part) for part in value.split("-"))
    try:
        parsed = date(year, month, day)
    except ValueError:
        return BirthdateCheck(False, "Invalid date. Please check month and day values.")

    if parsed > (today or date.today()):
        return BirthdateCheck(False, "Birthdate cannot be in the future.")

    return BirthdateCheck(True)


# ── Address ──────────────────────────────────────────────────

def parse_address(value: str | None) -> AddressParts:
    """Best-effort split of "street, city, state zip" into parts.

    At most three comma segments; the last one is split on whitespace,
    its final token being the zip and everything before it the state.
    Missing segments stay empty.
    """
    if not value or not value.strip():
        return AddressParts()

    segments = [segment.strip() for segment in value.split(",", 2)]
    street = segments[0]
    city = segments[1] if len(segments) >= 2 else ""
    state = zip_code = ""

    if len(segments) == 3:
        tokens = segments[2].split()
        if len(tokens) == 1:
            state = tokens[0]
        elif tokens:
            state = " ".join(tokens[:-1])
            zip_code = tokens[-1]

    return AddressParts(street=street, city=city, state=state, zip=zip_code)


def combine_address(parts: AddressParts) -> str:
    """Join address parts as "street, city, state zip", skipping blanks."""
    state_zip = " ".join(p for p in (parts.state.strip(), parts.zip.strip()) if p)
    pieces = (parts.street.strip(), parts.city.strip(), state_zip)
    return ", ".join(p for p in pieces if p)


def address_parts_from_form(form_data: dict) -> AddressParts:
    return AddressParts(
        street=form_data.get("streetAddress") or "",
        city=form_data.get("city") or "",
        state=form_data.get("state") or "",
        zip=form_data.get("zipCode") or "",
    )


def address_parts_to_form(parts: AddressParts) -> dict[str, str]:
    return {
        "streetAddress": parts.street,
        "city": parts.city,
        "state": parts.state,
        "zipCode": parts.zip,
    }


# ── Steps ────────────────────────────────────────────────────

def has_value(data: dict, field: str) -> bool:
    """True when ``field`` holds a non-blank value in ``data``.

    ``address`` also counts as filled when any of its parts is.
    """
    keys = (field, *ADDRESS_PARTS) if field == "address" else (field,)
    return any(str(data.get(key) or "").strip() for key in keys)


def determine_initial_step(data: dict, config: FieldConfig) -> int:
    """Furthest panel that already holds saved data, else step 1."""
    for panel in sorted(PANELS, reverse=True):
        if any(has_value(data, field) for field in config.enabled_on(panel)):
            return panel
    return FIRST_STEP


def active_steps(config: FieldConfig) -> list[int]:
    """Data steps shown under ``config``: 1 plus every non-empty panel."""
    return [FIRST_STEP] + [p for p in PANELS if config.panel_has_fields(p)]
