"""Wizard controller — the multi-step onboarding form's state machine.

Steps:
  1  credentials (username + password), always shown
  2  configurable panel, shown only if an enabled field maps to it
  3  configurable panel, shown only if an enabled field maps to it
  4  thank-you, terminal (never persisted)

Transitions:
  mount()     load config, restore a local or remote draft, pick a step
  next()      validate the current step, save, move to the next active step
  previous()  move to the previous active step (no validation, no save)
  submit()    validate, save with isComplete=true, clear the draft, go to 4
  restart()   clear the draft and return to step 1

The last active data step submits instead of advancing; when only
panel 2 is enabled, step 2 is both "next" and "last".

Failures never raise out of a transition: validation problems land in
``field_errors``, API problems in ``general_error``, and the in-progress
values are kept in the local draft store either way.
"""

import logging

from formwizard.client.api import ApiError, FormWizardClient
from formwizard.client.drafts import (
    FORM_DATA_KEY,
    FORM_ID_KEY,
    STEP_KEY,
    USERNAME_KEY,
    LocalDraftStore,
)
from formwizard.config import settings
from formwizard.schemas.form_config import FieldConfig, default_field_config
from formwizard.utils.helpers import (
    ADDRESS_PARTS,
    FIELD_LABELS,
    FIRST_STEP,
    THANK_YOU_STEP,
    active_steps,
    address_parts_from_form,
    address_parts_to_form,
    combine_address,
    determine_initial_step,
    parse_address,
    validate_birthdate,
)

logger = logging.getLogger("formwizard.wizard")

FORM_FIELDS = (
    "username",
    "password",
    "address",
    "streetAddress",
    "city",
    "state",
    "zipCode",
    "birthdate",
    "aboutYou",
)

SAVE_ERROR = "Error saving data. Please try again."
SUBMIT_ERROR = "Error submitting form. Please try again."
FIX_ERRORS = "Please correct all validation errors before submitting."


class InvalidTransitionError(Exception):
    """A transition was requested from a step that does not allow it."""


def empty_form() -> dict[str, str]:
    return {field: "" for field in FORM_FIELDS}


class WizardController:
    def __init__(
        self,
        client: FormWizardClient,
        drafts: LocalDraftStore,
        *,
        draft_ttl_days: int | None = None,
    ):
        self.client = client
        self.drafts = drafts
        self.draft_ttl_days = draft_ttl_days if draft_ttl_days is not None else settings.draft_ttl_days

        self.config: FieldConfig = default_field_config()
        self.current_step = FIRST_STEP
        self.form_data = empty_form()
        self.submission_id: str | None = None
        self.field_errors: dict[str, str] = {}
        self.general_error: str | None = None
        self.loading = True

    # ── Step layout ──────────────────────────────────────────

    @property
    def steps(self) -> list[int]:
        return active_steps(self.config)

    @property
    def last_step(self) -> int:
        return self.steps[-1]

    @property
    def is_finished(self) -> bool:
        return self.current_step == THANK_YOU_STEP

    @property
    def action(self) -> str | None:
        """Return "submit" on the last active step, "next" before it, None on 4."""
        if self.is_finished:
            return None
        return "submit" if self.current_step == self.last_step else "next"

    def fields_for_step(self, step: int) -> list[str]:
        """Field keys rendered on ``step`` (address expands to its parts)."""
        if step == FIRST_STEP:
            return ["username", "password"]
        fields: list[str] = []
        for key in self.config.enabled_on(step):
            fields.extend(ADDRESS_PARTS if key == "address" else (key,))
        return fields

    def _snap_down(self, step: int) -> int:
        """Nearest active step at or below ``step``."""
        return max(s for s in self.steps if s <= step)

    # ── Mount / restore ──────────────────────────────────────

    async def mount(self) -> None:
        self.loading = True
        try:
            self.config = await self.client.fetch_form_config()
        except ApiError as exc:
            logger.warning("Using default form configuration: %s", exc.message)
            self.config = default_field_config()

        restored = self._restore_local() or await self._restore_remote()

        stored_step = self.drafts.get(STEP_KEY) if restored else None
        if self._resumable_step(stored_step):
            self.current_step = stored_step
        elif restored and self.submission_id:
            self.current_step = self._snap_down(
                determine_initial_step(self.form_data, self.config)
            )
        else:
            self.current_step = FIRST_STEP
        self.loading = False
        logger.info("Wizard mounted on step %d (submission=%s)", self.current_step, self.submission_id)

    def _resumable_step(self, step) -> bool:
        if isinstance(step, bool) or not isinstance(step, int):
            return False
        if step not in self.steps:
            return False
        # Panels are only reachable after step 1 has been saved
        return step == FIRST_STEP or self.submission_id is not None

    def _restore_local(self) -> bool:
        blob = self.drafts.get(FORM_DATA_KEY)
        if not isinstance(blob, dict) or not any(str(v or "").strip() for v in blob.values()):
            return False

        self.form_data = empty_form()
        for field in FORM_FIELDS:
            if field != "password" and blob.get(field) is not None:
                self.form_data[field] = str(blob[field])
        self.submission_id = self.drafts.get(FORM_ID_KEY)
        logger.info("Restored local draft (submission=%s)", self.submission_id)
        return True

    async def _restore_remote(self) -> bool:
        submission_id = self.drafts.get(FORM_ID_KEY)
        username = self.drafts.get(USERNAME_KEY)
        if not submission_id or not username:
            return False

        if self.drafts.is_expired(self.draft_ttl_days):
            logger.info("Remembered submission %s expired; starting over", submission_id)
            self.drafts.clear()
            return False

        try:
            saved = await self.client.fetch_submission(submission_id)
        except ApiError as exc:
            logger.warning("Could not fetch saved progress %s: %s", submission_id, exc.message)
            self.drafts.clear()
            return False

        if saved.get("username") != username or saved.get("is_complete"):
            self.drafts.clear()
            return False

        self.form_data = empty_form()
        self.form_data.update(
            username=saved.get("username") or "",
            address=saved.get("address") or "",
            birthdate=saved.get("birthdate") or "",
            aboutYou=saved.get("about_you") or "",
        )
        self.form_data.update(address_parts_to_form(parse_address(self.form_data["address"])))
        self.submission_id = submission_id
        logger.info("Restored remote submission %s", submission_id)
        return True

    async def refresh_config(self) -> None:
        """Re-read the layout; a step that disappeared is skipped."""
        try:
            self.config = await self.client.fetch_form_config()
        except ApiError as exc:
            logger.warning("Keeping current form configuration: %s", exc.message)
            return
        if not self.is_finished and self.current_step not in self.steps:
            self.current_step = self._snap_down(self.current_step)

    # ── Editing ──────────────────────────────────────────────

    def set_field(self, name: str, value: str) -> None:
        if name not in FORM_FIELDS:
            raise KeyError(name)
        self.form_data[name] = value
        self.field_errors.pop(name, None)
        if name in ADDRESS_PARTS:
            self.form_data["address"] = combine_address(address_parts_from_form(self.form_data))
        self._save_local()

    def _save_local(self) -> None:
        blob = {k: v for k, v in self.form_data.items() if k != "password"}
        self.drafts.save(
            **{
                FORM_ID_KEY: self.submission_id,
                USERNAME_KEY: self.form_data["username"] or None,
                STEP_KEY: None if self.is_finished else self.current_step,
                FORM_DATA_KEY: blob,
            }
        )

    # ── Validation ───────────────────────────────────────────

    def validate_step(self, step: int) -> dict[str, str]:
        """Per-field error messages for ``step`` (empty when valid)."""
        errors: dict[str, str] = {}
        for field in self.fields_for_step(step):
            # The stored password is immutable once the submission exists
            if field == "password" and self.submission_id is not None:
                continue
            value = self.form_data.get(field, "")
            if field == "birthdate":
                check = validate_birthdate(value)
                if not check.valid:
                    errors[field] = check.reason
            elif not value.strip():
                errors[field] = f"{FIELD_LABELS[field]} is required."
        return errors

    # ── Persistence ──────────────────────────────────────────

    def _payload(self, is_complete: bool) -> dict:
        data = {"username": self.form_data["username"], "isComplete": is_complete}
        if self.submission_id is None:
            data["password"] = self.form_data["password"]

        for key in ("address", "birthdate", "aboutYou"):
            setting = self.config.fields.get(key)
            if not setting or not setting.enabled:
                continue
            if key == "address":
                data[key] = combine_address(address_parts_from_form(self.form_data))
            elif key == "birthdate":
                if self.form_data[key]:
                    data[key] = self.form_data[key]
            else:
                data[key] = self.form_data[key]
        return data

    async def _persist(self, is_complete: bool) -> bool:
        payload = self._payload(is_complete)
        try:
            if self.submission_id:
                await self.client.update_submission(self.submission_id, payload)
            else:
                self.submission_id = await self.client.create_submission(payload)
        except ApiError as exc:
            logger.error("Error saving form data: %s", exc.message)
            self.general_error = SUBMIT_ERROR if is_complete else SAVE_ERROR
            self._save_local()
            return False
        return True

    # ── Transitions ──────────────────────────────────────────

    async def next(self) -> bool:
        if self.action != "next":
            raise InvalidTransitionError(f"Cannot advance from step {self.current_step}")

        self.general_error = None
        self.field_errors = self.validate_step(self.current_step)
        if self.field_errors:
            return False

        if not await self._persist(is_complete=False):
            return False

        self.current_step = min(s for s in self.steps if s > self.current_step)
        self._save_local()
        return True

    def previous(self) -> bool:
        if self.is_finished:
            raise InvalidTransitionError("Cannot go back from the thank-you step")
        lower = [s for s in self.steps if s < self.current_step]
        if not lower:
            return False
        self.current_step = lower[-1]
        self.field_errors = {}
        self.general_error = None
        self._save_local()
        return True

    async def submit(self) -> bool:
        if self.action != "submit":
            raise InvalidTransitionError(f"Cannot submit from step {self.current_step}")

        self.general_error = None
        for step in self.steps:
            errors = self.validate_step(step)
            if errors:
                if step != self.current_step:
                    self.current_step = step
                    self.general_error = FIX_ERRORS
                self.field_errors = errors
                return False
        self.field_errors = {}

        if not await self._persist(is_complete=True):
            return False

        logger.info("Submission %s complete", self.submission_id)
        self.drafts.clear()
        self.current_step = THANK_YOU_STEP
        return True

    async def advance(self) -> bool:
        """Run whichever action the current step offers."""
        if self.action == "submit":
            return await self.submit()
        return await self.next()

    def restart(self) -> None:
        self.drafts.clear()
        self.form_data = empty_form()
        self.submission_id = None
        self.field_errors = {}
        self.general_error = None
        self.current_step = FIRST_STEP
