"""Wizard controller tests — driven through the real API over ASGI."""

import httpx
import pytest

from formwizard.client.api import FormWizardClient
from formwizard.client.drafts import FORM_DATA_KEY, FORM_ID_KEY, STEP_KEY, USERNAME_KEY
from formwizard.client.wizard import InvalidTransitionError, WizardController
from formwizard.schemas.form_config import FieldConfig
from formwizard.services.config_store import field_config_store

ONLY_ABOUT_YOU = {
    "fields": {
        "address": {"enabled": False, "panel": 2},
        "birthdate": {"enabled": False, "panel": 2},
        "aboutYou": {"enabled": True, "panel": 3},
    }
}


async def _mounted(api, drafts) -> WizardController:
    wizard = WizardController(api, drafts)
    await wizard.mount()
    return wizard


def _fill(wizard: WizardController, **values) -> None:
    for name, value in values.items():
        wizard.set_field(name, value)


async def _through_step_1(wizard: WizardController) -> None:
    _fill(wizard, username="alice", password="x")
    assert await wizard.next() is True


@pytest.mark.client
@pytest.mark.asyncio
class TestWizardFlow:

    async def test_full_run_with_default_layout(self, api, drafts):
        wizard = await _mounted(api, drafts)
        assert wizard.current_step == 1
        assert wizard.action == "next"

        await _through_step_1(wizard)
        assert wizard.current_step == 2
        assert wizard.submission_id

        _fill(
            wizard,
            streetAddress="1 Main St", city="Springfield", state="IL", zipCode="62704",
            birthdate="1990-05-14",
        )
        assert await wizard.next() is True
        assert wizard.current_step == 3
        assert wizard.action == "submit"

        _fill(wizard, aboutYou="I like trains")
        assert await wizard.submit() is True
        assert wizard.current_step == 4
        assert wizard.action is None
        assert drafts.get(FORM_ID_KEY) is None

        saved = await api.fetch_submission(wizard.submission_id)
        assert saved["is_complete"] is True
        assert saved["address"] == "1 Main St, Springfield, IL 62704"
        assert saved["birthdate"] == "1990-05-14"
        assert saved["about_you"] == "I like trains"
        assert saved["password"] == "*** MASKED ***"

    async def test_blank_password_never_calls_create(self, api, drafts, monkeypatch):
        calls = []

        async def spy(data):
            calls.append(data)
            return "unused"

        monkeypatch.setattr(api, "create_submission", spy)
        wizard = await _mounted(api, drafts)
        _fill(wizard, username="alice", password="")

        assert await wizard.next() is False
        assert wizard.current_step == 1
        assert wizard.field_errors == {"password": "Password is required."}
        assert calls == []

    async def test_invalid_birthdate_stays_on_step(self, api, drafts):
        wizard = await _mounted(api, drafts)
        await _through_step_1(wizard)
        _fill(
            wizard,
            streetAddress="1 Main St", city="Springfield", state="IL", zipCode="62704",
            birthdate="2023-02-30",
        )
        assert await wizard.next() is False
        assert wizard.current_step == 2
        assert set(wizard.field_errors) == {"birthdate"}

    async def test_missing_address_parts_are_reported_per_field(self, api, drafts):
        wizard = await _mounted(api, drafts)
        await _through_step_1(wizard)
        _fill(wizard, streetAddress="1 Main St", birthdate="1990-05-14")
        assert await wizard.next() is False
        assert set(wizard.field_errors) == {"city", "state", "zipCode"}
        assert wizard.field_errors["zipCode"] == "Zip Code is required."

    async def test_previous_does_not_save(self, api, drafts):
        wizard = await _mounted(api, drafts)
        await _through_step_1(wizard)
        _fill(wizard, birthdate="not a date")

        assert wizard.previous() is True
        assert wizard.current_step == 1
        assert wizard.previous() is False
        assert wizard.current_step == 1

    async def test_only_about_you_skips_panel_2(self, api, drafts, monkeypatch):
        monkeypatch.setattr(
            field_config_store, "_current", FieldConfig.model_validate(ONLY_ABOUT_YOU)
        )
        wizard = await _mounted(api, drafts)
        assert wizard.steps == [1, 3]

        visited = [wizard.current_step]
        await _through_step_1(wizard)
        visited.append(wizard.current_step)
        assert wizard.action == "submit"
        with pytest.raises(InvalidTransitionError):
            await wizard.next()

        _fill(wizard, aboutYou="hello")
        assert await wizard.advance() is True
        visited.append(wizard.current_step)
        assert visited == [1, 3, 4]

    async def test_previous_skips_empty_panel(self, api, drafts, monkeypatch):
        monkeypatch.setattr(
            field_config_store, "_current", FieldConfig.model_validate(ONLY_ABOUT_YOU)
        )
        wizard = await _mounted(api, drafts)
        await _through_step_1(wizard)
        assert wizard.current_step == 3
        wizard.previous()
        assert wizard.current_step == 1

    async def test_all_fields_disabled_submits_from_step_1(self, api, drafts, default_layout):
        for field in default_layout["fields"].values():
            field["enabled"] = False
        await api.update_form_config(default_layout)

        wizard = await _mounted(api, drafts)
        assert wizard.action == "submit"
        _fill(wizard, username="bob", password="pw")
        assert await wizard.submit() is True
        assert wizard.current_step == 4

        rows = await api.list_submissions()
        assert rows[0]["username"] == "bob"
        assert rows[0]["is_complete"] is True
        assert rows[0]["address"] is None

    async def test_disabled_fields_are_not_sent(self, api, drafts, default_layout):
        default_layout["fields"]["birthdate"]["enabled"] = False
        await api.update_form_config(default_layout)

        wizard = await _mounted(api, drafts)
        await _through_step_1(wizard)
        _fill(wizard, streetAddress="1 Main St", city="Springfield", state="IL", zipCode="62704")
        wizard.form_data["birthdate"] = "1990-05-14"
        assert await wizard.next() is True

        saved = await api.fetch_submission(wizard.submission_id)
        assert saved["birthdate"] is None
        assert saved["address"] == "1 Main St, Springfield, IL 62704"

    async def test_restart_clears_everything(self, api, drafts):
        wizard = await _mounted(api, drafts)
        await _through_step_1(wizard)
        wizard.restart()

        assert wizard.current_step == 1
        assert wizard.submission_id is None
        assert wizard.form_data["username"] == ""
        assert drafts.get(FORM_DATA_KEY) is None
        assert drafts.get(FORM_ID_KEY) is None


@pytest.mark.client
@pytest.mark.asyncio
class TestWizardResume:

    async def test_local_draft_remembers_step(self, api, drafts):
        wizard = await _mounted(api, drafts)
        await _through_step_1(wizard)
        _fill(wizard, streetAddress="1 Main St")

        resumed = await _mounted(api, drafts)
        assert resumed.current_step == 2
        assert resumed.submission_id == wizard.submission_id
        assert resumed.form_data["streetAddress"] == "1 Main St"
        assert resumed.form_data["password"] == ""

    async def test_resumed_wizard_can_step_back_to_credentials(self, api, drafts):
        wizard = await _mounted(api, drafts)
        await _through_step_1(wizard)

        resumed = await _mounted(api, drafts)
        assert resumed.current_step == 2
        assert resumed.previous() is True
        assert resumed.current_step == 1

        assert await resumed.next() is True
        assert resumed.field_errors == {}
        assert resumed.current_step == 2
        assert resumed.submission_id == wizard.submission_id

    async def test_local_draft_never_holds_password(self, api, drafts):
        wizard = await _mounted(api, drafts)
        _fill(wizard, username="alice", password="hunter2")
        assert "password" not in drafts.get(FORM_DATA_KEY)

    async def test_remote_resume_uses_stored_step(self, api, drafts):
        submission_id = await api.create_submission(
            {"username": "alice", "password": "x", "birthdate": "1990-05-14"}
        )
        drafts.save(**{FORM_ID_KEY: submission_id, USERNAME_KEY: "alice", STEP_KEY: 3})

        wizard = await _mounted(api, drafts)
        assert wizard.current_step == 3
        assert wizard.form_data["birthdate"] == "1990-05-14"

    @pytest.mark.parametrize("stored_step", [None, "three", 7])
    async def test_remote_resume_derives_step_from_data(self, api, drafts, stored_step):
        submission_id = await api.create_submission(
            {"username": "alice", "password": "x", "birthdate": "1990-05-14"}
        )
        drafts.save(**{FORM_ID_KEY: submission_id, USERNAME_KEY: "alice", STEP_KEY: stored_step})

        wizard = await _mounted(api, drafts)
        assert wizard.current_step == 2

    async def test_remote_resume_splits_address(self, api, drafts):
        submission_id = await api.create_submission(
            {"username": "alice", "password": "x", "address": "1 Main St, Springfield, IL 62704"}
        )
        drafts.save(**{FORM_ID_KEY: submission_id, USERNAME_KEY: "alice"})

        wizard = await _mounted(api, drafts)
        assert wizard.form_data["city"] == "Springfield"
        assert wizard.form_data["zipCode"] == "62704"

    async def test_username_mismatch_starts_over(self, api, drafts):
        submission_id = await api.create_submission(
            {"username": "alice", "password": "x", "aboutYou": "hi"}
        )
        drafts.save(**{FORM_ID_KEY: submission_id, USERNAME_KEY: "mallory", STEP_KEY: 3})

        wizard = await _mounted(api, drafts)
        assert wizard.current_step == 1
        assert wizard.submission_id is None
        assert drafts.get(FORM_ID_KEY) is None

    async def test_completed_submission_is_not_resumed(self, api, drafts):
        submission_id = await api.create_submission(
            {"username": "alice", "password": "x", "isComplete": True}
        )
        drafts.save(**{FORM_ID_KEY: submission_id, USERNAME_KEY: "alice", STEP_KEY: 2})

        wizard = await _mounted(api, drafts)
        assert wizard.current_step == 1
        assert wizard.submission_id is None

    async def test_unknown_remote_id_starts_over(self, api, drafts):
        drafts.save(**{FORM_ID_KEY: "gone", USERNAME_KEY: "alice", STEP_KEY: 2})
        wizard = await _mounted(api, drafts)
        assert wizard.current_step == 1
        assert drafts.get(FORM_ID_KEY) is None

    async def test_expired_remote_draft_is_not_fetched(self, api, drafts, monkeypatch):
        submission_id = await api.create_submission(
            {"username": "alice", "password": "x", "aboutYou": "hi"}
        )
        drafts.save(**{FORM_ID_KEY: submission_id, USERNAME_KEY: "alice"})

        async def fail(_id):
            raise AssertionError("expired drafts must not be fetched")

        monkeypatch.setattr(api, "fetch_submission", fail)
        wizard = WizardController(api, drafts, draft_ttl_days=-1)
        await wizard.mount()
        assert wizard.current_step == 1

    async def test_submit_sends_user_back_to_failing_step(self, api, drafts):
        submission_id = await api.create_submission({"username": "alice", "password": "x"})
        drafts.save(**{
            FORM_ID_KEY: submission_id,
            USERNAME_KEY: "alice",
            STEP_KEY: 3,
            FORM_DATA_KEY: {
                "username": "alice",
                "streetAddress": "1 Main St", "city": "Springfield",
                "state": "IL", "zipCode": "62704",
                "birthdate": "2999-01-01",
                "aboutYou": "hi",
            },
        })

        wizard = await _mounted(api, drafts)
        assert wizard.current_step == 3
        assert await wizard.submit() is False
        assert wizard.current_step == 2
        assert wizard.field_errors == {"birthdate": "Birthdate cannot be in the future."}
        assert wizard.general_error == "Please correct all validation errors before submitting."

    async def test_step_removed_by_config_change_is_skipped(self, api, drafts, monkeypatch):
        wizard = await _mounted(api, drafts)
        await _through_step_1(wizard)
        assert wizard.current_step == 2

        monkeypatch.setattr(
            field_config_store, "_current", FieldConfig.model_validate(ONLY_ABOUT_YOU)
        )
        await wizard.refresh_config()
        assert wizard.current_step == 1
        _fill(wizard, password="x")
        assert await wizard.next() is True
        assert wizard.current_step == 3


def _failing_transport(default_layout: dict) -> httpx.MockTransport:
    def handler(request: httpx.Request) -> httpx.Response:
        if request.method == "GET" and request.url.path == "/api/form-config":
            return httpx.Response(200, json=default_layout)
        return httpx.Response(
            500, json={"success": False, "message": "Error saving form data: OperationalError"}
        )

    return httpx.MockTransport(handler)


@pytest.mark.client
@pytest.mark.asyncio
class TestWizardFailures:

    async def test_save_failure_keeps_step_and_draft(self, drafts, default_layout):
        async with FormWizardClient("http://test", transport=_failing_transport(default_layout)) as api:
            wizard = await _mounted(api, drafts)
            _fill(wizard, username="alice", password="x")

            assert await wizard.next() is False
            assert wizard.current_step == 1
            assert wizard.submission_id is None
            assert wizard.general_error == "Error saving data. Please try again."
            assert drafts.get(FORM_DATA_KEY)["username"] == "alice"

    async def test_config_fetch_failure_uses_default_layout(self, drafts):
        transport = httpx.MockTransport(lambda request: httpx.Response(503, json={"message": "down"}))
        async with FormWizardClient("http://test", transport=transport) as api:
            wizard = await _mounted(api, drafts)
            assert wizard.steps == [1, 2, 3]
            assert wizard.loading is False
