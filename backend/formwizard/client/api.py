"""Async HTTP client for the formwizard API.

Every call is a single request; nothing is retried. Transport failures
and non-2xx responses both raise ApiError carrying the server's
``message`` when it sent one.
"""

import logging
from typing import Any

import httpx

from formwizard.config import settings
from formwizard.schemas.form_config import FieldConfig

logger = logging.getLogger("formwizard.client")


class ApiError(Exception):
    """A request to the formwizard API failed."""

    def __init__(self, message: str, status_code: int | None = None):
        self.message = message
        self.status_code = status_code
        super().__init__(message)

    @property
    def not_found(self) -> bool:
        return self.status_code == 404


class FormWizardClient:
    """Thin wrapper over ``httpx.AsyncClient`` for the six API endpoints.

    Usage:
        async with FormWizardClient("http://localhost:8000") as api:
            config = await api.fetch_form_config()
    """

    def __init__(
        self,
        base_url: str | None = None,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
        timeout: float | None = None,
    ):
        self._http = httpx.AsyncClient(
            base_url=base_url or settings.api_base_url,
            transport=transport,
            timeout=timeout if timeout is not None else settings.request_timeout_seconds,
        )

    async def __aenter__(self) -> "FormWizardClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._http.aclose()

    async def _request(self, method: str, path: str, **kwargs) -> Any:
        try:
            response = await self._http.request(method, path, **kwargs)
        except httpx.HTTPError as exc:
            logger.warning("%s %s failed: %s", method, path, exc)
            raise ApiError(f"Could not reach the server: {exc.__class__.__name__}") from exc

        if response.is_error:
            try:
                message = response.json().get("message") or response.reason_phrase
            except (ValueError, AttributeError):
                message = response.text or response.reason_phrase
            logger.warning("%s %s → %s: %s", method, path, response.status_code, message)
            raise ApiError(message, status_code=response.status_code)

        return response.json()

    # ── Field configuration ──────────────────────────────────

    async def fetch_form_config(self) -> FieldConfig:
        data = await self._request("GET", "/api/form-config")
        return FieldConfig.model_validate(data)

    async def update_form_config(self, config: FieldConfig | dict) -> dict:
        body = config.model_dump() if isinstance(config, FieldConfig) else config
        return await self._request("POST", "/api/update-form-config", json=body)

    # ── Submissions ──────────────────────────────────────────

    async def fetch_submission(self, submission_id: str) -> dict:
        return await self._request("GET", f"/api/form-submission/{submission_id}")

    async def create_submission(self, data: dict) -> str:
        """POST a new submission and return the id assigned by the store."""
        body = await self._request("POST", "/api/submit-form", json=data)
        return body["id"]

    async def update_submission(self, submission_id: str, data: dict) -> str:
        body = await self._request("PUT", f"/api/update-form/{submission_id}", json=data)
        return body["id"]

    async def list_submissions(self) -> list[dict]:
        return await self._request("GET", "/api/form-submissions")
