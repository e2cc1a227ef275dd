"""Submissions viewer — read-only listing of stored submissions."""

import logging
from dataclasses import dataclass
from datetime import datetime

from formwizard.client.api import ApiError, FormWizardClient

logger = logging.getLogger("formwizard.viewer")

NOT_COLLECTED = "Not collected"
LOAD_ERROR = "Error loading data. Please try again later."
NO_DATA = "No submissions found in the database."

COLUMNS = ("ID", "Username", "Address", "Birthdate", "About", "Complete", "Last Updated")


@dataclass(frozen=True)
class SubmissionRow:
    id: str
    username: str
    address: str
    birthdate: str
    about_you: str
    is_complete: bool
    last_updated: str

    def cells(self) -> tuple[str, ...]:
        return (
            self.id,
            self.username,
            self.address,
            self.birthdate,
            self.about_you,
            "yes" if self.is_complete else "no",
            self.last_updated,
        )


def format_timestamp(value: str | None) -> str:
    if not value:
        return "N/A"
    try:
        return datetime.fromisoformat(value).strftime("%Y-%m-%d %H:%M:%S")
    except ValueError:
        return value


def _collected(value) -> str:
    return NOT_COLLECTED if value is None else str(value)


def to_row(submission: dict) -> SubmissionRow:
    return SubmissionRow(
        id=str(submission.get("id", "")),
        username=submission.get("username") or "",
        address=_collected(submission.get("address")),
        birthdate=_collected(submission.get("birthdate")),
        about_you=_collected(submission.get("about_you")),
        is_complete=bool(submission.get("is_complete")),
        last_updated=format_timestamp(submission.get("last_updated")),
    )


class SubmissionsViewer:
    def __init__(self, client: FormWizardClient):
        self.client = client
        self.rows: list[SubmissionRow] = []
        self.error: str | None = None

    async def load(self) -> None:
        try:
            submissions = await self.client.list_submissions()
        except ApiError as exc:
            logger.error("Error fetching submissions: %s", exc.message)
            self.rows, self.error = [], LOAD_ERROR
            return
        self.rows = [to_row(s) for s in submissions]
        self.error = None

    def render(self) -> str:
        """Plain-text table (or the error / empty message)."""
        if self.error:
            return self.error
        if not self.rows:
            return NO_DATA

        table = [COLUMNS] + [row.cells() for row in self.rows]
        widths = [max(len(line[i]) for line in table) for i in range(len(COLUMNS))]
        lines = ["  ".join(cell.ljust(w) for cell, w in zip(line, widths)).rstrip() for line in table]
        lines.insert(1, "  ".join("-" * w for w in widths))
        return "\n".join(lines)
