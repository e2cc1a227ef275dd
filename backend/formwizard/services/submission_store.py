"""Submission store — create / update / read wizard submissions.

Handles:
  - Credential checks on create (username + password both non-blank)
  - Hashing the password before it reaches the table
  - Partial updates: only fields present in the request body change
  - Masking the password on every row handed back to a client

Store failures (SQLAlchemyError) surface as StoreUnavailableError.
"""

import logging
from datetime import datetime

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from formwizard.auth.password import hash_password
from formwizard.config import settings
from formwizard.middleware.exceptions import (
    InvalidInputError,
    StoreUnavailableError,
    SubmissionNotFoundError,
)
from formwizard.models.submission import FormSubmission
from formwizard.schemas.submission import SubmissionIn, SubmissionOut

logger = logging.getLogger("formwizard.submissions")

# Columns a client may set; credentials are handled separately
OPTIONAL_COLUMNS = ("address", "birthdate", "about_you")


def mask(row: FormSubmission) -> SubmissionOut:
    """Serialize a row with the password replaced by the fixed mask."""
    return SubmissionOut(
        id=row.id,
        username=row.username,
        password=settings.password_mask,
        address=row.address,
        birthdate=row.birthdate,
        about_you=row.about_you,
        is_complete=bool(row.is_complete),
        created_at=row.created_at,
        last_updated=row.last_updated,
    )


def _optional_values(body: SubmissionIn) -> dict:
    """Optional columns the client actually sent (blank birthdate → None)."""
    sent = body.model_dump(include=set(OPTIONAL_COLUMNS), exclude_unset=True)
    if "birthdate" in sent:
        sent["birthdate"] = sent["birthdate"] or None
    return sent


async def create_submission(db: AsyncSession, body: SubmissionIn) -> str:
    """Insert a new submission and return its id.

    Raises:
        InvalidInputError if username or password is blank.
        StoreUnavailableError on database failure.
    """
    username = (body.username or "").strip()
    if not username or not (body.password or "").strip():
        field = "username" if not username else "password"
        raise InvalidInputError(
            "Username and password are required for new submissions.", field=field
        )

    now = datetime.utcnow()
    row = FormSubmission(
        username=username,
        password_hash=hash_password(body.password),
        is_complete=body.is_complete,
        created_at=now,
        last_updated=now,
        **_optional_values(body),
    )
    try:
        db.add(row)
        await db.flush()
    except SQLAlchemyError as exc:
        await db.rollback()
        logger.exception("Error saving submission")
        raise StoreUnavailableError(f"Error saving form data: {exc.__class__.__name__}") from exc

    logger.info("Created submission %s for %s", row.id, username)
    return row.id


async def _get_row(db: AsyncSession, submission_id: str) -> FormSubmission | None:
    try:
        result = await db.execute(
            select(FormSubmission).where(FormSubmission.id == submission_id)
        )
    except SQLAlchemyError as exc:
        logger.exception("Error fetching submission %s", submission_id)
        raise StoreUnavailableError(
            f"Failed to fetch form submission: {exc.__class__.__name__}"
        ) from exc
    return result.scalar_one_or_none()


async def update_submission(
    db: AsyncSession, submission_id: str, body: SubmissionIn
) -> SubmissionOut:
    """Merge the fields present in ``body`` into an existing submission.

    The stored password never changes on update; ``username`` is applied
    only when sent and non-blank. ``is_complete`` always follows the
    request body, so an update without it reopens the submission.

    Raises:
        SubmissionNotFoundError for an unknown id.
        StoreUnavailableError on database failure.
    """
    row = await _get_row(db, submission_id)
    if row is None:
        raise SubmissionNotFoundError(
            submission_id, "Form submission not found for update."
        )

    for column, value in _optional_values(body).items():
        setattr(row, column, value)
    if body.username and body.username.strip():
        row.username = body.username.strip()
    row.is_complete = body.is_complete
    row.last_updated = datetime.utcnow()

    try:
        await db.flush()
    except SQLAlchemyError as exc:
        await db.rollback()
        logger.exception("Error updating submission %s", submission_id)
        raise StoreUnavailableError(f"Error updating form data: {exc.__class__.__name__}") from exc

    logger.info(
        "Updated submission %s (complete=%s)", submission_id, row.is_complete
    )
    return mask(row)


async def get_submission(db: AsyncSession, submission_id: str) -> SubmissionOut:
    row = await _get_row(db, submission_id)
    if row is None:
        raise SubmissionNotFoundError(submission_id)
    return mask(row)


async def list_submissions(db: AsyncSession) -> list[SubmissionOut]:
    """All submissions, most recently updated first, passwords masked."""
    try:
        result = await db.execute(
            select(FormSubmission).order_by(
                FormSubmission.last_updated.desc(), FormSubmission.created_at.desc()
            )
        )
    except SQLAlchemyError as exc:
        logger.exception("Error listing submissions")
        raise StoreUnavailableError(
            f"Failed to fetch form submissions: {exc.__class__.__name__}"
        ) from exc
    return [mask(row) for row in result.scalars().all()]
