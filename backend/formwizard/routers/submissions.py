"""Submissions router — wizard saves and the data view.

Endpoints:
    POST /api/submit-form             Create a submission (201)
    PUT  /api/update-form/{id}        Partial update
    GET  /api/form-submission/{id}    One submission, password masked
    GET  /api/form-submissions        All submissions, newest first
"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from formwizard.database import get_db
from formwizard.schemas.submission import SubmissionIn, SubmissionOut, SubmissionSaved
from formwizard.services import submission_store

router = APIRouter()


@router.post(
    "/submit-form",
    response_model=SubmissionSaved,
    status_code=status.HTTP_201_CREATED,
)
async def create_submission(
    body: SubmissionIn,
    db: AsyncSession = Depends(get_db),
):
    submission_id = await submission_store.create_submission(db, body)
    return SubmissionSaved(message="Form data saved successfully", id=submission_id)


@router.put("/update-form/{submission_id}", response_model=SubmissionSaved)
async def update_submission(
    submission_id: str,
    body: SubmissionIn,
    db: AsyncSession = Depends(get_db),
):
    saved = await submission_store.update_submission(db, submission_id, body)
    return SubmissionSaved(message="Form data updated successfully", id=saved.id)


@router.get("/form-submission/{submission_id}", response_model=SubmissionOut)
async def get_submission(
    submission_id: str,
    db: AsyncSession = Depends(get_db),
):
    return await submission_store.get_submission(db, submission_id)


@router.get("/form-submissions", response_model=list[SubmissionOut])
async def list_submissions(db: AsyncSession = Depends(get_db)):
    return await submission_store.list_submissions(db)
