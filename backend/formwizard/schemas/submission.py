"""Pydantic schemas for wizard submissions.

Request bodies come from the wizard client in camelCase
(``aboutYou``, ``isComplete``); the snake_case column names are
accepted too. Every field is optional so the same schema serves
create (POST) and partial update (PUT); the store decides which
fields are required.
"""

from datetime import datetime

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class SubmissionIn(BaseModel):
    model_config = ConfigDict(extra="ignore")

    username: str | None = None
    password: str | None = None
    address: str | None = None
    birthdate: str | None = None
    about_you: str | None = Field(
        default=None, validation_alias=AliasChoices("aboutYou", "about_you")
    )
    is_complete: bool = Field(
        default=False, validation_alias=AliasChoices("isComplete", "is_complete")
    )


class SubmissionSaved(BaseModel):
    success: bool = True
    message: str
    id: str


class SubmissionOut(BaseModel):
    """A stored submission with ``password`` replaced by the mask."""
    model_config = ConfigDict(from_attributes=True)

    id: str
    username: str
    password: str
    address: str | None = None
    birthdate: str | None = None
    about_you: str | None = None
    is_complete: bool
    created_at: datetime | None = None
    last_updated: datetime
