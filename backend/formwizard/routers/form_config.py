"""Form configuration router — the admin-editable field layout.

Endpoints:
    GET  /api/form-config          Current layout
    POST /api/update-form-config   Replace the layout (400 if invalid)
"""

from fastapi import APIRouter, Body, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from formwizard.database import get_db
from formwizard.schemas.form_config import ConfigUpdateResponse, FieldConfig
from formwizard.services.config_store import field_config_store

router = APIRouter()


@router.get("/form-config", response_model=FieldConfig)
async def get_form_config():
    return field_config_store.get()


@router.post("/update-form-config", response_model=ConfigUpdateResponse)
async def update_form_config(
    candidate: dict | None = Body(default=None),
    db: AsyncSession = Depends(get_db),
):
    """Validate and store a new layout.

    Structure and panel coverage are checked by the store so the
    rejection message names the offending field or panel.
    """
    await field_config_store.update(db, candidate)
    return ConfigUpdateResponse(success=True, message="Configuration updated successfully")
