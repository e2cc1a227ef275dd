"""Aggregate model imports for Alembic auto-detection."""

from formwizard.models.form_config import FormConfigRow  # noqa: F401
from formwizard.models.submission import FormSubmission  # noqa: F401
