import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from formwizard import __version__
from formwizard.config import settings
from formwizard.database import async_session, create_tables
from formwizard.logging_config import configure_logging
from formwizard.middleware.exceptions import register_exception_handlers
from formwizard.routers import form_config, health, submissions
from formwizard.services.config_store import field_config_store

logger = logging.getLogger("formwizard")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup: create tables (non-production) and load the field layout."""
    configure_logging()
    if settings.environment != "production":
        await create_tables()
    async with async_session() as db:
        config = await field_config_store.load(db)
    logger.info(
        "formwizard v%s started (panel 2=%s, panel 3=%s)",
        __version__,
        config.enabled_on(2),
        config.enabled_on(3),
    )
    yield
    logger.info("formwizard shutdown")


app = FastAPI(
    title="formwizard",
    description="Configurable multi-step onboarding form",
    version=__version__,
    lifespan=lifespan,
)

# ── Exception Handlers ───────────────────────────────────────
register_exception_handlers(app)

# ── Middleware ───────────────────────────────────────────────
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins.split(","),
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization"],
)

# ── Routers ──────────────────────────────────────────────────
app.include_router(health.router)
app.include_router(form_config.router, prefix="/api", tags=["form-config"])
app.include_router(submissions.router, prefix="/api", tags=["submissions"])
