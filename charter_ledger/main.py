"""
Charter Ledger: FastAPI application.

Entry point of the journal posting service. All routers are
registered here.
"""

from fastapi import FastAPI

from charter_ledger.config import get_settings
from charter_ledger.logging_config import configure_logging
from charter_ledger.api.health import router as health_router
from charter_ledger.api.accounts import router as accounts_router
from charter_ledger.api.journal import router as journal_router
from charter_ledger.api.events import router as events_router
from charter_ledger.api.periods import router as periods_router
from charter_ledger.api.settings import router as settings_router
from charter_ledger.api.reports import router as reports_router
from charter_ledger.api.year_end import router as year_end_router

settings = get_settings()
configure_logging()

app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="Double-entry journal posting engine for a yacht-charter back office",
)

# Register routers
app.include_router(health_router)
app.include_router(accounts_router)
app.include_router(journal_router)
app.include_router(events_router)
app.include_router(periods_router)
app.include_router(settings_router)
app.include_router(reports_router)
app.include_router(year_end_router)
