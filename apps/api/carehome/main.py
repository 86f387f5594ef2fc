"""FastAPI application: care home records, care files and incident reporting."""

import logging
import uuid

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from sqlalchemy import text

from carehome.core.config import settings
from carehome.core.rate_limit import limiter
from carehome.db.session import engine
from carehome.routers import care_files, files, incidents, residents, trust_reports

logger = logging.getLogger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"

if settings.SENTRY_DSN and settings.ENV != "dev":
    import sentry_sdk
    from sentry_sdk.integrations.fastapi import FastApiIntegration
    from sentry_sdk.integrations.sqlalchemy import SqlalchemyIntegration

    sentry_sdk.init(
        dsn=settings.SENTRY_DSN,
        environment=settings.ENV,
        release=settings.VERSION,
        integrations=[
            FastApiIntegration(transaction_style="endpoint"),
            SqlalchemyIntegration(),
        ],
        traces_sample_rate=0.1,
        # Resident data must never leave the service
        send_default_pii=False,
        max_request_body_size="never",
    )
    logger.info("Sentry initialized for error tracking")


app = FastAPI(
    title="Care Home API",
    description="Multi-tenant care home records, care files and incident reporting",
    version=settings.VERSION,
    docs_url="/docs" if settings.ENV == "dev" else None,
    redoc_url="/redoc" if settings.ENV == "dev" else None,
)

app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
app.add_middleware(SlowAPIMiddleware)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,  # session cookie
    allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "X-Requested-With", REQUEST_ID_HEADER],
    expose_headers=[REQUEST_ID_HEADER, "Content-Disposition"],
)


@app.middleware("http")
async def request_id_middleware(request: Request, call_next):
    """Echo (or mint) a request id so worker and API logs can be correlated."""
    request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex
    request.state.request_id = request_id
    response = await call_next(request)
    response.headers[REQUEST_ID_HEADER] = request_id
    return response


app.include_router(residents.router, prefix="/residents", tags=["residents"])
# Also mounts /residents/{id}/care-files
app.include_router(care_files.router)
# Also mounts /residents/{id}/incidents
app.include_router(incidents.router)
app.include_router(trust_reports.router)
app.include_router(files.router)


@app.get("/healthz")
def liveness():
    return {"status": "ok"}


@app.get("/health")
def health():
    """
    Readiness: database reachable, plus the document pipeline configuration.

    An unconfigured renderer does not fail the check; records are still
    saved and their PDFs are marked failed.
    """
    with engine.connect() as conn:
        conn.execute(text("SELECT 1"))
    return {
        "status": "ok",
        "env": settings.ENV,
        "version": settings.VERSION,
        "pdf_renderer": "configured" if settings.pdf_generation_enabled else "disabled",
        "storage_backend": settings.STORAGE_BACKEND,
    }
