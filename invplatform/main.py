from contextlib import asynccontextmanager
from collections.abc import AsyncGenerator

import structlog
from fastapi import APIRouter, FastAPI
from fastapi.middleware.cors import CORSMiddleware

from invplatform.core.config import settings
from invplatform.core.errors import register_exception_handlers
from invplatform.middleware.request_context import (
    RequestBodySizeLimitMiddleware,
    RequestContextMiddleware,
)

import invplatform.models  # noqa: F401  register all models at startup

from invplatform.modules.connections.router import founder_router as founder_connections_router
from invplatform.modules.connections.router import investor_router as investor_connections_router
from invplatform.modules.deal_pipeline.router import router as deal_pipeline_router
from invplatform.modules.documents.router import router as documents_router
from invplatform.modules.founder_dashboard.router import router as founder_dashboard_router
from invplatform.modules.integrations.router import router as integrations_router
from invplatform.modules.investments.router import router as investments_router
from invplatform.modules.investors.router import router as investors_router
from invplatform.modules.onboarding.router import router as onboarding_router
from invplatform.modules.reports.router import router as reports_router
from invplatform.modules.startups.router import router as startups_router
from invplatform.core.sentry import init_sentry

# ── Sentry: initialise before the FastAPI app is created ──────────────────────
init_sentry("api")

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncGenerator[None]:
    logger.info("api_starting", env=settings.APP_ENV)
    yield
    from invplatform.core.database import engine

    await engine.dispose()
    logger.info("api_stopped")


_is_prod = settings.APP_ENV == "production"

app = FastAPI(
    title="Investor Platform API",
    description="Relationship management between startup founders and their investors.",
    version="0.1.0",
    docs_url=None if _is_prod else "/docs",
    redoc_url=None if _is_prod else "/redoc",
    openapi_url=None if _is_prod else "/openapi.json",
    lifespan=lifespan,
)

register_exception_handlers(app)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[settings.FRONTEND_URL],
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
    allow_headers=["Authorization", "Content-Type", "Accept", "X-Request-ID"],
    expose_headers=["X-Request-ID"],
)
# Added last = outermost = first to see requests
app.add_middleware(
    RequestBodySizeLimitMiddleware,  # type: ignore[arg-type]
    max_bytes=settings.MAX_REQUEST_BODY_BYTES,
)
app.add_middleware(RequestContextMiddleware)  # type: ignore[arg-type]


# ── Health check (root-level, not under /api) ────────────────────────────────


@app.get("/health")
async def health_check() -> dict:
    """Probe PostgreSQL and Redis."""
    checks: dict[str, dict] = {}

    try:
        from sqlalchemy import text
        from invplatform.core.database import async_session_factory
        async with async_session_factory() as db:
            await db.execute(text("SELECT 1"))
        checks["postgresql"] = {"status": "healthy"}
    except Exception as exc:
        checks["postgresql"] = {"status": "unhealthy", "error": str(exc)}

    try:
        from redis.asyncio import from_url as redis_from_url
        r = redis_from_url(settings.REDIS_URL, socket_connect_timeout=2)
        await r.ping()
        await r.aclose()
        checks["redis"] = {"status": "healthy"}
    except Exception as exc:
        checks["redis"] = {"status": "unhealthy", "error": str(exc)}

    overall = (
        "healthy"
        if all(c["status"] == "healthy" for c in checks.values())
        else "degraded"
    )
    return {"status": overall, "service": "invplatform-api", "checks": checks}


# ── /api router ───────────────────────────────────────────────────────────────

api = APIRouter(prefix="/api")

api.include_router(onboarding_router)
api.include_router(investor_connections_router)
api.include_router(founder_connections_router)
api.include_router(deal_pipeline_router)
api.include_router(investments_router)
api.include_router(investors_router)
api.include_router(documents_router)
api.include_router(reports_router)
api.include_router(founder_dashboard_router)
api.include_router(integrations_router)
api.include_router(startups_router)

app.include_router(api)
