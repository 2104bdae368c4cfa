"""Error reporting for the API and the notification worker."""

from urllib.parse import parse_qsl, urlencode

import sentry_sdk
import structlog
from sentry_sdk.integrations.celery import CeleryIntegration
from sentry_sdk.integrations.fastapi import FastApiIntegration
from sentry_sdk.integrations.httpx import HttpxIntegration
from sentry_sdk.integrations.sqlalchemy import SqlalchemyIntegration

from invplatform.core.config import settings

logger = structlog.get_logger()

REDACTED = "[REDACTED]"

# Bearer tokens on every route; the Zoho OAuth code and signed state on the callback.
_SECRET_HEADERS = {"authorization", "cookie"}
_SECRET_QUERY_PARAMS = {"code", "state"}


def scrub_event(event: dict, hint: dict) -> dict:
    request = event.get("request") or {}

    headers = request.get("headers") or {}
    for name in list(headers):
        if name.lower() in _SECRET_HEADERS:
            headers[name] = REDACTED

    query = request.get("query_string")
    if isinstance(query, str) and query:
        pairs = [
            (k, REDACTED if k in _SECRET_QUERY_PARAMS else v)
            for k, v in parse_qsl(query, keep_blank_values=True)
        ]
        request["query_string"] = urlencode(pairs)

    return event


def init_sentry(component: str) -> bool:
    """Start Sentry for ``component`` ("api" or "worker"); returns whether it is on."""
    if not settings.SENTRY_DSN:
        logger.info("sentry_disabled", component=component)
        return False

    sentry_sdk.init(
        dsn=settings.SENTRY_DSN,
        environment=settings.SENTRY_ENVIRONMENT,
        release=settings.APP_VERSION,
        traces_sample_rate=0.1 if settings.APP_ENV == "production" else 1.0,
        integrations=[
            FastApiIntegration(transaction_style="endpoint"),
            SqlalchemyIntegration(),
            CeleryIntegration(monitor_beat_tasks=True),
            HttpxIntegration(),
        ],
        send_default_pii=False,
        before_send=scrub_event,
    )
    sentry_sdk.set_tag("component", component)
    logger.info("sentry_initialized", component=component, environment=settings.SENTRY_ENVIRONMENT)
    return True
