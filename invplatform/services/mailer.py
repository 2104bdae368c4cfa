"""Transactional email: Jinja2 templates rendered and sent through AWS SES."""

from __future__ import annotations

from email.message import EmailMessage
from functools import lru_cache
from pathlib import Path
from typing import Any

import boto3
import structlog
from jinja2 import Environment, FileSystemLoader

from invplatform.core.config import settings

logger = structlog.get_logger()

_TEMPLATES_DIR = Path(__file__).resolve().parent.parent / "templates" / "email"


@lru_cache(maxsize=1)
def _get_env() -> Environment:
    return Environment(loader=FileSystemLoader(str(_TEMPLATES_DIR)), autoescape=True)


def render_template(template: str, context: dict[str, Any]) -> str:
    return _get_env().get_template(f"{template}.html").render(
        platform_url=settings.FRONTEND_URL,
        **context,
    )


def _get_ses_client():
    return boto3.client(
        "ses",
        region_name=settings.AWS_SES_REGION,
        aws_access_key_id=settings.AWS_ACCESS_KEY_ID,
        aws_secret_access_key=settings.AWS_SECRET_ACCESS_KEY,
    )


def send_email(
    recipient: str,
    subject: str,
    template: str,
    context: dict[str, Any],
    attachment: tuple[str, bytes] | None = None,
) -> bool:
    """Send one email. Returns False when email is not configured (skipped).

    SES errors propagate so the caller can schedule a retry.
    """
    if not settings.EMAIL_FROM:
        logger.debug("email_not_configured_skipping", email=recipient, template=template)
        return False

    html_body = render_template(template, context)
    ses = _get_ses_client()

    if attachment is None:
        ses.send_email(
            Source=settings.EMAIL_FROM,
            Destination={"ToAddresses": [recipient]},
            Message={
                "Subject": {"Data": subject},
                "Body": {"Html": {"Data": html_body}},
            },
        )
    else:
        file_name, payload = attachment
        message = EmailMessage()
        message["Subject"] = subject
        message["From"] = settings.EMAIL_FROM
        message["To"] = recipient
        message.set_content("This message contains HTML content.")
        message.add_alternative(html_body, subtype="html")
        message.add_attachment(
            payload, maintype="application", subtype="pdf", filename=file_name
        )
        ses.send_raw_email(
            Source=settings.EMAIL_FROM,
            Destinations=[recipient],
            RawMessage={"Data": message.as_bytes()},
        )

    logger.info("email_sent", email=recipient, template=template)
    return True
