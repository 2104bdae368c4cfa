"""S3 blob storage for documents, report attachments and generated PDFs."""

from __future__ import annotations

import re
import uuid

import boto3
import structlog
from botocore.config import Config as BotoConfig
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import Session

from invplatform.core.config import settings

logger = structlog.get_logger()

_UNSAFE_CHARS = re.compile(r"[^a-zA-Z0-9_.\-]")
_PENDING_DELETES = "storage_pending_deletes"


def _get_s3_client():
    """Create a boto3 S3 client configured for MinIO / AWS."""
    return boto3.client(
        "s3",
        endpoint_url=settings.AWS_S3_ENDPOINT_URL,
        aws_access_key_id=settings.AWS_ACCESS_KEY_ID,
        aws_secret_access_key=settings.AWS_SECRET_ACCESS_KEY,
        region_name=settings.AWS_S3_REGION,
        config=BotoConfig(signature_version="s3v4"),
    )


def sanitize_filename(name: str | None) -> str:
    cleaned = _UNSAFE_CHARS.sub("_", name or "")
    return cleaned or "file"


def build_key(prefix: str, file_name: str) -> str:
    """Unique object key: ``{prefix}/{uuid}_{sanitized name}``."""
    return f"{prefix.rstrip('/')}/{uuid.uuid4().hex}_{sanitize_filename(file_name)}"


def upload_bytes(key: str, data: bytes, content_type: str | None = None) -> str:
    extra = {"ContentType": content_type} if content_type else {}
    _get_s3_client().put_object(Bucket=settings.AWS_S3_BUCKET, Key=key, Body=data, **extra)
    logger.info("s3_object_uploaded", key=key, size=len(data))
    return key


def download_bytes(key: str) -> bytes:
    response = _get_s3_client().get_object(Bucket=settings.AWS_S3_BUCKET, Key=key)
    return response["Body"].read()


def delete_object(key: str) -> bool:
    """Delete a blob. Failures are logged, not raised; returns whether it succeeded."""
    try:
        _get_s3_client().delete_object(Bucket=settings.AWS_S3_BUCKET, Key=key)
    except Exception as exc:
        logger.warning("s3_delete_failed", key=key, error=str(exc))
        return False
    logger.info("s3_object_deleted", key=key)
    return True


def _delete_pending(session: Session) -> None:
    for key in session.info.pop(_PENDING_DELETES, []):
        delete_object(key)


def _discard_pending(session: Session) -> None:
    keys = session.info.pop(_PENDING_DELETES, [])
    if keys:
        logger.info("s3_delete_discarded", count=len(keys))


def delete_after_commit(db: AsyncSession, keys: list[str]) -> None:
    """Delete blobs once the session commits. A rollback keeps them."""
    if not keys:
        return
    session = db.sync_session
    if not event.contains(session, "after_commit", _delete_pending):
        event.listen(session, "after_commit", _delete_pending)
        event.listen(session, "after_rollback", _discard_pending)
    session.info.setdefault(_PENDING_DELETES, []).extend(keys)
