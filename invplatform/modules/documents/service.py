"""Startup document library backed by S3."""

from __future__ import annotations

import uuid

import structlog
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from invplatform.core.errors import BadRequestError, NotFoundError
from invplatform.models.core import Startup
from invplatform.models.enums import DocumentType
from invplatform.models.reports import StartupDocument
from invplatform.services import storage

logger = structlog.get_logger()


async def upload_document(
    db: AsyncSession,
    startup: Startup,
    uploaded_by: uuid.UUID,
    file_name: str | None,
    content: bytes,
    content_type: str | None,
    document_type: DocumentType,
) -> StartupDocument:
    if not content:
        raise BadRequestError("Uploaded file is empty.")

    safe_name = storage.sanitize_filename(file_name)
    key = storage.build_key(f"startups/{startup.id}/documents", safe_name)
    storage.upload_bytes(key, content, content_type)

    document = StartupDocument(
        startup_id=startup.id,
        document_type=document_type,
        file_name=safe_name,
        file_key=key,
        content_type=content_type,
        file_size=len(content),
        uploaded_by=uploaded_by,
    )
    db.add(document)
    await db.flush()
    logger.info(
        "document_uploaded",
        document_id=str(document.id),
        startup_id=str(startup.id),
        document_type=document_type.value,
    )
    return document


async def list_documents(
    db: AsyncSession, startup: Startup, document_type: DocumentType | None = None
) -> list[StartupDocument]:
    stmt = (
        select(StartupDocument)
        .where(StartupDocument.startup_id == startup.id)
        .order_by(StartupDocument.created_at.desc())
    )
    if document_type is not None:
        stmt = stmt.where(StartupDocument.document_type == document_type)
    return list((await db.execute(stmt)).scalars().all())


async def delete_document(db: AsyncSession, startup: Startup, document_id: uuid.UUID) -> None:
    document = await db.get(StartupDocument, document_id)
    if document is None or document.startup_id != startup.id:
        raise NotFoundError("Document not found.")

    await db.delete(document)
    await db.flush()
    storage.delete_after_commit(db, [document.file_key])
    logger.info("document_deleted", document_id=str(document_id))
