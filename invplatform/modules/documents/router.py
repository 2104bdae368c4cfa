"""Startup documents API router (founder only)."""

from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile
from sqlalchemy.ext.asyncio import AsyncSession

from invplatform.auth.dependencies import get_current_startup, get_current_user
from invplatform.core.database import get_db
from invplatform.models.core import Startup
from invplatform.models.enums import DocumentType
from invplatform.modules.documents import service
from invplatform.modules.documents.schemas import DocumentResponse
from invplatform.schemas.auth import CurrentUser
from invplatform.schemas.common import ApiResponse

router = APIRouter(prefix="/startup/documents", tags=["documents"])


@router.post("", response_model=ApiResponse[DocumentResponse], status_code=201)
async def upload_document(
    file: UploadFile = File(...),
    document_type: DocumentType = Form(..., alias="documentType"),
    current_user: CurrentUser = Depends(get_current_user),
    startup: Startup = Depends(get_current_startup),
    db: AsyncSession = Depends(get_db),
) -> ApiResponse[DocumentResponse]:
    content = await file.read()
    document = await service.upload_document(
        db,
        startup,
        uploaded_by=current_user.user_id,
        file_name=file.filename,
        content=content,
        content_type=file.content_type,
        document_type=document_type,
    )
    return ApiResponse(
        message="Document uploaded",
        data=DocumentResponse.model_validate(document),
    )


@router.get("", response_model=ApiResponse[list[DocumentResponse]])
async def list_documents(
    document_type: DocumentType | None = Query(None, alias="documentType"),
    startup: Startup = Depends(get_current_startup),
    db: AsyncSession = Depends(get_db),
) -> ApiResponse[list[DocumentResponse]]:
    documents = await service.list_documents(db, startup, document_type)
    return ApiResponse(
        message="Documents fetched",
        data=[DocumentResponse.model_validate(d) for d in documents],
    )


@router.delete("/{document_id}", response_model=ApiResponse[None])
async def delete_document(
    document_id: uuid.UUID,
    startup: Startup = Depends(get_current_startup),
    db: AsyncSession = Depends(get_db),
) -> ApiResponse[None]:
    await service.delete_document(db, startup, document_id)
    return ApiResponse(message="Document deleted")
