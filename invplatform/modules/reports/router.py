"""Timely reports API router (founder only)."""

from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends, File, Form, UploadFile
from fastapi.exceptions import RequestValidationError
from pydantic import ValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from invplatform.auth.dependencies import get_current_startup, get_current_user
from invplatform.core.database import get_db
from invplatform.models.core import Startup
from invplatform.modules.reports import service
from invplatform.modules.reports.schemas import TimelyReportPayload, TimelyReportResponse
from invplatform.schemas.auth import CurrentUser
from invplatform.schemas.common import ApiResponse

router = APIRouter(prefix="/startup/reports", tags=["reports"])


def _parse_payload(raw: str) -> TimelyReportPayload:
    try:
        return TimelyReportPayload.model_validate_json(raw)
    except ValidationError as exc:
        raise RequestValidationError(exc.errors()) from exc


async def _read_uploads(files: list[UploadFile] | None) -> list[service.UploadedFile]:
    uploads = []
    for f in files or []:
        content = await f.read()
        if content:
            uploads.append(service.UploadedFile(f.filename, content, f.content_type))
    return uploads


@router.post("", response_model=ApiResponse[TimelyReportResponse], status_code=201)
async def create_report(
    report: str = Form(...),
    attachments: list[UploadFile] | None = File(None),
    current_user: CurrentUser = Depends(get_current_user),
    startup: Startup = Depends(get_current_startup),
    db: AsyncSession = Depends(get_db),
) -> ApiResponse[TimelyReportResponse]:
    payload = _parse_payload(report)
    created = await service.create_report(
        db, startup, current_user.user_id, payload, await _read_uploads(attachments)
    )
    message = "Draft report saved" if created.is_draft else "Report published"
    return ApiResponse(message=message, data=TimelyReportResponse.model_validate(created))


@router.put("/{report_id}", response_model=ApiResponse[TimelyReportResponse])
async def update_report(
    report_id: uuid.UUID,
    report: str = Form(...),
    attachments: list[UploadFile] | None = File(None),
    current_user: CurrentUser = Depends(get_current_user),
    startup: Startup = Depends(get_current_startup),
    db: AsyncSession = Depends(get_db),
) -> ApiResponse[TimelyReportResponse]:
    payload = _parse_payload(report)
    updated = await service.update_report(
        db, startup, current_user.user_id, report_id, payload, await _read_uploads(attachments)
    )
    return ApiResponse(message="Report updated", data=TimelyReportResponse.model_validate(updated))


@router.get("", response_model=ApiResponse[list[TimelyReportResponse]])
async def list_reports(
    current_user: CurrentUser = Depends(get_current_user),
    startup: Startup = Depends(get_current_startup),
    db: AsyncSession = Depends(get_db),
) -> ApiResponse[list[TimelyReportResponse]]:
    reports = await service.list_reports(db, current_user.user_id)
    return ApiResponse(
        message="Reports fetched",
        data=[TimelyReportResponse.model_validate(r) for r in reports],
    )


@router.get("/draft", response_model=ApiResponse[TimelyReportResponse])
async def get_draft_report(
    startup: Startup = Depends(get_current_startup),
    db: AsyncSession = Depends(get_db),
) -> ApiResponse[TimelyReportResponse]:
    draft = await service.get_draft_report(db, startup)
    return ApiResponse(message="Draft report fetched", data=TimelyReportResponse.model_validate(draft))
