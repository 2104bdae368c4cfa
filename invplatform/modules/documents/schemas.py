from __future__ import annotations

import uuid
from datetime import datetime

from invplatform.models.enums import DocumentType
from invplatform.schemas.common import CamelModel


class DocumentResponse(CamelModel):
    id: uuid.UUID
    startup_id: uuid.UUID
    document_type: DocumentType
    file_name: str
    file_key: str
    content_type: str | None
    file_size: int | None
    created_at: datetime
