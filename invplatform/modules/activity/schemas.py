from __future__ import annotations

import uuid
from datetime import datetime

from invplatform.schemas.common import CamelModel


class StartupActivityResponse(CamelModel):
    startup_id: uuid.UUID
    startup_name: str | None
    message: str
    updated_at: datetime
    time_ago: str


class ActivityFeedItem(CamelModel):
    startup_id: uuid.UUID
    startup_name: str
    message: str
    time_ago: str
