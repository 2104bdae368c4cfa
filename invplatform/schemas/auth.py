"""Auth schemas."""

import uuid

from pydantic import BaseModel

from invplatform.models.enums import UserRole


class CurrentUser(BaseModel):
    """Lightweight user context extracted from the bearer token + DB lookup."""

    user_id: uuid.UUID
    role: UserRole
    email: str
    name: str
