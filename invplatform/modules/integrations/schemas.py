from __future__ import annotations

from invplatform.schemas.common import CamelModel


class AuthorizationUrlResponse(CamelModel):
    authorization_url: str
