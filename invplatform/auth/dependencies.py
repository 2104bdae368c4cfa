"""FastAPI auth dependencies: get_current_user, require_role, and domain principal resolvers."""

import uuid

import sentry_sdk
import structlog
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from invplatform.core.database import get_db
from invplatform.core.errors import NotFoundError
from invplatform.core.security import decode_access_token
from invplatform.models.core import Investor, Startup, User
from invplatform.models.enums import UserRole
from invplatform.schemas.auth import CurrentUser

logger = structlog.get_logger()

bearer_scheme = HTTPBearer(auto_error=True)


async def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(bearer_scheme),
    db: AsyncSession = Depends(get_db),
) -> CurrentUser:
    """Verify the bearer token and load the platform user it names."""
    try:
        payload = decode_access_token(credentials.credentials)
        user_id = uuid.UUID(payload["sub"])
    except (JWTError, ValueError) as e:
        logger.warning("jwt_verification_failed", error=str(e))
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
            headers={"WWW-Authenticate": "Bearer"},
        ) from e

    user = (await db.execute(select(User).where(User.id == user_id))).scalar_one_or_none()
    if user is None:
        logger.warning("user_not_found_for_token", user_id=str(user_id))
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not found",
        )

    sentry_sdk.set_user({"id": str(user.id)})
    sentry_sdk.set_tag("user_role", user.role.value)

    return CurrentUser(user_id=user.id, role=user.role, email=user.email, name=user.name)


def require_role(allowed_roles: list[UserRole]):
    """
    Dependency factory: checks if current user has one of the allowed roles.

    Usage:
        router = APIRouter(dependencies=[Depends(require_role([UserRole.INVESTOR]))])
    """

    async def _check_role(
        current_user: CurrentUser = Depends(get_current_user),
    ) -> CurrentUser:
        if current_user.role not in allowed_roles:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Role '{current_user.role.value}' is not allowed to access this resource",
            )
        return current_user

    return _check_role


async def get_current_investor(
    current_user: CurrentUser = Depends(require_role([UserRole.INVESTOR])),
    db: AsyncSession = Depends(get_db),
) -> Investor:
    """Resolve the investor profile of the authenticated investor user."""
    investor = (
        await db.execute(select(Investor).where(Investor.user_id == current_user.user_id))
    ).scalar_one_or_none()
    if investor is None:
        raise NotFoundError("Investor profile not found")
    return investor


async def get_current_startup(
    current_user: CurrentUser = Depends(require_role([UserRole.FOUNDER])),
    db: AsyncSession = Depends(get_db),
) -> Startup:
    """Resolve the startup owned by the authenticated founder user."""
    startup = (
        await db.execute(select(Startup).where(Startup.founder_user_id == current_user.user_id))
    ).scalar_one_or_none()
    if startup is None:
        raise NotFoundError("Startup not found for this founder")
    return startup
