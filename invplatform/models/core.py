"""Core identity models: User, Startup (founder profile), Investor (investor profile)."""

import uuid
from decimal import Decimal
from typing import Any

from sqlalchemy import Boolean, Enum, ForeignKey, Integer, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from invplatform.models.base import BaseModel, JSONType
from invplatform.models.enums import InvestorType, Sector, UserRole


class User(BaseModel):
    __tablename__ = "users"

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str] = mapped_column(String(320), nullable=False, unique=True, index=True)
    phone: Mapped[str | None] = mapped_column(String(32))
    role: Mapped[UserRole] = mapped_column(Enum(UserRole, name="user_role"), nullable=False)
    is_verified: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    is_onboarded: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)


class Startup(BaseModel):
    """Founder profile. One per founder user; the founder link never changes."""

    __tablename__ = "startups"

    founder_user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id"), nullable=False, unique=True, index=True
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    sector: Mapped[Sector | None] = mapped_column(Enum(Sector, name="sector"))
    stage: Mapped[str | None] = mapped_column(String(50))
    funding_raised: Mapped[Decimal | None]
    valuation: Mapped[Decimal | None]
    team_size: Mapped[int | None] = mapped_column(Integer)
    hq_location: Mapped[str | None] = mapped_column(String(255))
    website: Mapped[str | None] = mapped_column(String(500))


class Investor(BaseModel):
    """Investor profile. One per investor user."""

    __tablename__ = "investors"

    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id"), nullable=False, unique=True, index=True
    )
    firm_name: Mapped[str | None] = mapped_column(String(255))
    investor_type: Mapped[InvestorType | None] = mapped_column(
        Enum(InvestorType, name="investor_type")
    )
    ticket_size: Mapped[str | None] = mapped_column(String(100))
    sector_focus: Mapped[list[Any]] = mapped_column(JSONType, nullable=False, default=list)
    aum: Mapped[Decimal | None]
