"""Startup <-> investor connection model."""

import uuid
from dataclasses import dataclass

from sqlalchemy import Enum, ForeignKey, String, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from invplatform.models.base import BaseModel
from invplatform.models.enums import InvestorRole, MappingStatus


@dataclass(frozen=True)
class InvestorById:
    investor_id: uuid.UUID


@dataclass(frozen=True)
class InvestorByEmail:
    email: str


Counterparty = InvestorById | InvestorByEmail


class StartupInvestorMapping(BaseModel):
    """A connection between a startup and an investor.

    Founder invitations start out addressed to an email (``INVITED``) and are
    resolved to an investor id exactly once, on acceptance. Investor requests
    (``PENDING``) always carry the investor id. Rejection deletes the row.
    """

    __tablename__ = "startup_investor_mappings"
    __table_args__ = (
        UniqueConstraint("startup_id", "investor_id", name="uq_mapping_startup_investor"),
        UniqueConstraint("startup_id", "investor_email", name="uq_mapping_startup_email"),
    )

    startup_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("startups.id"), nullable=False, index=True
    )
    investor_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey("investors.id"), index=True
    )
    investor_email: Mapped[str | None] = mapped_column(String(320), index=True)
    investor_role: Mapped[InvestorRole | None] = mapped_column(
        Enum(InvestorRole, name="investor_role")
    )
    status: Mapped[MappingStatus] = mapped_column(
        Enum(MappingStatus, name="mapping_status"), nullable=False
    )

    @property
    def counterparty(self) -> Counterparty:
        if self.investor_id is not None:
            return InvestorById(self.investor_id)
        return InvestorByEmail(self.investor_email or "")

    def bind_investor(self, investor_id: uuid.UUID) -> None:
        """Resolve an email-addressed invitation to a concrete investor."""
        self.investor_id = investor_id
        self.investor_email = None
