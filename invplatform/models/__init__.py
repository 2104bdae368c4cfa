"""SQLAlchemy models package. Import all models so Base.metadata is populated."""

from invplatform.models.base import BaseModel, ModelMixin, TimestampedModel, utcnow
from invplatform.models.connections import (
    InvestorByEmail,
    InvestorById,
    StartupInvestorMapping,
)
from invplatform.models.core import Investor, Startup, User
from invplatform.models.deals import HOT_DEAL, STARRED_DEAL, DealPipeline, Investment
from invplatform.models.enums import (
    DocumentType,
    IntegrationStatus,
    IntegrationType,
    InvestorRole,
    InvestorType,
    MappingStatus,
    OutboxStatus,
    Sector,
    UserRole,
)
from invplatform.models.integrations import Integration, NotificationOutbox
from invplatform.models.reports import StartupActivity, StartupDocument, TimelyReport

__all__ = [
    "BaseModel",
    "DealPipeline",
    "DocumentType",
    "HOT_DEAL",
    "Integration",
    "IntegrationStatus",
    "IntegrationType",
    "Investment",
    "Investor",
    "InvestorByEmail",
    "InvestorById",
    "InvestorRole",
    "InvestorType",
    "MappingStatus",
    "ModelMixin",
    "NotificationOutbox",
    "OutboxStatus",
    "STARRED_DEAL",
    "Sector",
    "Startup",
    "StartupActivity",
    "StartupDocument",
    "StartupInvestorMapping",
    "TimelyReport",
    "TimestampedModel",
    "User",
    "UserRole",
]
