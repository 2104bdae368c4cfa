"""Enumerations shared by models, schemas and services."""

import enum


# ── Identity ─────────────────────────────────────────────────────────────────


class UserRole(str, enum.Enum):
    FOUNDER = "FOUNDER"
    INVESTOR = "INVESTOR"


class Sector(str, enum.Enum):
    FINTECH = "FINTECH"
    HEALTHTECH = "HEALTHTECH"
    EDTECH = "EDTECH"
    SAAS = "SAAS"
    ECOMMERCE = "ECOMMERCE"
    AI_ML = "AI_ML"
    CLEANTECH = "CLEANTECH"
    AGRITECH = "AGRITECH"
    DEEPTECH = "DEEPTECH"
    CONSUMER = "CONSUMER"
    OTHER = "OTHER"


class InvestorType(str, enum.Enum):
    ANGEL = "ANGEL"
    VC = "VC"
    PRIVATE_EQUITY = "PRIVATE_EQUITY"
    FAMILY_OFFICE = "FAMILY_OFFICE"
    CORPORATE = "CORPORATE"
    ACCELERATOR = "ACCELERATOR"


# ── Connections ──────────────────────────────────────────────────────────────


class MappingStatus(str, enum.Enum):
    INVITED = "INVITED"   # founder -> investor, invitee known by email
    PENDING = "PENDING"   # investor -> founder, requester known by id
    ACTIVE = "ACTIVE"


class InvestorRole(str, enum.Enum):
    LEAD_INVESTOR = "LEAD_INVESTOR"
    CO_INVESTOR = "CO_INVESTOR"
    ADVISOR = "ADVISOR"
    BOARD_MEMBER = "BOARD_MEMBER"
    OBSERVER = "OBSERVER"


# ── Documents / integrations / outbox ────────────────────────────────────────


class DocumentType(str, enum.Enum):
    FINANCIAL = "FINANCIAL"
    LEGAL = "LEGAL"
    PITCH = "PITCH"
    OTHER = "OTHER"


class IntegrationType(str, enum.Enum):
    ZOHO = "ZOHO"


class IntegrationStatus(str, enum.Enum):
    CONNECTED = "CONNECTED"
    DISCONNECTED = "DISCONNECTED"


class OutboxStatus(str, enum.Enum):
    PENDING = "pending"
    RETRYING = "retrying"
    SENT = "sent"
    FAILED = "failed"
