"""Connection state machine between startups and investors.

States: INVITED (founder invited an email), PENDING (investor asked to
connect), ACTIVE. There is no rejected state; rejecting deletes the mapping.
Every transition queues an email to the other side in the same transaction.
"""

from __future__ import annotations

import uuid

import structlog
from sqlalchemy import func, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from invplatform.core.errors import BadRequestError, NotFoundError
from invplatform.models.connections import InvestorById, StartupInvestorMapping
from invplatform.models.core import Investor, Startup, User
from invplatform.models.enums import InvestorRole, MappingStatus
from invplatform.modules.notifications.service import enqueue

logger = structlog.get_logger()

_DUPLICATE_MESSAGES = {
    MappingStatus.INVITED: "An invitation has already been sent to this investor.",
    MappingStatus.PENDING: "This investor has already requested a connection.",
    MappingStatus.ACTIVE: "This investor is already connected to your startup.",
}
_GENERIC_DUPLICATE = "A connection already exists between this startup and investor."


def normalize_email(email: str) -> str:
    return email.strip().lower()


# ── Lookups shared with other modules ────────────────────────────────────────


async def get_user_by_email(db: AsyncSession, email: str) -> User | None:
    stmt = select(User).where(func.lower(User.email) == normalize_email(email))
    return (await db.execute(stmt)).scalar_one_or_none()


async def get_investor_for_user(db: AsyncSession, user_id: uuid.UUID) -> Investor | None:
    stmt = select(Investor).where(Investor.user_id == user_id)
    return (await db.execute(stmt)).scalar_one_or_none()


async def get_mapping(
    db: AsyncSession, startup_id: uuid.UUID, investor_id: uuid.UUID
) -> StartupInvestorMapping | None:
    stmt = select(StartupInvestorMapping).where(
        StartupInvestorMapping.startup_id == startup_id,
        StartupInvestorMapping.investor_id == investor_id,
    )
    return (await db.execute(stmt)).scalar_one_or_none()


async def require_active_connection(
    db: AsyncSession, startup_id: uuid.UUID, investor_id: uuid.UUID
) -> StartupInvestorMapping:
    """Raise BadRequestError unless the pair has an ACTIVE mapping."""
    mapping = await get_mapping(db, startup_id, investor_id)
    if mapping is None:
        raise BadRequestError("No connection found between investor and startup")
    if mapping.status != MappingStatus.ACTIVE:
        raise BadRequestError("Connection is not active")
    return mapping


# ── Internal helpers ─────────────────────────────────────────────────────────


async def _raise_if_connected(
    db: AsyncSession,
    startup_id: uuid.UUID,
    investor_id: uuid.UUID | None,
    investor_email: str | None,
) -> None:
    """Reject a new mapping when the pair already has one on either identity track."""
    clauses = []
    if investor_id is not None:
        clauses.append(StartupInvestorMapping.investor_id == investor_id)
    if investor_email:
        clauses.append(func.lower(StartupInvestorMapping.investor_email) == investor_email)
    if not clauses:
        return

    stmt = (
        select(StartupInvestorMapping)
        .where(StartupInvestorMapping.startup_id == startup_id, or_(*clauses))
        .limit(1)
    )
    existing = (await db.execute(stmt)).scalar_one_or_none()
    if existing is not None:
        raise BadRequestError(_DUPLICATE_MESSAGES.get(existing.status, _GENERIC_DUPLICATE))


async def _save_mapping(db: AsyncSession, mapping: StartupInvestorMapping) -> None:
    db.add(mapping)
    try:
        await db.flush()
    except IntegrityError as exc:
        # Concurrent insert won the race past the pre-check
        logger.warning("mapping_unique_violation", startup_id=str(mapping.startup_id))
        raise BadRequestError(_GENERIC_DUPLICATE) from exc


async def _load_mapping(db: AsyncSession, mapping_id: uuid.UUID) -> StartupInvestorMapping | None:
    stmt = select(StartupInvestorMapping).where(StartupInvestorMapping.id == mapping_id)
    return (await db.execute(stmt)).scalar_one_or_none()


async def _founder_of(db: AsyncSession, startup: Startup) -> User:
    founder = await db.get(User, startup.founder_user_id)
    if founder is None:
        raise NotFoundError("Founder user not found.")
    return founder


async def _investor_user(db: AsyncSession, investor: Investor) -> User:
    user = await db.get(User, investor.user_id)
    if user is None:
        raise NotFoundError("Investor user not found.")
    return user


# ── Transitions ──────────────────────────────────────────────────────────────


async def invite_investor(
    db: AsyncSession,
    founder_email: str,
    investor_email: str,
    investor_role: InvestorRole | None = None,
) -> StartupInvestorMapping:
    """Founder invites an investor by email. Creates an INVITED mapping."""
    founder = await get_user_by_email(db, founder_email)
    if founder is None:
        raise NotFoundError("Founder not found.")
    startup = (
        await db.execute(select(Startup).where(Startup.founder_user_id == founder.id))
    ).scalar_one_or_none()
    if startup is None:
        raise NotFoundError("Startup not found for this founder.")

    email = normalize_email(investor_email)
    known_investor_id = None
    invitee = await get_user_by_email(db, email)
    if invitee is not None:
        investor = await get_investor_for_user(db, invitee.id)
        known_investor_id = investor.id if investor else None

    await _raise_if_connected(db, startup.id, known_investor_id, email)

    mapping = StartupInvestorMapping(
        startup_id=startup.id,
        investor_email=email,
        investor_role=investor_role,
        status=MappingStatus.INVITED,
    )
    await _save_mapping(db, mapping)

    await enqueue(
        db,
        template="connection_invite",
        recipient=email,
        subject=f"{startup.name} invited you to connect",
        context={
            "startup_name": startup.name,
            "founder_name": founder.name,
            "investor_email": email,
            "investor_role": investor_role.value if investor_role else None,
            "mapping_id": str(mapping.id),
        },
    )
    logger.info("connection_invited", mapping_id=str(mapping.id), startup_id=str(startup.id))
    return mapping


async def request_connection(
    db: AsyncSession,
    investor_email: str,
    startup_id: uuid.UUID,
    investor_role: InvestorRole | None = None,
) -> StartupInvestorMapping:
    """Investor asks to connect with a startup. Creates a PENDING mapping."""
    investor_user = await get_user_by_email(db, investor_email)
    if investor_user is None:
        raise NotFoundError("Investor not found.")
    investor = await get_investor_for_user(db, investor_user.id)
    if investor is None:
        raise NotFoundError("Investor profile not found.")
    startup = await db.get(Startup, startup_id)
    if startup is None:
        raise NotFoundError("Startup not found.")

    await _raise_if_connected(db, startup.id, investor.id, normalize_email(investor_user.email))

    mapping = StartupInvestorMapping(
        startup_id=startup.id,
        investor_id=investor.id,
        investor_role=investor_role,
        status=MappingStatus.PENDING,
    )
    await _save_mapping(db, mapping)

    founder = await _founder_of(db, startup)
    await enqueue(
        db,
        template="connection_request",
        recipient=founder.email,
        subject=f"New connection request for {startup.name}",
        context={
            "startup_name": startup.name,
            "investor_name": investor_user.name,
            "firm_name": investor.firm_name,
            "investor_role": investor_role.value if investor_role else None,
            "mapping_id": str(mapping.id),
        },
    )
    logger.info("connection_requested", mapping_id=str(mapping.id), investor_id=str(investor.id))
    return mapping


async def approve_connection(
    db: AsyncSession, mapping_id: uuid.UUID, startup: Startup
) -> StartupInvestorMapping:
    """Founder approves a PENDING request."""
    mapping = await _load_mapping(db, mapping_id)
    if mapping is None or mapping.startup_id != startup.id:
        raise NotFoundError("Connection not found.")
    if mapping.status != MappingStatus.PENDING:
        raise NotFoundError("Only pending requests can be approved by founder.")

    counterparty = mapping.counterparty
    investor = None
    if isinstance(counterparty, InvestorById):
        investor = await db.get(Investor, counterparty.investor_id)
    if investor is None:
        raise NotFoundError("Investor not found.")
    investor_user = await _investor_user(db, investor)

    mapping.status = MappingStatus.ACTIVE
    await db.flush()

    await enqueue(
        db,
        template="connection_approved",
        recipient=investor_user.email,
        subject=f"{startup.name} approved your connection request",
        context={"startup_name": startup.name, "investor_name": investor_user.name},
    )
    logger.info("connection_approved", mapping_id=str(mapping.id))
    return mapping


async def accept_invitation(
    db: AsyncSession, mapping_id: uuid.UUID, investor_email: str
) -> StartupInvestorMapping:
    """Investor accepts an INVITED mapping addressed to their email."""
    email = normalize_email(investor_email)
    stmt = select(StartupInvestorMapping).where(
        StartupInvestorMapping.id == mapping_id,
        func.lower(StartupInvestorMapping.investor_email) == email,
    )
    mapping = (await db.execute(stmt)).scalar_one_or_none()
    if mapping is None:
        raise BadRequestError("invitation is invalid")
    if mapping.status != MappingStatus.INVITED:
        raise BadRequestError("This invitation is invalid or has expired.")

    investor_user = await get_user_by_email(db, email)
    if investor_user is None:
        raise NotFoundError("Investor user not found.")
    investor = await get_investor_for_user(db, investor_user.id)
    if investor is None:
        raise NotFoundError("Investor record not found.")
    startup = await db.get(Startup, mapping.startup_id)
    if startup is None:
        raise NotFoundError("Startup not found.")
    founder = await _founder_of(db, startup)

    other = await get_mapping(db, startup.id, investor.id)
    if other is not None and other.id != mapping.id:
        raise BadRequestError(_DUPLICATE_MESSAGES.get(other.status, _GENERIC_DUPLICATE))

    mapping.bind_investor(investor.id)
    mapping.status = MappingStatus.ACTIVE
    await _save_mapping(db, mapping)

    await enqueue(
        db,
        template="invitation_accepted",
        recipient=founder.email,
        subject=f"{investor_user.name} accepted your invitation",
        context={"startup_name": startup.name, "investor_name": investor_user.name},
    )
    logger.info("invitation_accepted", mapping_id=str(mapping.id), investor_id=str(investor.id))
    return mapping


async def reject_by_founder(db: AsyncSession, mapping_id: uuid.UUID, startup: Startup) -> None:
    """Founder rejects a PENDING request. The mapping is deleted."""
    mapping = await _load_mapping(db, mapping_id)
    if mapping is None or mapping.startup_id != startup.id:
        raise NotFoundError("Connection not found.")
    if mapping.status != MappingStatus.PENDING:
        raise BadRequestError("Only pending requests can be rejected by founder.")

    investor = await db.get(Investor, mapping.investor_id) if mapping.investor_id else None
    if investor is None:
        raise NotFoundError("Investor not found.")
    investor_user = await _investor_user(db, investor)

    await enqueue(
        db,
        template="connection_rejected",
        recipient=investor_user.email,
        subject=f"Update on your request to {startup.name}",
        context={"startup_name": startup.name, "investor_name": investor_user.name},
    )
    await db.delete(mapping)
    await db.flush()
    logger.info("connection_rejected_by_founder", mapping_id=str(mapping_id))


async def reject_by_investor(
    db: AsyncSession, mapping_id: uuid.UUID, investor: Investor, investor_email: str
) -> None:
    """Investor declines an INVITED mapping. The mapping is deleted."""
    mapping = await _load_mapping(db, mapping_id)
    if mapping is None:
        raise NotFoundError("Invitation not found.")

    counterparty = mapping.counterparty
    if isinstance(counterparty, InvestorById):
        addressed_to_caller = counterparty.investor_id == investor.id
    else:
        addressed_to_caller = normalize_email(counterparty.email) == normalize_email(investor_email)
    if not addressed_to_caller:
        raise NotFoundError("Invitation not found.")
    if mapping.status != MappingStatus.INVITED:
        raise BadRequestError("Only invited connections can be rejected by investor.")

    startup = await db.get(Startup, mapping.startup_id)
    if startup is None:
        raise NotFoundError("Startup not found.")
    founder = await _founder_of(db, startup)
    investor_user = await _investor_user(db, investor)

    await enqueue(
        db,
        template="invitation_declined",
        recipient=founder.email,
        subject=f"{investor_user.name} declined your invitation",
        context={"startup_name": startup.name, "investor_name": investor_user.name},
    )
    await db.delete(mapping)
    await db.flush()
    logger.info("connection_rejected_by_investor", mapping_id=str(mapping_id))
