# crud/interest.py
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from sqlalchemy.orm import selectinload
from sqlalchemy import func
from uuid import UUID, uuid4
from typing import List, Optional, Tuple

from app.models import Interest, Property


# ---------------- CREATE ----------------
async def create_interest(
    db: AsyncSession,
    user_id: UUID,
    agent_id: UUID,
    property_id: UUID,
) -> Interest:
    interest = Interest(
        id=uuid4(),
        user_id=user_id,
        agent_id=agent_id,
        property_id=property_id,
        status="pending",
        is_cancelled=False,
    )
    db.add(interest)
    return interest


# ---------------- READ ----------------
async def get_active_interest(db: AsyncSession, user_id: UUID, property_id: UUID) -> Optional[Interest]:
    """ The user's live (not cancelled) interest in a property, if any """
    result = await db.execute(
        select(Interest).where(
            Interest.user_id == user_id,
            Interest.property_id == property_id,
            Interest.is_cancelled == False,  # noqa: E712
        )
    )
    return result.scalars().first()


async def get_interest_for_agent(
    db: AsyncSession,
    interest_id: UUID,
    user_id: UUID,
    property_id: UUID,
    agent_id: UUID,
) -> Optional[Interest]:
    """ Resolves only when every part of the tuple matches, agent included """
    result = await db.execute(
        select(Interest).where(
            Interest.id == interest_id,
            Interest.user_id == user_id,
            Interest.property_id == property_id,
            Interest.agent_id == agent_id,
        )
    )
    return result.scalar_one_or_none()


async def get_finalized_interest(
    db: AsyncSession,
    property_id: UUID,
    exclude_id: Optional[UUID] = None,
) -> Optional[Interest]:
    stmt = select(Interest).where(
        Interest.property_id == property_id,
        Interest.status == "finalized",
    )
    if exclude_id is not None:
        stmt = stmt.where(Interest.id != exclude_id)
    result = await db.execute(stmt)
    return result.scalars().first()


async def get_interest_for_cancel(
    db: AsyncSession,
    user_id: UUID,
    agent_id: UUID,
    property_id: UUID,
) -> Optional[Interest]:
    """ Live interest first, otherwise the most recent one """
    result = await db.execute(
        select(Interest)
        .where(
            Interest.user_id == user_id,
            Interest.agent_id == agent_id,
            Interest.property_id == property_id,
        )
        .order_by(Interest.is_cancelled.asc(), Interest.created_at.desc())
        .limit(1)
    )
    return result.scalars().first()


async def get_user_bookings(
    db: AsyncSession,
    user_id: UUID,
    search: Optional[str],
    offset: int,
    limit: int,
) -> Tuple[List[Interest], int]:
    filters = [Interest.user_id == user_id]
    if search:
        filters.append(Property.name.ilike(f"%{search}%"))

    result = await db.execute(
        select(Interest)
        .join(Property, Property.id == Interest.property_id)
        .where(*filters)
        .options(selectinload(Interest.property), selectinload(Interest.agent))
        .order_by(Interest.created_at.desc())
        .offset(offset)
        .limit(limit)
    )
    listings = result.scalars().all()

    total = await db.execute(
        select(func.count(Interest.id))
        .join(Property, Property.id == Interest.property_id)
        .where(*filters)
    )
    return listings, total.scalar_one()
