# crud/property.py
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from sqlalchemy.orm import selectinload
from sqlalchemy import update, func
from uuid import UUID
from typing import List, Optional, Tuple

from app.models import Property, Interest


# ---------------- READ ----------------
async def get_property(db: AsyncSession, property_id: UUID, for_update: bool = False) -> Optional[Property]:
    """ `for_update` row-locks the property until the transaction ends (no-op on SQLite) """
    stmt = select(Property).where(Property.id == property_id)
    if for_update:
        stmt = stmt.with_for_update()
    result = await db.execute(stmt)
    return result.scalar_one_or_none()


async def get_owned_properties(
    db: AsyncSession,
    owner_id: UUID,
    search: Optional[str],
    offset: int,
    limit: int,
) -> Tuple[List[Property], int]:
    """ Properties owned by `owner_id`, with their interested parties and each party's user """
    filters = [Property.owner_id == owner_id]
    if search:
        filters.append(Property.name.ilike(f"%{search}%"))

    result = await db.execute(
        select(Property)
        .where(*filters)
        .options(selectinload(Property.interested_parties).selectinload(Interest.user))
        .order_by(Property.created_at.desc())
        .offset(offset)
        .limit(limit)
    )
    listings = result.scalars().all()

    total = await db.execute(select(func.count(Property.id)).where(*filters))
    return listings, total.scalar_one()


async def get_unsold_with_finalized_interest(db: AsyncSession) -> List[UUID]:
    """ Properties holding a finalized interest whose status never reached `sold` """
    result = await db.execute(
        select(Property.id)
        .join(Interest, Interest.property_id == Property.id)
        .where(Interest.status == "finalized", Property.status != "sold")
    )
    return list(result.scalars().all())


# ---------------- UPDATE ----------------
async def mark_sold(db: AsyncSession, property_id: UUID) -> bool:
    result = await db.execute(
        update(Property)
        .where(Property.id == property_id)
        .values(status="sold")
    )
    return result.rowcount > 0
