from types import SimpleNamespace
from uuid import uuid4

import jwt
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models import User, Property, Interest, Notification
from app.core.security import JWT_SECRET, JWT_ALGORITHM


def make_token(user_id, **claims) -> str:
    return jwt.encode({"_id": str(user_id), **claims}, JWT_SECRET, algorithm=JWT_ALGORITHM)


def auth(user_id) -> dict:
    return {"Authorization": f"Bearer {make_token(user_id)}"}


async def seed_world(session: AsyncSession) -> SimpleNamespace:
    agent = User(id=uuid4(), full_name="Grace Agent", email=f"agent-{uuid4()}@test.com", phone_number="5550001")
    buyer = User(id=uuid4(), full_name="Uma Buyer", email=f"buyer-{uuid4()}@test.com", phone_number="5550002")
    other = User(id=uuid4(), full_name="Victor Buyer", email=f"other-{uuid4()}@test.com", phone_number="5550003")
    prop = Property(
        id=uuid4(),
        owner_id=agent.id,
        name="Sunny 2BR Apartment",
        price=250000,
        property_type="sale",
        address="1 Harbour Road",
        status="available",
    )
    second_prop = Property(
        id=uuid4(),
        owner_id=agent.id,
        name="Garden Villa",
        price=900000,
        property_type="sale",
        status="available",
    )
    session.add_all([agent, buyer, other, prop, second_prop])
    await session.commit()

    return SimpleNamespace(
        agent=agent.id,
        buyer=buyer.id,
        other=other.id,
        property=prop.id,
        second_property=second_prop.id,
    )


# --- fresh-session lookups, so assertions never see a stale identity map ---

async def fetch_interests(session_factory, **filters):
    async with session_factory() as s:
        result = await s.execute(select(Interest).filter_by(**filters).order_by(Interest.created_at))
        return result.scalars().all()


async def fetch_property(session_factory, property_id):
    async with session_factory() as s:
        result = await s.execute(select(Property).where(Property.id == property_id))
        return result.scalar_one()


async def fetch_threads(session_factory, **filters):
    async with session_factory() as s:
        result = await s.execute(select(Notification).filter_by(**filters))
        return result.scalars().all()
