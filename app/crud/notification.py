# crud/notification.py
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from sqlalchemy.orm import selectinload
from sqlalchemy.exc import IntegrityError
from sqlalchemy import delete, exists, or_
from uuid import UUID, uuid4
from typing import List, Optional
import logging

from app.models import Notification, NotificationMessage, NotificationRead, NotificationDeletion

logger = logging.getLogger(__name__)


def _party_filter(user_id: UUID):
    return or_(Notification.user_id == user_id, Notification.agent_id == user_id)


# ---------------- READ ----------------
async def get_notification(db: AsyncSession, notification_id: UUID) -> Optional[Notification]:
    result = await db.execute(select(Notification).where(Notification.id == notification_id))
    return result.scalar_one_or_none()


async def get_thread(
    db: AsyncSession,
    user_id: UUID,
    agent_id: Optional[UUID],
    property_id: Optional[UUID],
) -> Optional[Notification]:
    result = await db.execute(
        select(Notification).where(
            Notification.user_id == user_id,
            Notification.agent_id == agent_id,
            Notification.property_id == property_id,
        )
    )
    return result.scalar_one_or_none()


async def list_visible(db: AsyncSession, user_id: UUID) -> List[Notification]:
    """ Threads the user is a party to and has not hidden, latest activity first """
    hidden = exists().where(
        NotificationDeletion.notification_id == Notification.id,
        NotificationDeletion.user_id == user_id,
    )
    result = await db.execute(
        select(Notification)
        .where(_party_filter(user_id), ~hidden)
        .options(
            selectinload(Notification.user),
            selectinload(Notification.agent),
            selectinload(Notification.property),
            selectinload(Notification.messages).selectinload(NotificationMessage.sender),
            selectinload(Notification.reads),
            selectinload(Notification.deletions),
        )
        .order_by(Notification.updated_at.desc())
        .execution_options(populate_existing=True)
    )
    return result.scalars().all()


async def has_read(db: AsyncSession, notification_id: UUID, user_id: UUID) -> bool:
    result = await db.execute(
        select(NotificationRead).where(
            NotificationRead.notification_id == notification_id,
            NotificationRead.user_id == user_id,
        )
    )
    return result.scalar_one_or_none() is not None


async def has_hidden(db: AsyncSession, notification_id: UUID, user_id: UUID) -> bool:
    result = await db.execute(
        select(NotificationDeletion).where(
            NotificationDeletion.notification_id == notification_id,
            NotificationDeletion.user_id == user_id,
        )
    )
    return result.scalar_one_or_none() is not None


# ---------------- CREATE ----------------
async def get_or_create_thread(
    db: AsyncSession,
    user_id: UUID,
    agent_id: Optional[UUID],
    property_id: Optional[UUID],
    type: str,
) -> Notification:
    """
    Return the thread for (user, agent, property), inserting it when absent.

    Must be called with no other pending work in the session: losing the
    insert race against `uq_notification_thread` rolls the transaction back
    before re-reading the winner's row.
    """
    thread = await get_thread(db, user_id, agent_id, property_id)
    if thread:
        return thread

    thread = Notification(
        id=uuid4(),
        user_id=user_id,
        agent_id=agent_id,
        property_id=property_id,
        type=type,
    )
    db.add(thread)
    try:
        await db.flush()
    except IntegrityError:
        await db.rollback()
        logger.info("Thread for user=%s agent=%s property=%s created concurrently, reusing it",
                    user_id, agent_id, property_id)
        thread = await get_thread(db, user_id, agent_id, property_id)
        if thread is None:
            raise
    return thread


async def add_message(db: AsyncSession, notification_id: UUID, sender_id: UUID, content: str) -> NotificationMessage:
    message = NotificationMessage(
        id=uuid4(),
        notification_id=notification_id,
        sender_id=sender_id,
        content=content,
    )
    db.add(message)
    return message


async def add_read(db: AsyncSession, notification_id: UUID, user_id: UUID) -> None:
    db.add(NotificationRead(notification_id=notification_id, user_id=user_id))


async def add_deletion(db: AsyncSession, notification_id: UUID, user_id: UUID) -> None:
    db.add(NotificationDeletion(notification_id=notification_id, user_id=user_id))


async def add_read_for_all(db: AsyncSession, user_id: UUID) -> int:
    """ Adds `user_id` to readBy of each of their threads that lacks it """
    already = exists().where(
        NotificationRead.notification_id == Notification.id,
        NotificationRead.user_id == user_id,
    )
    result = await db.execute(select(Notification.id).where(_party_filter(user_id), ~already))
    ids = result.scalars().all()
    for notification_id in ids:
        await add_read(db, notification_id, user_id)
    return len(ids)


async def add_deletion_for_all(db: AsyncSession, user_id: UUID) -> int:
    already = exists().where(
        NotificationDeletion.notification_id == Notification.id,
        NotificationDeletion.user_id == user_id,
    )
    result = await db.execute(select(Notification.id).where(_party_filter(user_id), ~already))
    ids = result.scalars().all()
    for notification_id in ids:
        await add_deletion(db, notification_id, user_id)
    return len(ids)


# ---------------- DELETE ----------------
async def remove_read(db: AsyncSession, notification_id: UUID, user_id: UUID) -> None:
    await db.execute(
        delete(NotificationRead).where(
            NotificationRead.notification_id == notification_id,
            NotificationRead.user_id == user_id,
        )
    )


async def clear_receipts(db: AsyncSession, notification_id: UUID) -> None:
    """ Empty both readBy and deletedBy for the thread """
    await db.execute(delete(NotificationRead).where(NotificationRead.notification_id == notification_id))
    await db.execute(delete(NotificationDeletion).where(NotificationDeletion.notification_id == notification_id))
