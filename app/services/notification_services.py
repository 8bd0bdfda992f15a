from uuid import UUID
from sqlalchemy.ext.asyncio import AsyncSession
from datetime import datetime
from typing import List, Optional
import logging

from app.models import Notification
from app.crud import notification as crud_notification
from app.crud import property as crud_property
from app.schemas.booking import UserSummary, PropertySummary
from app.schemas.notification import (
    AgentChatRequest,
    ThreadReplyRequest,
    NotificationUpdateRequest,
    NotificationItem,
    ThreadMessage,
)
from app.services.exceptions import (
    AgentSelfMessageError,
    AuthorizationError,
    NotFoundError,
    ValidationError,
)

logger = logging.getLogger(__name__)

UPDATE_TYPES = ("mark_as_read", "mark_all_as_read", "remove", "delete")


class NotificationServices:
    """
        Thread store for the user <-> agent conversation about a property.

        There is exactly one thread per (user, agent, property). Every
        substantive event on it (new interest, status change, cancellation,
        message) overwrites `type` and empties both the read and the hidden
        sets, so the thread shows up unread for both parties again.

        Read and hidden state is per participant: toggling or hiding never
        changes what the other party sees.

        The thread primitives (`find_or_create`, `append_message`,
        `record_event`) do not commit; the caller owns the transaction. The
        endpoint services (`*_service`) commit their own work.
    """

    # ---------------- thread primitives ----------------

    @staticmethod
    async def find_or_create(
        db: AsyncSession,
        user_id: UUID,
        agent_id: Optional[UUID],
        property_id: Optional[UUID],
        type: str,
    ) -> Notification:
        return await crud_notification.get_or_create_thread(db, user_id, agent_id, property_id, type)

    @staticmethod
    async def record_event(db: AsyncSession, thread: Notification, type: str) -> None:
        thread.type = type
        thread.updated_at = datetime.utcnow()
        await crud_notification.clear_receipts(db, thread.id)

    @staticmethod
    async def append_message(
        db: AsyncSession,
        thread: Notification,
        sender_id: UUID,
        content: str,
        type: str = "message",
    ) -> None:
        await crud_notification.add_message(db, thread.id, sender_id, content)
        await NotificationServices.record_event(db, thread, type)

    @staticmethod
    async def toggle_read(db: AsyncSession, thread_id: UUID, user_id: UUID) -> bool:
        """ Flip the caller's read flag; returns the new value """
        if await crud_notification.has_read(db, thread_id, user_id):
            await crud_notification.remove_read(db, thread_id, user_id)
            return False
        await crud_notification.add_read(db, thread_id, user_id)
        return True

    @staticmethod
    async def mark_all_read(db: AsyncSession, user_id: UUID) -> int:
        return await crud_notification.add_read_for_all(db, user_id)

    @staticmethod
    async def hide_for_user(db: AsyncSession, thread_id: UUID, user_id: UUID) -> None:
        if not await crud_notification.has_hidden(db, thread_id, user_id):
            await crud_notification.add_deletion(db, thread_id, user_id)

    @staticmethod
    async def hide_all_for_user(db: AsyncSession, user_id: UUID) -> int:
        return await crud_notification.add_deletion_for_all(db, user_id)

    @staticmethod
    async def list_for_user(db: AsyncSession, user_id: UUID) -> List[NotificationItem]:
        threads = await crud_notification.list_visible(db, user_id)
        items = []
        for thread in threads:
            read_by = [r.user_id for r in thread.reads]
            items.append(NotificationItem(
                id=thread.id,
                user=UserSummary.model_validate(thread.user),
                agent=UserSummary.model_validate(thread.agent) if thread.agent else None,
                property=PropertySummary.model_validate(thread.property) if thread.property else None,
                type=thread.type,
                messages=[ThreadMessage.model_validate(m) for m in thread.messages],
                read_by=read_by,
                deleted_by=[d.user_id for d in thread.deletions],
                notification_for="agent" if thread.agent_id == user_id else "user",
                is_read=user_id in read_by,
                created_at=thread.created_at,
                updated_at=thread.updated_at,
            ))
        return items

    # ---------------- endpoint services ----------------

    @staticmethod
    async def _get_party_thread(db: AsyncSession, notification_id: Optional[UUID], caller_id: UUID) -> Notification:
        thread = await crud_notification.get_notification(db, notification_id) if notification_id else None
        if not thread:
            raise NotFoundError("Notification not found")
        if caller_id not in (thread.user_id, thread.agent_id):
            raise AuthorizationError("You are not a participant of this conversation.")
        return thread

    @staticmethod
    async def chat_with_agent_service(caller_id: UUID, request: AgentChatRequest, db: AsyncSession) -> dict:
        """
        Message the owner of a property, opening the thread if needed.

        Raises:
            NotFoundError: the property does not exist.
            AgentSelfMessageError: the owner tried to open a conversation with themselves.
        """
        prop = await crud_property.get_property(db, request.property)
        if not prop:
            raise NotFoundError("Property not found")

        agent_id = prop.owner_id
        if caller_id == agent_id:
            raise AgentSelfMessageError()

        thread = await NotificationServices.find_or_create(db, caller_id, agent_id, request.property, "message")
        await NotificationServices.append_message(db, thread, caller_id, request.message)
        await db.commit()

        logger.info("User %s messaged agent %s about property %s", caller_id, agent_id, request.property)
        return {"message": "Your message has been sent to the agent successfully."}

    @staticmethod
    async def reply_service(caller_id: UUID, request: ThreadReplyRequest, db: AsyncSession) -> dict:
        thread = await NotificationServices._get_party_thread(db, request.notification_id, caller_id)
        await NotificationServices.append_message(db, thread, caller_id, request.message)
        await db.commit()
        return {"message": "Message sent successfully"}

    @staticmethod
    async def list_service(caller_id: UUID, db: AsyncSession) -> List[NotificationItem]:
        return await NotificationServices.list_for_user(db, caller_id)

    @staticmethod
    async def update_service(caller_id: UUID, request: NotificationUpdateRequest, db: AsyncSession) -> dict:
        """
        Apply one of the read/hide mutations for the caller.

        `mark_as_read` is a toggle; `remove` hides one thread; `mark_all_as_read`
        and `delete` cover every thread the caller is a party to.
        """
        if request.type not in UPDATE_TYPES:
            raise ValidationError("Invalid type provided")

        if request.type == "mark_as_read":
            thread = await NotificationServices._get_party_thread(db, request.notification_id, caller_id)
            is_read = await NotificationServices.toggle_read(db, thread.id, caller_id)
            await db.commit()
            return {"message": "Notification marked as read" if is_read else "Notification marked as unread"}

        if request.type == "mark_all_as_read":
            await NotificationServices.mark_all_read(db, caller_id)
            await db.commit()
            return {"message": "All notifications marked as read"}

        if request.type == "remove":
            thread = await NotificationServices._get_party_thread(db, request.notification_id, caller_id)
            await NotificationServices.hide_for_user(db, thread.id, caller_id)
            await db.commit()
            return {"message": "Notification removed successfully"}

        await NotificationServices.hide_all_for_user(db, caller_id)
        await db.commit()
        return {"message": "All notifications deleted for the user/agent"}
