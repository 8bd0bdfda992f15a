from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List
from uuid import UUID
import logging
import traceback

from app.schemas.booking import MessageResponse
from app.schemas.notification import (
    AgentChatRequest,
    ThreadReplyRequest,
    NotificationUpdateRequest,
    NotificationItem,
)
from app.db.session import get_db
from app.core.security import get_current_user_id
from app.services.notification_services import NotificationServices

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/notification", tags=["Notifications"])


@router.post("/chat", response_model=MessageResponse, summary="Message the agent of a property")
async def chat_with_agent(
    request: AgentChatRequest,
    caller_id: UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    try:
        return await NotificationServices.chat_with_agent_service(caller_id, request, db)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except LookupError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except Exception as e:
        logger.error("Error in chat_with_agent: %s\n%s", e, traceback.format_exc())
        raise HTTPException(status_code=500, detail="Internal Server Error")


@router.post("/message", response_model=MessageResponse, summary="Reply in a thread")
async def reply(
    request: ThreadReplyRequest,
    caller_id: UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    try:
        return await NotificationServices.reply_service(caller_id, request, db)
    except LookupError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except PermissionError as e:
        raise HTTPException(status_code=403, detail=str(e))
    except Exception as e:
        logger.error("Error in reply: %s\n%s", e, traceback.format_exc())
        raise HTTPException(status_code=500, detail="Internal Server Error")


@router.get("/list", response_model=List[NotificationItem], summary="List my threads")
async def list_notifications(
    caller_id: UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    try:
        return await NotificationServices.list_service(caller_id, db)
    except Exception as e:
        logger.error("Error in list_notifications: %s\n%s", e, traceback.format_exc())
        raise HTTPException(status_code=500, detail="Internal Server Error")


@router.post(
    "/update",
    response_model=MessageResponse,
    summary="Mark read/unread, hide one, mark all read or hide all",
    description="type: mark_as_read (toggle) | mark_all_as_read | remove | delete",
)
async def update_notification(
    request: NotificationUpdateRequest,
    caller_id: UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    try:
        return await NotificationServices.update_service(caller_id, request, db)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except LookupError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except PermissionError as e:
        raise HTTPException(status_code=403, detail=str(e))
    except Exception as e:
        logger.error("Error in update_notification: %s\n%s", e, traceback.format_exc())
        raise HTTPException(status_code=500, detail="Internal Server Error")
