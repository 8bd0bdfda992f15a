from typing import List, Optional, Literal, Annotated
from pydantic import BaseModel, Field, StringConstraints
from uuid import UUID
from datetime import datetime

from app.schemas.booking import UserSummary, PropertySummary

MessageText = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]


# --- Requests ---
class AgentChatRequest(BaseModel):
    message: MessageText
    property: UUID


class ThreadReplyRequest(BaseModel):
    notification_id: UUID = Field(alias="notificationId")
    message: MessageText

    model_config = {"populate_by_name": True}


class NotificationUpdateRequest(BaseModel):
    # validated by the service so an unknown type is a 400, not a 422
    type: str
    notification_id: Optional[UUID] = Field(default=None, alias="notificationId")

    model_config = {"populate_by_name": True}


# --- Responses ---
class ThreadMessage(BaseModel):
    id: UUID
    sender: UserSummary
    content: str
    timestamp: datetime

    model_config = {"from_attributes": True}


class NotificationItem(BaseModel):
    id: UUID
    user: UserSummary
    agent: Optional[UserSummary] = None
    property: Optional[PropertySummary] = None
    type: Literal["status", "interest", "message", "booking_cancel"]
    messages: List[ThreadMessage]
    read_by: List[UUID] = Field(alias="readBy")
    deleted_by: List[UUID] = Field(alias="deletedBy")
    notification_for: Literal["agent", "user"] = Field(alias="notificationFor")
    is_read: bool = Field(alias="isRead")
    created_at: datetime
    updated_at: datetime

    model_config = {"populate_by_name": True}
