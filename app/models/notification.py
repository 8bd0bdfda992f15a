# models/notification.py
from sqlalchemy import Column, String, Text, DateTime, ForeignKey, Index, CheckConstraint, UniqueConstraint
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship
from uuid import uuid4
from datetime import datetime
from app.db.base_class import Base

NOTIFICATION_TYPES = ("status", "interest", "message", "booking_cancel")


class Notification(Base):
    """
    One conversation thread per (user, agent, property).

    `type` only records the kind of the latest event. Read and hidden state is
    kept per participant in `notification_reads` / `notification_deletions`.
    """
    __tablename__ = "notifications"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid4)
    user_id = Column(UUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    agent_id = Column(UUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=True)
    property_id = Column(UUID(as_uuid=True), ForeignKey("properties.id", ondelete="CASCADE"), nullable=True)
    type = Column(String(20), nullable=False)

    __table_args__ = (
        CheckConstraint(
            "type IN ('status','interest','message','booking_cancel')",
            name="chk_notification_type",
        ),
        UniqueConstraint("user_id", "agent_id", "property_id", name="uq_notification_thread"),
        Index("idx_notification_user", "user_id"),
        Index("idx_notification_agent", "agent_id"),
    )

    # Relationships
    user = relationship("User", foreign_keys=[user_id])
    agent = relationship("User", foreign_keys=[agent_id])
    property = relationship("Property")
    messages = relationship(
        "NotificationMessage",
        back_populates="notification",
        order_by="NotificationMessage.timestamp",
        cascade="all, delete-orphan",
    )
    reads = relationship("NotificationRead", cascade="all, delete-orphan")
    deletions = relationship("NotificationDeletion", cascade="all, delete-orphan")


class NotificationMessage(Base):
    __tablename__ = "notification_messages"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid4)
    notification_id = Column(UUID(as_uuid=True), ForeignKey("notifications.id", ondelete="CASCADE"), nullable=False)
    sender_id = Column(UUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    content = Column(Text, nullable=False)
    timestamp = Column(DateTime, default=datetime.utcnow, nullable=False)

    __table_args__ = (
        Index("idx_message_notification", "notification_id", "timestamp"),
    )

    notification = relationship("Notification", back_populates="messages")
    sender = relationship("User")


class NotificationRead(Base):
    """`readBy` membership: the user has seen the thread's current state."""
    __tablename__ = "notification_reads"

    notification_id = Column(UUID(as_uuid=True), ForeignKey("notifications.id", ondelete="CASCADE"), primary_key=True)
    user_id = Column(UUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), primary_key=True)


class NotificationDeletion(Base):
    """`deletedBy` membership: the user has hidden the thread for themselves."""
    __tablename__ = "notification_deletions"

    notification_id = Column(UUID(as_uuid=True), ForeignKey("notifications.id", ondelete="CASCADE"), primary_key=True)
    user_id = Column(UUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), primary_key=True)
