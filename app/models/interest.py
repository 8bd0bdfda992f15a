# models/interest.py
from sqlalchemy import Column, String, Text, Boolean, ForeignKey, Index, CheckConstraint, text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship
from uuid import uuid4
from app.db.base_class import Base

INTEREST_STATUSES = (
    "pending",       # user has just shown interest
    "under_review",  # agent is evaluating
    "negotiating",   # price discussions ongoing
    "approved",
    "rejected",
    "withdrawn",     # user cancelled the booking
    "finalized",     # the one interest the property is sold to
)


class Interest(Base):
    __tablename__ = "interests"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid4)
    user_id = Column(UUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    # owner of the property when the interest was created; never reassigned
    agent_id = Column(UUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    property_id = Column(UUID(as_uuid=True), ForeignKey("properties.id", ondelete="CASCADE"), nullable=False)
    status = Column(String(20), nullable=False, default="pending")
    is_cancelled = Column(Boolean, nullable=False, default=False)
    withdraw_reason = Column(Text, nullable=True)

    __table_args__ = (
        CheckConstraint(
            "status IN ('pending','under_review','negotiating','approved','rejected','withdrawn','finalized')",
            name="chk_interest_status",
        ),
        # one finalized interest per property
        Index(
            "uq_interest_property_finalized",
            "property_id",
            unique=True,
            postgresql_where=text("status = 'finalized'"),
            sqlite_where=text("status = 'finalized'"),
        ),
        # one live (non-cancelled) interest per user and property
        Index(
            "uq_interest_user_property_active",
            "user_id",
            "property_id",
            unique=True,
            postgresql_where=text("NOT is_cancelled"),
            sqlite_where=text("NOT is_cancelled"),
        ),
        Index("idx_interest_user", "user_id"),
        Index("idx_interest_agent", "agent_id"),
        Index("idx_interest_property", "property_id"),
    )

    # Relationships
    user = relationship("User", foreign_keys=[user_id])
    agent = relationship("User", foreign_keys=[agent_id])
    property = relationship("Property", back_populates="interested_parties")
