# models/property.py
from sqlalchemy import Column, String, Integer, Boolean, ForeignKey, Index, CheckConstraint
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship
from uuid import uuid4
from app.db.base_class import Base

PROPERTY_STATUSES = ("pending", "available", "sold")


class Property(Base):
    __tablename__ = "properties"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid4)
    owner_id = Column(UUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    name = Column(String(255), nullable=False)
    price = Column(Integer, nullable=False)
    property_type = Column(String(10), nullable=False, default="sale")  # rent, sale
    address = Column(String(500), nullable=True)
    status = Column(String(20), nullable=False, default="pending")
    is_active = Column(Boolean, nullable=False, default=True)

    __table_args__ = (
        CheckConstraint("property_type IN ('rent','sale')", name="chk_property_type"),
        CheckConstraint("status IN ('pending','available','sold')", name="chk_property_status"),
        Index("idx_property_owner", "owner_id"),
    )

    # Relationships
    owner = relationship("User")
    interested_parties = relationship(
        "Interest",
        back_populates="property",
        order_by="Interest.created_at",
    )
