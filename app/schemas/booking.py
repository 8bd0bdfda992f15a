from typing import List, Optional, Literal
from pydantic import BaseModel, Field
from uuid import UUID
from datetime import datetime


InterestStatus = Literal[
    "pending",
    "under_review",
    "negotiating",
    "approved",
    "rejected",
    "withdrawn",
    "finalized",
]

# Statuses an agent may move an interest to; `withdrawn` only comes from a cancel.
AgentInterestStatus = Literal[
    "under_review",
    "negotiating",
    "approved",
    "rejected",
    "finalized",
]


# --- Requests ---
class BuyNowRequest(BaseModel):
    property: UUID


class InterestStatusUpdateRequest(BaseModel):
    status: AgentInterestStatus
    property: UUID
    user: UUID
    interest_id: UUID = Field(alias="interestId")

    model_config = {"populate_by_name": True}


class CancelBookingRequest(BaseModel):
    property: UUID
    agent: UUID
    message: Optional[str] = None  # stored as withdraw_reason and posted to the thread


# --- Shared sub-schemas ---
class MessageResponse(BaseModel):
    message: str


class UserSummary(BaseModel):
    id: UUID
    full_name: str
    email: str
    phone_number: Optional[str] = None
    profile_image: Optional[str] = None

    model_config = {"from_attributes": True}


class PropertySummary(BaseModel):
    id: UUID
    name: str
    price: int
    property_type: str
    address: Optional[str] = None
    status: str

    model_config = {"from_attributes": True}


# --- My bookings ---
class BookingItem(BaseModel):
    id: UUID
    status: InterestStatus
    is_cancelled: bool
    withdraw_reason: Optional[str] = None
    created_at: datetime
    property: PropertySummary
    agent: UserSummary

    model_config = {"from_attributes": True}


class BookingListResponse(BaseModel):
    status: bool = True
    listings: List[BookingItem]
    has_more: bool = Field(alias="hasMore")
    next_page: Optional[int] = Field(default=None, alias="nextPage")

    model_config = {"populate_by_name": True}


# --- Managed properties ---
class InterestedParty(BaseModel):
    id: UUID
    status: InterestStatus
    is_cancelled: bool
    withdraw_reason: Optional[str] = None
    user: UserSummary

    model_config = {"from_attributes": True}


class ManagedPropertyItem(PropertySummary):
    interested_parties: List[InterestedParty]


class ManagedPropertyListResponse(BaseModel):
    status: bool = True
    listings: List[ManagedPropertyItem]
    has_more: bool = Field(alias="hasMore")
    next_page: Optional[int] = Field(default=None, alias="nextPage")

    model_config = {"populate_by_name": True}
